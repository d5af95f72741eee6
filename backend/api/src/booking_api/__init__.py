"""FastAPI application exposing the rstays booking engine over HTTP and WebSocket."""

__version__ = "0.1.0"
