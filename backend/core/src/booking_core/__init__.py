"""Core booking engine for the rstays marketplace backend.

Inventory ledgers, availability resolution, pricing, booking lifecycle and
cancellation policy, plus the collaborator services they depend on.
"""

__version__ = "0.1.0"
