"""Client session restored from a session token."""

from pydantic import BaseModel

from .enums import SessionMode


class Session(BaseModel):
    token: str
    uid: str
    language: str = "en"
    currency: str = "USD"
    mode: SessionMode = SessionMode.GUEST
    timezone: str | None = None
