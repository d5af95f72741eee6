"""Session restore from session tokens."""

from typing import TYPE_CHECKING

from ..models import BookingError, ErrorCode, Session
from .repositories import SessionRepository

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService


class SessionService:
    """Restores the client session attached to a request token.

    Tokens are issued by the authentication collaborator; this service only
    reads them.
    """

    def __init__(self, db: "DynamoDBService") -> None:
        self.sessions = SessionRepository(db)

    def restore(self, token: str | None) -> Session:
        """Look up the session for ``token``.

        Raises:
            BookingError: AUTH_REQUIRED if the token is missing or unknown
        """
        if not token:
            raise BookingError(ErrorCode.AUTH_REQUIRED)
        session = self.sessions.get(token)
        if session is None:
            raise BookingError(ErrorCode.AUTH_REQUIRED)
        return session
