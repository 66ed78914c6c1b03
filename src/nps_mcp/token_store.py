"""Process-wide bearer token state."""

import logging
from dataclasses import dataclass
from datetime import datetime

from .claims import token_expiry

logger = logging.getLogger("nps-mcp.token_store")


def strip_quotes(text: str) -> str:
    """Remove one layer of JSON string quoting from token text."""
    text = text.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


@dataclass(frozen=True)
class TokenState:
    """A cached bearer token.

    ``expires_at`` comes only from the token's ``exp`` claim and is None when
    the token is not a parseable JWT or has no expiry.
    """

    token: str
    acquired_at: datetime
    expires_at: datetime | None = None


class TokenStore:
    """Holds the single authoritative TokenState.

    Exactly one instance exists per running process: it is created by, and
    owned by, the process-wide AuthManager (see ``client.get_client``).
    States are replaced wholesale, never mutated.
    """

    def __init__(self):
        self._state: TokenState | None = None

    @property
    def state(self) -> TokenState | None:
        return self._state

    def replace(self, token: str, acquired_at: datetime) -> TokenState:
        """Store a new token, deriving its expiry from the claims."""
        token = strip_quotes(token)
        self._state = TokenState(
            token=token,
            acquired_at=acquired_at,
            expires_at=token_expiry(token),
        )
        if self._state.expires_at is None:
            logger.debug("Stored token has no exp claim; proactive refresh disabled")
        return self._state

    def clear(self) -> None:
        self._state = None
