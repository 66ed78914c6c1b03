"""Protocol definitions for dependency injection and interface contracts."""

from typing import Protocol


class TokenProvider(Protocol):
    """Protocol for authentication token providers."""

    async def get_valid_token(self) -> str:
        """Get a valid authentication token.

        Returns:
            Valid bearer token string.

        Raises:
            ConfigError: If no strategy can be determined.
            AuthError: If a token cannot be obtained.
        """
        ...

    def clear_token(self) -> None:
        """Invalidate the cached token after the server rejects it."""
        ...
