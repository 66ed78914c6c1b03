"""Authentication management with token refresh."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from .claims import has_admin_role, summarize_token
from .config import Config
from .consts import TOKEN_REFRESH_BUFFER_MINUTES
from .exceptions import AuthRequestFailed, ConfigError, RefreshUnrecoverable
from .models import AuthStrategy
from .retry import RetryingRequester
from .strategies import StrategyDispatcher
from .token_store import TokenState, TokenStore, strip_quotes

logger = logging.getLogger("nps-mcp.auth")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthManager:
    """Authentication token manager.

    Responsibilities:
    - Decide between reusing, refreshing and re-acquiring the cached token
    - Refresh tokens that expire within the safety buffer
    - Collapse concurrent renewals into one in-flight operation
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        *,
        store: TokenStore | None = None,
        requester: RetryingRequester | None = None,
        dispatcher: StrategyDispatcher | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize AuthManager.

        Args:
            config: Config instance with auth settings.
            http_client: HTTP client (for token requests only)
            store: Token store. If None, creates the process's TokenStore.
            requester: Retry policy wrapper. If None, wraps http_client.
            dispatcher: Login strategies. If None, built from config.
            clock: Returns the current aware UTC datetime.
        """
        self.config = config
        self.http_client = http_client
        self.store = store or TokenStore()
        self.requester = requester or RetryingRequester(http_client)
        self._clock = clock
        self.dispatcher = dispatcher or StrategyDispatcher(
            config, self.requester, self.store, clock=clock
        )
        self._inflight: asyncio.Task | None = None

    @property
    def token_state(self) -> TokenState | None:
        return self.store.state

    async def get_valid_token(self) -> str:
        """Get a valid authentication token.

        Returns:
            Valid bearer token string.

        Raises:
            ConfigError: If no strategy can be determined.
            RefreshUnrecoverable: If refresh fails under the token strategy.
            AuthError: If sign-in or validation fails.
        """
        state = self.store.state
        if state is not None and not self._needs_refresh(state):
            return state.token
        return await self._renew_once()

    def _needs_refresh(self, state: TokenState) -> bool:
        """Check if token needs refresh.

        Tokens without an expiry are never refreshed proactively; a 401 seen by
        the API-calling layer clears them instead.
        """
        if state.expires_at is None:
            return False
        buffer = timedelta(minutes=TOKEN_REFRESH_BUFFER_MINUTES)
        return state.expires_at - self._clock() < buffer

    async def _renew_once(self) -> str:
        # concurrent callers share the first caller's renewal
        if self._inflight is None:
            task = asyncio.ensure_future(self._renew())
            self._inflight = task

            def _done(_):
                if self._inflight is task:
                    self._inflight = None

            task.add_done_callback(_done)
        return await asyncio.shield(self._inflight)

    async def _renew(self) -> str:
        state = self.store.state
        if state is None:
            return await self.dispatcher.authenticate()
        if not self._needs_refresh(state):
            return state.token

        try:
            return await self.refresh(state.token)
        except (AuthRequestFailed, httpx.RequestError) as e:
            if self.dispatcher.strategy is AuthStrategy.TOKEN:
                raise RefreshUnrecoverable(
                    f"Token refresh failed and NPS_TOKEN cannot be re-issued: {e}",
                    errors=[str(e)],
                    suggestions=[
                        "Log into NPS in a browser and set NPS_TOKEN to a fresh token",
                        "Or use the nps_set_token tool to provide one",
                    ],
                ) from e
            logger.warning(f"Token refresh failed, re-authenticating: {e}")
            return await self.dispatcher.authenticate()

    async def refresh(self, current_token: str) -> str:
        """Exchange the current token for a fresh one at /api/v1/UserToken.

        Returns:
            Refreshed bearer token, now cached.

        Raises:
            AuthRequestFailed: On any non-2xx status, with the body verbatim.
            httpx.RequestError: For network errors.
        """
        logger.debug("Refreshing authentication token")
        response = await self.requester.request(
            "GET",
            self.config.refresh_url,
            headers={"Authorization": f"Bearer {current_token}"},
        )
        if not response.is_success:
            raise AuthRequestFailed(response.status_code, response.text, "UserToken")

        state = self.store.replace(strip_quotes(response.text), self._clock())
        logger.info("Token refreshed successfully")
        return state.token

    def set_token(self, token: str) -> TokenState:
        """Store an externally obtained token as the current state."""
        state = self.store.replace(token, self._clock())
        logger.info("Token set externally")
        return state

    def clear_token(self) -> None:
        """Drop the cached token so the next request re-authenticates."""
        logger.debug("Clearing cached token")
        self.store.clear()

    def status_report(self) -> dict[str, Any]:
        """Describe the strategy, token age, expiry and claims for diagnostics."""
        report: dict[str, Any] = {}
        try:
            report["auth_strategy"] = str(self.dispatcher.strategy)
        except ConfigError as e:
            report["auth_strategy"] = None
            report["config_error"] = e.message

        state = self.store.state
        if state is None:
            report["token"] = "Not yet acquired (will authenticate on first API call)"
            return report

        now = self._clock()
        summary = summarize_token(state.token, now=now)
        report["token_age_minutes"] = round(
            (now - state.acquired_at).total_seconds() / 60
        )
        if state.expires_at is None:
            report["token_expiry"] = "Unknown (no exp claim in JWT)"
        elif state.expires_at > now:
            report["token_expiry"] = f"in {summary.remaining_minutes} minutes"
        else:
            report["token_expiry"] = (
                f"EXPIRED ({abs(summary.remaining_minutes)} minutes ago)"
            )
        report["claims"] = summary.model_dump(mode="json")

        warnings = []
        if summary.roles is None:
            warnings.append("No role claim in JWT")
        if report["auth_strategy"] == AuthStrategy.APIKEY and not has_admin_role(
            state.token
        ):
            warnings.append(
                "API key token is missing admin role claims (known NPS defect); "
                "most API endpoints will return 403 Forbidden. Switch to "
                "interactive auth or use NPS_TOKEN from a browser login."
            )
        report["warnings"] = warnings
        return report
