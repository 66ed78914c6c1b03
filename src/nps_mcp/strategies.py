"""Login strategy selection and execution."""

import logging
import warnings
from collections.abc import Callable
from datetime import UTC, datetime
from functools import cached_property

from .claims import has_admin_role
from .config import Config
from .exceptions import ConfigError, MissingRoleClaimWarning, TokenValidationFailed
from .mfa import MfaPrompt
from .models import AuthStrategy
from .retry import RetryingRequester
from .signin import SigninFlow
from .token_store import TokenStore, strip_quotes

logger = logging.getLogger("nps-mcp.strategies")

STRATEGY_EXAMPLES = [
    'token: NPS_TOKEN="eyJhbGciOi..." (bearer token from a browser login)',
    'apikey: NPS_USERNAME="svc-app" NPS_API_KEY="<application user key>"',
    'interactive-prompt: NPS_USERNAME="admin" NPS_PASSWORD="Temp123!" NPS_MFA_PROMPT=true',
    'interactive: NPS_USERNAME="admin" NPS_PASSWORD="Temp123!" NPS_MFA_CODE="000000"',
]

# credential fields each strategy cannot run without
REQUIRED_FIELDS = {
    AuthStrategy.TOKEN: ("token",),
    AuthStrategy.APIKEY: ("username", "api_key"),
    AuthStrategy.INTERACTIVE_PROMPT: ("username", "password"),
    AuthStrategy.INTERACTIVE: ("username", "password"),
}


def select_strategy(config: Config) -> AuthStrategy:
    """Pick the one strategy the configured credentials allow.

    Precedence: pre-supplied token, API key, interactive with prompt,
    interactive with static code. An explicit ``auth_strategy`` wins.

    Raises:
        ConfigError: If the override is unknown, or no strategy has its credentials.
    """
    if config.auth_strategy:
        try:
            strategy = AuthStrategy(config.auth_strategy.strip().lower())
        except ValueError as e:
            raise ConfigError(
                f"Unknown auth strategy '{config.auth_strategy}'",
                suggestions=STRATEGY_EXAMPLES,
                context={"auth_strategy": config.auth_strategy},
            ) from e
    elif config.token:
        strategy = AuthStrategy.TOKEN
    elif config.api_key:
        strategy = AuthStrategy.APIKEY
    elif config.mfa_prompt and config.password:
        strategy = AuthStrategy.INTERACTIVE_PROMPT
    elif config.password:
        strategy = AuthStrategy.INTERACTIVE
    else:
        raise ConfigError(
            "No NPS credentials configured. Set one of the following:",
            suggestions=STRATEGY_EXAMPLES,
        )

    missing = [f for f in REQUIRED_FIELDS[strategy] if not getattr(config, f)]
    if missing:
        raise ConfigError(
            f"Auth strategy '{strategy}' requires "
            + ", ".join(f"NPS_{f.upper()}" for f in missing),
            suggestions=STRATEGY_EXAMPLES,
            context={"auth_strategy": str(strategy), "missing": missing},
        )
    return strategy


class StrategyDispatcher:
    """Runs exactly one login strategy and caches its token.

    The strategy is derived once, on first use, from the config. No strategy
    ever falls back to another.
    """

    def __init__(
        self,
        config: Config,
        requester: RetryingRequester,
        store: TokenStore,
        *,
        signin: SigninFlow | None = None,
        mfa_prompt: MfaPrompt | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.requester = requester
        self.store = store
        self.signin = signin or SigninFlow(config, requester)
        self.mfa_prompt = mfa_prompt or MfaPrompt(
            timeout_seconds=config.mfa_timeout_seconds
        )
        self._clock = clock or (lambda: datetime.now(UTC))
        self._flows = {
            AuthStrategy.TOKEN: self._authenticate_token,
            AuthStrategy.APIKEY: self._authenticate_apikey,
            AuthStrategy.INTERACTIVE_PROMPT: self._authenticate_interactive_prompt,
            AuthStrategy.INTERACTIVE: self._authenticate_interactive,
        }

    @cached_property
    def strategy(self) -> AuthStrategy:
        return select_strategy(self.config)

    async def authenticate(self) -> str:
        """Obtain a fresh token with the active strategy and cache it.

        Returns:
            Bearer token.

        Raises:
            ConfigError: If no strategy can be determined.
            AuthRequestFailed: If a sign-in call is rejected.
            TokenValidationFailed: If a pre-supplied token fails the probe.
            MfaError: If the terminal prompt cannot produce a code.
            httpx.RequestError: For network errors.
        """
        strategy = self.strategy
        flow = self._flows[strategy]

        logger.info(f"Authenticating with '{strategy}' strategy")
        token = await flow()
        state = self.store.replace(token, self._clock())
        logger.info(
            f"Authenticated; token expires at {state.expires_at or 'unknown'}"
        )
        return state.token

    async def validate_token(self, token: str) -> str:
        """Check a token against the lightweight version endpoint.

        Returns:
            Server version text.

        Raises:
            TokenValidationFailed: On any non-2xx status.
            httpx.RequestError: For network errors.
        """
        response = await self.requester.request(
            "GET",
            self.config.version_url,
            headers={"Authorization": f"Bearer {strip_quotes(token)}"},
        )
        if not response.is_success:
            raise TokenValidationFailed(response.status_code, response.text)
        return strip_quotes(response.text)

    async def _authenticate_token(self) -> str:
        version = await self.validate_token(self.config.token)
        logger.info(f"Pre-supplied token accepted by NPS {version}")
        return strip_quotes(self.config.token)

    async def _authenticate_apikey(self) -> str:
        token = await self.signin.initial_signin(
            self.config.username, self.config.api_key
        )
        if not has_admin_role(token):
            message = (
                "API key token has no admin role claim (known NPS defect); "
                "most API endpoints will return 403 Forbidden. "
                "Switch to interactive auth or set NPS_TOKEN from a browser login."
            )
            logger.warning(message)
            warnings.warn(message, MissingRoleClaimWarning, stacklevel=2)
        return token

    async def _authenticate_interactive_prompt(self) -> str:
        # no terminal means no code; fail before spending a sign-in
        self.mfa_prompt.check_available()
        initial_token = await self.signin.initial_signin(
            self.config.username, self.config.password
        )
        code = await self.mfa_prompt.prompt_for_code()
        return await self.signin.complete_signin(initial_token, code)

    async def _authenticate_interactive(self) -> str:
        initial_token = await self.signin.initial_signin(
            self.config.username, self.config.password
        )
        return await self.signin.complete_signin(initial_token, self.config.mfa_code)
