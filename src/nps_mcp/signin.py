"""Two-step NPS sign-in: credentials, then one-time code."""

import logging

import httpx

from .config import Config
from .exceptions import AuthRequestFailed
from .retry import RetryingRequester
from .token_store import strip_quotes

logger = logging.getLogger("nps-mcp.signin")


def _token_from(response: httpx.Response, endpoint: str) -> str:
    if not response.is_success:
        raise AuthRequestFailed(response.status_code, response.text, endpoint)
    return strip_quotes(response.text)


class SigninFlow:
    """Calls the two sign-in endpoints.

    The steps are independent; callers chain them, passing the token from
    ``initial_signin`` into ``complete_signin``.
    """

    def __init__(self, config: Config, requester: RetryingRequester):
        self.config = config
        self.requester = requester

    async def initial_signin(self, login: str, secret: str) -> str:
        """POST the login and password (or API key) to /signinBody.

        Returns:
            Initial bearer token, unquoted.

        Raises:
            AuthRequestFailed: On any non-2xx status, with the body verbatim.
            httpx.RequestError: For network errors.
        """
        logger.debug(f"Signing in as {login}")
        response = await self.requester.request(
            "POST",
            self.config.signin_url,
            json={"Login": login, "Password": secret},
        )
        return _token_from(response, "signinBody")

    async def complete_signin(self, initial_token: str, code: str) -> str:
        """POST the one-time code to /signin2fa, authorized by the initial token.

        Returns:
            Final bearer token, unquoted.

        Raises:
            AuthRequestFailed: On any non-2xx status, with the body verbatim.
            httpx.RequestError: For network errors.
        """
        logger.debug("Submitting one-time code")
        response = await self.requester.request(
            "POST",
            self.config.signin_2fa_url,
            json=code,
            headers={"Authorization": f"Bearer {initial_token}"},
        )
        return _token_from(response, "signin2fa")
