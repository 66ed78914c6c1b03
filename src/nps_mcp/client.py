"""NPS client: handles low-level API calls."""

import json
import logging
from functools import cache
from typing import Any

import httpx

from .auth import AuthManager
from .config import Config, get_config
from .consts import USER_AGENT
from .exceptions import NpsApiError
from .protocols import TokenProvider

logger = logging.getLogger("nps-mcp.client")


def _error_message(text: str) -> str:
    """Pull the human-readable message out of an NPS error body."""
    try:
        body = json.loads(text)
    except ValueError:
        return text
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or body.get("title") or text
    return text


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class NpsClient:
    """NPS API client with authentication.

    Responsibilities:
    - Attach bearer tokens and re-authenticate once on 401
    - Turn non-2xx responses into NpsApiError with the upstream message
    - Parse JSON bodies, falling back to raw text
    """

    def __init__(
        self,
        config: Config | None = None,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize NpsClient.

        Args:
            config: Config instance. If None, uses get_config().
            token_provider: Authentication token provider. If None, creates AuthManager.
            http_client: HTTP client. If None, creates a new one.
        """
        self.config = config or get_config()

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=self.config.timeout_seconds,
            verify=self.config.tls_reject,
            follow_redirects=True,
        )

        self.token_provider = token_provider or AuthManager(
            self.config, self.http_client
        )

        logger.info(f"NPS client created for {self.config.url}")

    async def __aenter__(self) -> "NpsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.http_client.aclose()

    def build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Join path onto the base URL, dropping None-valued query params."""
        query = {k: _param_value(v) for k, v in (params or {}).items() if v is not None}
        return str(httpx.URL(f"{self.config.url}{path}", params=query))

    async def _send(
        self, method: str, url: str, token: str, body: Any
    ) -> httpx.Response:
        kwargs = {"headers": {"Authorization": f"Bearer {token}"}}
        if body is not None:
            kwargs["json"] = body
        return await self.http_client.request(method, url, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Make an authenticated request to the NPS API.

        Args:
            method: HTTP method.
            path: API path, e.g. "/api/v1/Version".
            params: Query parameters; None values are omitted.
            body: JSON-serializable request body.

        Returns:
            Parsed JSON, raw text if the body is not JSON, or None if empty.

        Raises:
            ConfigError: From auth if there is a config issue.
            AuthError: From auth if a token cannot be obtained.
            NpsApiError: For non-2xx responses after the 401 retry.
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        url = self.build_url(path, params)

        token = await self.token_provider.get_valid_token()
        logger.debug(f"{method} {url}")
        response = await self._send(method, url, token, body)

        if response.status_code == 401:
            logger.info(f"{method} {path} returned 401, re-authenticating once")
            self.token_provider.clear_token()
            token = await self.token_provider.get_valid_token()
            response = await self._send(method, url, token, body)

        if not response.is_success:
            raise NpsApiError(
                response.status_code, _error_message(response.text), path
            )

        logger.debug(f"{method} {url} successful")
        if not response.text:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get_json(self, path: str, **params) -> Any:
        """GET an API path with authentication."""
        return await self.request("GET", path, params=params)

    async def post_json(self, path: str, body: Any = None, **params) -> Any:
        """POST a JSON body to an API path with authentication."""
        return await self.request("POST", path, params=params, body=body)


@cache
def get_client() -> NpsClient:
    """Get the cached, process-wide NpsClient.

    Its AuthManager owns the process's only TokenStore.

    Raises:
        No exceptions raised directly.
        May propagate exceptions from Config() initialization via get_config().
    """
    return NpsClient()
