"""NPS MCP custom exceptions.

Exception Design Principles:
1. Use these custom exceptions only when additional useful context can be provided
2. Never mask upstream status codes or response bodies; they are the operator's
   primary signal when credentials or the server are misbehaving
3. Split on domain of actionable information:
   - Recoverable by user reconfiguration outside session (ConfigError,
     RefreshUnrecoverable, MfaError)
   - Upstream rejection with verbatim diagnostics (AuthRequestFailed,
     TokenValidationFailed, NpsApiError)
"""


class NpsMCPError(Exception):
    """Base exception for all NPS MCP errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    All NPS MCP custom exceptions inherit from this base class.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize NpsMCPError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(NpsMCPError):
    """Application configuration errors - recoverable by user reconfiguration.

    Raised when no usable authentication strategy can be determined, or an
    explicitly requested strategy is unknown or lacks its credential. Fatal
    for the process; never retried.
    """

    pass


class AuthError(NpsMCPError):
    """Base class for failures while obtaining or refreshing a bearer token."""

    pass


class AuthRequestFailed(AuthError):
    """A sign-in or refresh call returned a non-2xx status.

    Carries the HTTP status and the raw response body verbatim.
    """

    def __init__(self, status_code: int, body: str, endpoint: str, **kwargs):
        super().__init__(
            f"NPS {endpoint} failed ({status_code}): {body}",
            context={"status_code": status_code, "endpoint": endpoint},
            **kwargs,
        )
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class TokenValidationFailed(AuthError):
    """A pre-supplied or API-key-derived token failed the probe check."""

    def __init__(self, status_code: int, body: str = "", **kwargs):
        kwargs.setdefault(
            "suggestions",
            [
                "The token may be expired or invalid",
                "Log into NPS in a browser and copy a fresh token from "
                "sessionStorage.getItem('Token'), then set NPS_TOKEN",
            ],
        )
        super().__init__(
            f"Token validation failed (HTTP {status_code})",
            errors=[body] if body else None,
            context={"status_code": status_code},
            **kwargs,
        )
        self.status_code = status_code
        self.body = body


class RefreshUnrecoverable(AuthError):
    """Refresh failed under the token strategy, which has nothing to fall back on."""

    pass


class MfaError(AuthError):
    """The interactive prompt could not obtain a one-time code."""

    pass


class MfaTimeout(MfaError):
    """No code was entered on the terminal before the prompt timed out."""

    pass


class MfaChannelUnavailable(MfaError):
    """No interactive terminal could be opened for the prompt."""

    pass


class NpsApiError(NpsMCPError):
    """Structured error for NPS API failures seen by the API-calling layer."""

    def __init__(self, status_code: int, api_message: str, endpoint: str):
        super().__init__(
            f"NPS API error {status_code} on {endpoint}: {api_message}",
            errors=[api_message],
            context={"status_code": status_code, "endpoint": endpoint},
        )
        self.status_code = status_code
        self.api_message = api_message
        self.endpoint = endpoint


class MissingRoleClaimWarning(UserWarning):
    """API-key token accepted without an admin role claim.

    A known upstream defect: such tokens authenticate, but most endpoints
    answer 403 Forbidden.
    """

    pass
