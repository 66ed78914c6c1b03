"""High-value constants for the NPS MCP package."""

# Package metadata
PACKAGE_VERSION = "0.1.0"
SERVER_NAME = "nps-mcp"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
SIGNIN_URL_PATH = "/signinBody"
SIGNIN_2FA_URL_PATH = "/signin2fa"
REFRESH_URL_PATH = "/api/v1/UserToken"
VERSION_URL_PATH = "/api/v1/Version"

# JWT claim keys, tried in order
NAME_CLAIM_KEYS = (
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name",
    "unique_name",
    "sub",
)
ROLE_CLAIM_KEYS = (
    "http://schemas.microsoft.com/ws/2008/06/identity/claims/role",
    "role",
)
ADMIN_ROLE_NAMES = frozenset({"administrator", "admin"})

# Business logic consts
TOKEN_REFRESH_BUFFER_MINUTES = 7  # refresh 7min early
DEFAULT_MFA_CODE = "000000"
MFA_PROMPT_TIMEOUT_SECONDS = 120
MAX_REQUEST_ATTEMPTS = 3
RETRYABLE_STATUS_CODE = 500
TTY_DEVICE = "/dev/tty"
