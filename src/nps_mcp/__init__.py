"""NPS MCP Server Package

A Model Context Protocol (MCP) server for Netwrix Privilege Secure, with
bearer token lifecycle management across four login strategies.
"""

from .auth import AuthManager
from .client import NpsClient, get_client
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    AuthError,
    AuthRequestFailed,
    ConfigError,
    MfaChannelUnavailable,
    MfaError,
    MfaTimeout,
    MissingRoleClaimWarning,
    NpsApiError,
    NpsMCPError,
    RefreshUnrecoverable,
    TokenValidationFailed,
)
from .models import AuthStrategy, Response

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "Config",
    "NpsClient",
    "AuthManager",
    "AuthStrategy",
    "Response",
    "NpsMCPError",
    "ConfigError",
    "AuthError",
    "AuthRequestFailed",
    "TokenValidationFailed",
    "RefreshUnrecoverable",
    "MfaError",
    "MfaTimeout",
    "MfaChannelUnavailable",
    "MissingRoleClaimWarning",
    "NpsApiError",
]
