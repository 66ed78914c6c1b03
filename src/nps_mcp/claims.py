"""Best-effort JWT claim inspection.

Tokens are decoded WITHOUT signature verification. The NPS server issues and
validates them; TLS plus server-side checks are the security boundary. Claims
read here only feed display and refresh-timing decisions, never access
control.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import jwt

from .consts import ADMIN_ROLE_NAMES, NAME_CLAIM_KEYS, ROLE_CLAIM_KEYS
from .models import TokenSummary

logger = logging.getLogger("nps-mcp.claims")


def decode_claims(token: str) -> dict[str, Any] | None:
    """Decode a token's payload, or return None if it is not a parseable JWT."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug(f"Token is not a decodable JWT: {e}")
        return None


def _first_claim(claims: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = claims.get(key)
        if value:
            return value
    return None


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        return datetime.fromtimestamp(value, UTC)
    except (OverflowError, OSError, ValueError):
        return None


def token_expiry(token: str) -> datetime | None:
    """Return the ``exp`` claim as an aware UTC datetime, if present."""
    claims = decode_claims(token)
    if not claims:
        return None
    return _as_datetime(claims.get("exp"))


def extract_roles(claims: dict[str, Any] | None) -> list[str]:
    """Role claim as a list, whether the token carries one string or many."""
    if not claims:
        return []
    roles = _first_claim(claims, ROLE_CLAIM_KEYS)
    if roles is None:
        return []
    if isinstance(roles, str):
        return [roles]
    return [str(role) for role in roles]


def has_admin_role(token: str) -> bool:
    """True iff the role claim names the administrator role (any case)."""
    roles = extract_roles(decode_claims(token))
    return any(role.lower() in ADMIN_ROLE_NAMES for role in roles)


def extract_username(claims: dict[str, Any] | None) -> str | None:
    """Username from the first present of the name claim URI, unique_name, sub."""
    if not claims:
        return None
    name = _first_claim(claims, NAME_CLAIM_KEYS)
    return str(name) if name is not None else None


def summarize_token(token: str, now: datetime | None = None) -> TokenSummary:
    """Extract the display fields of a token.

    Args:
        token: Bearer token text.
        now: Reference time for ``remaining_minutes``. Defaults to the current time.

    Returns:
        TokenSummary; fields are None where the token does not carry them.
    """
    claims = decode_claims(token)
    summary = TokenSummary(has_admin=has_admin_role(token))
    if not claims:
        return summary

    summary.username = extract_username(claims)
    roles = extract_roles(claims)
    if roles:
        summary.roles = ", ".join(roles)

    summary.expires_at = _as_datetime(claims.get("exp"))
    if summary.expires_at is not None:
        now = now or datetime.now(UTC)
        summary.remaining_minutes = round(
            (summary.expires_at - now).total_seconds() / 60
        )

    summary.issued_at = _as_datetime(claims.get("iat"))
    summary.is_mfa = claims.get("isMFA")
    summary.is_local_user = claims.get("isLocalUser")
    return summary
