from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

from .exceptions import NpsMCPError

# =============================================================================
# UNIFIED RESPONSE MODEL
# =============================================================================
# Single response type for all MCP tools


class Response(BaseModel):
    """Unified response type for all MCP tools."""

    status: Literal["success", "error"] = Field(
        ..., description="Response status indicating outcome"
    )
    message: str = Field(..., description="Human-readable summary of the response")
    data: Any | None = Field(
        None,
        description="Response payload - can be dict, pydantic model, or any serializable type",
    )
    errors: list[str] = Field(
        default_factory=list, description="List of error messages"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Actionable suggestions for the user"
    )
    metadata: dict[str, Any] | None = Field(
        None, description="Additional context and domain-specific information"
    )

    @classmethod
    def from_error(cls, error: Exception) -> "Response":
        """Create Response from any Exception, with potentially helpful info for recovery.

        Upstream status codes and body text are carried through untouched.

        Args:
            error: Any Exception instance

        Returns:
            Response object with error details
        """
        if isinstance(error, NpsMCPError):
            return cls(
                status="error",
                message=error.message,
                errors=error.errors,
                suggestions=error.suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )
        elif isinstance(error, httpx.RequestError):
            metadata = {"exception_type": type(error).__name__}
            try:
                metadata["url"] = str(error.request.url)
            except RuntimeError:
                # request was never attached to the error
                pass

            return cls(
                status="error",
                message=f"Network error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check that the NPS server is reachable",
                    "Verify NPS_URL is correct",
                    "Set NPS_TLS_REJECT=false if the server uses a self-signed certificate",
                ],
                metadata=metadata,
            )
        else:
            return cls(
                status="error",
                message=f"Unexpected error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check server logs for detailed information",
                    "Try again - this may be a temporary issue",
                ],
                metadata={"exception_type": type(error).__name__},
            )


# =============================================================================
# AUTHENTICATION MODELS
# =============================================================================


class AuthStrategy(StrEnum):
    """Mutually exclusive ways of obtaining a bearer token, in precedence order."""

    TOKEN = "token"
    APIKEY = "apikey"
    INTERACTIVE_PROMPT = "interactive-prompt"
    INTERACTIVE = "interactive"


class TokenSummary(BaseModel):
    """Display fields decoded from a bearer token's claims."""

    username: str | None = Field(None, description="Name of the token's user")
    roles: str | None = Field(None, description="Comma-joined role claim")
    has_admin: bool = Field(False, description="Whether an admin role is present")
    expires_at: datetime | None = Field(None, description="Expiry from the exp claim")
    remaining_minutes: int | None = Field(
        None, description="Minutes until expiry, negative once expired"
    )
    issued_at: datetime | None = Field(None, description="Issue time from the iat claim")
    is_mfa: Any | None = Field(None, description="isMFA claim as issued")
    is_local_user: Any | None = Field(None, description="isLocalUser claim as issued")
