"""NPS MCP server implementation."""

import logging

from mcp.server.fastmcp import FastMCP

from .claims import summarize_token
from .client import get_client
from .config import get_config, setup_logging
from .consts import SERVER_NAME, VERSION_URL_PATH
from .models import Response

logger = logging.getLogger("nps-mcp.server")

mcp = FastMCP(
    name=SERVER_NAME,
    instructions="""
    Netwrix Privilege Secure (NPS) MCP server.

    Start with nps_auth_status to check the authentication strategy and token
    health. If authentication fails, use nps_set_token with a bearer token
    copied from a browser login.
    """,
    log_level=get_config().log_level,
)


@mcp.tool()
async def nps_version() -> Response:
    """Get the NPS server version.

    Use this to verify connectivity and authentication, and to check which
    version of Netwrix Privilege Secure is running.
    """
    logger.info("Fetching NPS server version")

    try:
        version = await get_client().get_json(VERSION_URL_PATH)
        return Response(
            status="success",
            message=f"NPS Server Version: {version}",
            data={"version": version},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def nps_auth_status() -> Response:
    """Diagnose authentication status.

    Shows the auth strategy, token age and expiry, JWT claims (username,
    role, MFA) and whether the token carries admin privileges. Essential for
    debugging 403 errors.
    """
    logger.info("Reporting authentication status")

    try:
        client = get_client()
        report = client.token_provider.status_report()
        suggestions = list(report.get("warnings", []))
        try:
            report["server_version"] = await client.get_json(VERSION_URL_PATH)
        except Exception as e:
            logger.warning(f"Version probe failed during status report: {e}")
            report["server_version"] = None
            suggestions.append(
                f"Unable to reach NPS (authentication or connectivity issue): {e}"
            )

        return Response(
            status="success",
            message=f"Auth strategy: {report.get('auth_strategy') or 'none'}",
            data=report,
            suggestions=suggestions,
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def nps_set_token(token: str) -> Response:
    """Manually set an NPS bearer token.

    Use this with a token from browser DevTools
    (sessionStorage.getItem('Token')), a previous session, or another source.
    The token is validated against the NPS server before it is stored.

    Args:
        token: NPS bearer token (JWT)
    """
    logger.info("Validating externally supplied token")

    try:
        manager = get_client().token_provider
        version = await manager.dispatcher.validate_token(token)
        state = manager.set_token(token)
        summary = summarize_token(state.token)

        suggestions = []
        if not summary.has_admin:
            suggestions.append(
                "Token has no admin role - most API calls will fail with 403"
            )
        return Response(
            status="success",
            message="Token accepted and stored",
            data={"server_version": version, **summary.model_dump(mode="json")},
            suggestions=suggestions,
        )
    except Exception as e:
        return Response.from_error(e)


def main() -> None:
    """Run the MCP server."""
    setup_logging(get_config().log_level)
    logger.info("Starting NPS MCP server (stdio transport)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
