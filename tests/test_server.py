"""Tests for MCP tool functions"""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest
from conftest import ROLE_CLAIM, make_token

from nps_mcp import server
from nps_mcp.exceptions import ConfigError, TokenValidationFailed


@pytest.fixture
def mock_client():
    client = Mock()
    client.get_json = AsyncMock(return_value="4.2.1234")
    client.token_provider = Mock()
    client.token_provider.dispatcher.validate_token = AsyncMock(return_value="4.2.1234")
    with patch("nps_mcp.server.get_client", return_value=client):
        yield client


def test_server_created():
    assert server.mcp.name == "nps-mcp"


@pytest.mark.asyncio
async def test_nps_version(mock_client):
    response = await server.nps_version()

    assert response.status == "success"
    assert response.data == {"version": "4.2.1234"}
    mock_client.get_json.assert_awaited_once_with("/api/v1/Version")


@pytest.mark.asyncio
async def test_nps_version_auth_failure(mock_client):
    mock_client.get_json.side_effect = ConfigError("No NPS credentials configured")

    response = await server.nps_version()

    assert response.status == "error"
    assert response.metadata["exception_type"] == "ConfigError"


@pytest.mark.asyncio
async def test_nps_auth_status(mock_client):
    mock_client.token_provider.status_report.return_value = {
        "auth_strategy": "interactive",
        "warnings": ["No role claim in JWT"],
    }

    response = await server.nps_auth_status()

    assert response.status == "success"
    assert response.data["server_version"] == "4.2.1234"
    assert response.suggestions == ["No role claim in JWT"]


@pytest.mark.asyncio
async def test_nps_auth_status_unreachable(mock_client):
    mock_client.token_provider.status_report.return_value = {"auth_strategy": None}
    mock_client.get_json.side_effect = ConfigError("No NPS credentials configured")

    response = await server.nps_auth_status()

    assert response.status == "success"
    assert response.data["server_version"] is None
    assert "Unable to reach NPS" in response.suggestions[0]


@pytest.mark.asyncio
async def test_nps_set_token(mock_client):
    token = make_token(
        expires_in=timedelta(minutes=30),
        unique_name="admin",
        **{ROLE_CLAIM: "Administrator"},
    )
    state = Mock(token=token)
    mock_client.token_provider.set_token.return_value = state

    response = await server.nps_set_token(token)

    assert response.status == "success"
    assert response.data["server_version"] == "4.2.1234"
    assert response.data["username"] == "admin"
    assert response.data["has_admin"] is True
    assert response.suggestions == []
    mock_client.token_provider.set_token.assert_called_once_with(token)


@pytest.mark.asyncio
async def test_nps_set_token_rejected(mock_client):
    mock_client.token_provider.dispatcher.validate_token.side_effect = (
        TokenValidationFailed(401, "Unauthorized")
    )

    response = await server.nps_set_token("stale")

    assert response.status == "error"
    assert response.metadata["status_code"] == 401
    mock_client.token_provider.set_token.assert_not_called()
