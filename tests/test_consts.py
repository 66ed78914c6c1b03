from nps_mcp.consts import (
    PACKAGE_VERSION,
    REFRESH_URL_PATH,
    SERVER_NAME,
    SIGNIN_2FA_URL_PATH,
    SIGNIN_URL_PATH,
    TOKEN_REFRESH_BUFFER_MINUTES,
    USER_AGENT,
    VERSION_URL_PATH,
)


class TestPackageConstants:
    """Test package constants are properly defined"""

    def test_package_version_defined(self):
        """Test that package version is defined"""
        assert isinstance(PACKAGE_VERSION, str)
        assert "." in PACKAGE_VERSION  # Should be semantic version

    def test_user_agent_format(self):
        """Test that user agent follows expected format"""
        assert USER_AGENT == f"{SERVER_NAME}/{PACKAGE_VERSION}"

    def test_endpoint_paths_are_exact(self):
        """Endpoint paths are case-sensitive on the NPS server"""
        assert SIGNIN_URL_PATH == "/signinBody"
        assert SIGNIN_2FA_URL_PATH == "/signin2fa"
        assert REFRESH_URL_PATH == "/api/v1/UserToken"
        assert VERSION_URL_PATH == "/api/v1/Version"

    def test_refresh_buffer(self):
        assert TOKEN_REFRESH_BUFFER_MINUTES == 7
