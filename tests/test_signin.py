"""Tests for the two-step sign-in"""

import json

import pytest
from conftest import make_config

from nps_mcp.exceptions import AuthRequestFailed
from nps_mcp.retry import RetryingRequester
from nps_mcp.signin import SigninFlow
from nps_mcp.token_store import strip_quotes


@pytest.mark.parametrize(
    "body,expected",
    [
        ('"abc.def.ghi"', "abc.def.ghi"),
        ("abc.def.ghi", "abc.def.ghi"),
        ('"abc.def.ghi"\n', "abc.def.ghi"),
        ('""quoted""', '"quoted"'),
        ('"', '"'),
    ],
)
def test_strip_quotes(body, expected):
    assert strip_quotes(body) == expected


class TestSigninFlow:

    @pytest.fixture
    def signin(self, http_client, fake_sleep):
        config = make_config(username="admin", password="Temp123!")
        return SigninFlow(config, RetryingRequester(http_client, sleep=fake_sleep))

    @pytest.mark.asyncio
    async def test_initial_signin_posts_credentials(self, signin, fake_nps):
        fake_nps.add("POST", "/signinBody", (200, '"tok1"'))

        token = await signin.initial_signin("admin", "Temp123!")

        assert token == "tok1"
        request = fake_nps.requests[0]
        assert str(request.url) == "https://nps.test:6500/signinBody"
        assert json.loads(request.content) == {"Login": "admin", "Password": "Temp123!"}
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_complete_signin_posts_code_as_json_string(self, signin, fake_nps):
        fake_nps.add("POST", "/signin2fa", (200, '"tok2.payload.sig"'))

        token = await signin.complete_signin("tok1", "000000")

        assert token == "tok2.payload.sig"
        request = fake_nps.requests[0]
        assert json.loads(request.content) == "000000"
        assert request.content == b'"000000"'
        assert request.headers["Authorization"] == "Bearer tok1"

    @pytest.mark.asyncio
    async def test_bare_token_body_accepted(self, signin, fake_nps):
        fake_nps.add("POST", "/signinBody", (200, "bare-token"))
        assert await signin.initial_signin("admin", "x") == "bare-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403])
    async def test_rejection_keeps_status_and_body(self, signin, fake_nps, status):
        body = '{"message":"Invalid username or password"}'
        fake_nps.add("POST", "/signinBody", (status, body))

        with pytest.raises(AuthRequestFailed) as exc_info:
            await signin.initial_signin("admin", "wrong")

        assert exc_info.value.status_code == status
        assert exc_info.value.body == body
        assert body in str(exc_info.value)
        assert len(fake_nps.requests) == 1

    @pytest.mark.asyncio
    async def test_persistent_500_surfaces_after_backoff(
        self, signin, fake_nps, fake_sleep
    ):
        fake_nps.add("POST", "/signinBody", (500, "Internal Server Error"))

        with pytest.raises(AuthRequestFailed) as exc_info:
            await signin.initial_signin("admin", "Temp123!")

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "Internal Server Error"
        assert len(fake_nps.requests) == 3
        assert fake_sleep.delays == [1, 2]

    @pytest.mark.asyncio
    async def test_complete_signin_rejection(self, signin, fake_nps):
        fake_nps.add("POST", "/signin2fa", (401, "MFA code rejected"))

        with pytest.raises(AuthRequestFailed) as exc_info:
            await signin.complete_signin("tok1", "999999")

        assert exc_info.value.endpoint == "signin2fa"
        assert exc_info.value.body == "MFA code rejected"
