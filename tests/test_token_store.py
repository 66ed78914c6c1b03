"""Tests for TokenStore"""

import dataclasses
from datetime import timedelta

import pytest
from conftest import NOW, make_token

from nps_mcp.token_store import TokenStore


class TestTokenStore:

    def test_starts_empty(self):
        assert TokenStore().state is None

    def test_replace_derives_expiry(self):
        store = TokenStore()
        token = make_token(expires_in=timedelta(minutes=30))

        state = store.replace(token, NOW)

        assert store.state is state
        assert state.token == token
        assert state.acquired_at == NOW
        assert state.expires_at == NOW + timedelta(minutes=30)

    def test_replace_unquotes(self):
        store = TokenStore()
        assert store.replace('"abc.def.ghi"', NOW).token == "abc.def.ghi"
        assert store.state.expires_at is None

    def test_replace_is_wholesale(self):
        store = TokenStore()
        first = store.replace(make_token(sub="a"), NOW)
        second = store.replace("opaque", NOW + timedelta(minutes=1))

        assert store.state is second
        assert first.token != second.token
        assert second.expires_at is None
        with pytest.raises(dataclasses.FrozenInstanceError):
            second.token = "mutated"

    def test_clear(self):
        store = TokenStore()
        store.replace("opaque", NOW)
        store.clear()
        assert store.state is None
