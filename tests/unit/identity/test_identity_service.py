"""Tests for session token detection, issuing and cookie delivery."""

from datetime import UTC, datetime, timedelta

import pytest

from persistent_session.config import Config
from persistent_session.core.core import Core
from persistent_session.core.modules.identity.models import ActiveSession, CookieParams, NoSession, SessionContext
from persistent_session.core.modules.identity.transport import MemoryCookieTransport
from persistent_session.errors import TransportUnavailableError
from tests.fakes import FakeDatabase


class TestIsActive:
    def test_fresh_client_is_inactive(self, identity, ctx):
        assert identity.is_active(ctx) is False

    def test_inbound_cookie_makes_session_active(self, identity):
        ctx = SessionContext(transport=MemoryCookieTransport({"session-id": "abc123"}))
        assert identity.is_active(ctx) is True

    def test_cached_token_makes_session_active(self, identity, ctx):
        identity.set_id(ctx, "abc123")
        assert identity.is_active(ctx) is True

    def test_empty_cookie_is_not_a_session(self, identity):
        ctx = SessionContext(transport=MemoryCookieTransport({"session-id": ""}))
        assert identity.is_active(ctx) is False

    def test_check_has_no_side_effects(self, identity, ctx, transport, collection):
        identity.is_active(ctx)
        assert ctx.token is None
        assert transport.outbound == []
        assert collection.calls == []

    def test_without_transport_raises(self, identity):
        with pytest.raises(TransportUnavailableError):
            identity.is_active(SessionContext())

    def test_cached_token_needs_no_transport(self, identity):
        assert identity.is_active(SessionContext(token="abc123")) is True


class TestOpen:
    def test_issues_token_and_cookie(self, identity, ctx, transport):
        state = identity.open(ctx)

        assert isinstance(state, ActiveSession)
        assert state.is_new is True
        assert ctx.token == state.token
        assert len(transport.outbound) == 1
        cookie = transport.outbound[0]
        assert cookie.name == "session-id"
        assert cookie.value == state.token
        assert cookie.httponly is True
        assert cookie.secure is True

    def test_is_idempotent(self, identity, ctx, transport):
        """Test that opening twice issues at most one token and cookie."""
        first = identity.open(ctx)
        second = identity.open(ctx)

        assert first.token == second.token
        assert second.is_new is False
        assert len(transport.outbound) == 1

    def test_existing_cookie_is_reused(self, identity):
        transport = MemoryCookieTransport({"session-id": "abc123"})
        ctx = SessionContext(transport=transport)

        state = identity.open(ctx)

        assert state == ActiveSession(token="abc123", is_new=False)
        assert ctx.token == "abc123"
        assert transport.outbound == []

    def test_without_transport_raises(self, identity):
        with pytest.raises(TransportUnavailableError):
            identity.open(SessionContext())

    def test_does_not_touch_database(self, identity, ctx, collection):
        identity.open(ctx)
        assert collection.calls == []

    def test_tokens_are_unique(self, identity):
        tokens = {identity.open(SessionContext(transport=MemoryCookieTransport())).token for _ in range(100)}
        assert len(tokens) == 100


class TestGetId:
    def test_returns_none_without_creating(self, identity, ctx, transport):
        assert identity.get_id(ctx) is None
        assert transport.outbound == []
        assert ctx.token is None

    def test_reads_and_caches_inbound_cookie(self, identity):
        transport = MemoryCookieTransport({"session-id": "abc123"})
        ctx = SessionContext(transport=transport)

        assert identity.get_id(ctx) == "abc123"
        transport.inbound.clear()
        assert identity.get_id(ctx) == "abc123"

    def test_cached_token_wins_over_cookie(self, identity):
        ctx = SessionContext(transport=MemoryCookieTransport({"session-id": "from-cookie"}))
        identity.set_id(ctx, "adopted")
        assert identity.get_id(ctx) == "adopted"


class TestSetId:
    def test_does_not_write_cookie(self, identity, ctx, transport):
        identity.set_id(ctx, "abc123")
        assert transport.outbound == []
        assert ctx.token == "abc123"


class TestState:
    def test_no_session(self, identity, ctx):
        assert identity.state(ctx) == NoSession()

    def test_active_session(self, identity, ctx):
        identity.set_id(ctx, "abc123")
        assert identity.state(ctx) == ActiveSession(token="abc123")


class TestBuildCookie:
    def test_default_expiry_is_five_years(self, identity):
        before = datetime.now(UTC)
        cookie = identity.build_cookie("abc123")

        assert cookie.max_age is None
        assert cookie.expires is not None
        assert before + timedelta(days=365 * 5) <= cookie.expires <= datetime.now(UTC) + timedelta(days=365 * 5)

    def test_lifetime_replaces_default_expiry(self, identity):
        identity.set_cookie_params({"lifetime": 3600})
        cookie = identity.build_cookie("abc123")

        assert cookie.max_age == 3600
        assert cookie.expires is None

    def test_configured_expires_is_kept(self, identity):
        expires = datetime(2030, 1, 1, tzinfo=UTC)
        identity.set_cookie_params({"expires": expires})
        assert identity.build_cookie("abc123").expires == expires

    def test_set_cookie_params_merges(self, identity):
        identity.set_cookie_params({"domain": "example.com"})
        identity.set_cookie_params({"path": "/app"})
        cookie = identity.build_cookie("abc123")

        assert cookie.domain == "example.com"
        assert cookie.path == "/app"
        assert cookie.httponly is True

    def test_config_overrides_are_merged_over_defaults(self):
        config = Config(
            database_url="mongodb://localhost:27017/test",
            cookie_key="sid",
            cookie_params=CookieParams(secure=False),
            _env_file=None,
        )
        identity = Core(config, FakeDatabase()).services.identity
        cookie = identity.build_cookie("abc123")

        assert cookie.name == "sid"
        assert cookie.secure is False
        assert cookie.httponly is True


class TestGenerateToken:
    def test_prefix_is_applied(self):
        config = Config(database_url="mongodb://localhost:27017/test", id_prefix="web-", _env_file=None)
        identity = Core(config, FakeDatabase()).services.identity
        assert identity.generate_token().startswith("web-")

    def test_token_is_long_enough(self, identity):
        assert len(identity.generate_token()) >= 40


class TestRegenerateId:
    async def test_moves_record_to_new_token(self, identity, record, ctx, transport, collection):
        await record.set(ctx, "cart", [1, 2, 3])
        old_token = ctx.token

        new_token = await identity.regenerate_id(ctx)

        assert new_token != old_token
        assert ctx.token == new_token
        assert old_token not in collection.documents
        assert collection.documents[new_token] == {"_id": new_token, "cart": [1, 2, 3]}
        assert [cookie.value for cookie in transport.outbound] == [old_token, new_token]

    async def test_without_session_only_issues_token(self, identity, ctx, transport, collection):
        new_token = await identity.regenerate_id(ctx)

        assert ctx.token == new_token
        assert len(transport.outbound) == 1
        assert collection.documents == {}

    async def test_without_transport_raises(self, identity):
        with pytest.raises(TransportUnavailableError):
            await identity.regenerate_id(SessionContext(token="abc123"))
