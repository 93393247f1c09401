"""Unit tests for the admin authorization gate."""

import asyncio

import httpx
import pytest

from fantasy_tennis.errors import AdminRequired, AuthenticationRequired, InvalidToken, UpstreamError
from fantasy_tennis.web.auth import (
    AuthorizationGate,
    AuthUser,
    BootstrapPolicy,
    SupabaseTokenVerifier,
    extract_bearer_token,
)


class FakeVerifier:
    def __init__(self, users):
        self.users = users
        self.tokens = []

    async def verify(self, token):
        self.tokens.append(token)
        return self.users.get(token)


USERS = {
    "admin-token": AuthUser(id="u1", email="Admin@Example.com"),
    "user-token": AuthUser(id="u2", email="player@example.com"),
    "no-email-token": AuthUser(id="u3", email=None),
}


def _gate(setup_token=None):
    return AuthorizationGate(FakeVerifier(USERS), ["admin@example.com"], BootstrapPolicy(setup_token))


def _authorize(gate, header, **kwargs):
    return asyncio.run(gate.authorize(header, **kwargs))


class TestAuthorizationGate:

    def test_missing_header(self):
        with pytest.raises(AuthenticationRequired) as exc_info:
            _authorize(_gate(), None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authentication required"

    def test_empty_bearer(self):
        with pytest.raises(AuthenticationRequired):
            _authorize(_gate(), "Bearer   ")

    def test_invalid_token(self):
        with pytest.raises(InvalidToken) as exc_info:
            _authorize(_gate(), "Bearer nope")
        assert exc_info.value.status_code == 401

    def test_admin_email_is_case_insensitive(self):
        user = _authorize(_gate(), "Bearer admin-token")
        assert user.is_admin
        assert user.id == "u1"

    def test_non_admin(self):
        with pytest.raises(AdminRequired) as exc_info:
            _authorize(_gate(), "Bearer user-token")
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Admin access required"

    def test_user_without_email(self):
        with pytest.raises(AdminRequired):
            _authorize(_gate(), "Bearer no-email-token")


class TestBootstrap:

    def test_disabled_without_configured_token(self):
        with pytest.raises(AdminRequired):
            _authorize(_gate(), "Bearer user-token", target_table_empty=True, setup_token="anything")

    def test_granted_on_empty_table_with_token(self):
        user = _authorize(_gate("s3cret"), "Bearer user-token", target_table_empty=True, setup_token="s3cret")
        assert user.via_bootstrap
        assert not user.is_admin

    def test_refused_when_table_has_rows(self):
        with pytest.raises(AdminRequired):
            _authorize(_gate("s3cret"), "Bearer user-token", target_table_empty=False, setup_token="s3cret")

    def test_refused_with_wrong_token(self):
        with pytest.raises(AdminRequired):
            _authorize(_gate("s3cret"), "Bearer user-token", target_table_empty=True, setup_token="guess")

    def test_still_requires_valid_user(self):
        with pytest.raises(InvalidToken):
            _authorize(_gate("s3cret"), "Bearer nope", target_table_empty=True, setup_token="s3cret")


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("bearer abc") == "abc"
    assert extract_bearer_token("abc") == "abc"
    assert extract_bearer_token("") is None
    assert extract_bearer_token(None) is None


class TestSupabaseTokenVerifier:

    def _verifier(self, handler):
        return SupabaseTokenVerifier(
            "https://project.supabase.test/",
            "anon-key",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    def test_valid_token(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers.get("Authorization")
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(200, json={"id": "u1", "email": "admin@example.com"})

        user = asyncio.run(self._verifier(handler).verify("tok"))

        assert user == AuthUser(id="u1", email="admin@example.com")
        assert seen["url"] == "https://project.supabase.test/auth/v1/user"
        assert seen["authorization"] == "Bearer tok"
        assert seen["apikey"] == "anon-key"

    def test_rejected_token(self):
        verifier = self._verifier(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))
        assert asyncio.run(verifier.verify("tok")) is None

    def test_unreachable_auth_service(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(self._verifier(handler).verify("tok"))
        assert exc_info.value.status_code == 500

    def test_auth_service_error(self):
        verifier = self._verifier(lambda request: httpx.Response(503))
        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(verifier.verify("tok"))
        assert exc_info.value.upstream_status == 503

    def test_outage_is_not_reported_as_bad_token(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        gate = AuthorizationGate(self._verifier(handler), ["admin@example.com"])
        with pytest.raises(UpstreamError):
            asyncio.run(gate.authorize("Bearer admin-token"))
