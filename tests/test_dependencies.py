"""
Tests for the auth gate (bearer token extraction + verification).
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.dependencies import authenticate, bearer_token
from auth.errors import Forbidden, Unauthorized
from auth.jwt import TokenService
from tests.conftest import OTHER_SECRET, SECRET

ME = "/api/v1/auth/me"


class TestBearerToken:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("Bearer ", None),
            ("Basic dXNlcjpwYXNz", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extraction(self, header, expected):
        assert bearer_token(header) == expected


class TestAuthenticate:
    def test_no_token_is_unauthorized(self, tokens):
        with pytest.raises(Unauthorized):
            authenticate(None, tokens)

    def test_bad_token_is_forbidden(self, tokens):
        with pytest.raises(Forbidden):
            authenticate("not-a-jwt", tokens)

    def test_valid_token_resolves_identity(self, tokens):
        identity = authenticate(tokens.issue("user-7"), tokens)
        assert identity.user_id == "user-7"
        assert identity.claims.subject == "user-7"


class TestGateOverHttp:
    def test_no_token_returns_401(self, client):
        resp = client.get(ME)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized: No token provided"}
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_non_bearer_scheme_returns_401(self, client):
        resp = client.get(ME, headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.status_code == 401

    def test_malformed_token_returns_403(self, client):
        resp = client.get(ME, headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden: Invalid token"}

    def test_expired_token_returns_403(self, client):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        stale = TokenService(SECRET, "1h", clock=lambda: past).issue("user-1")
        resp = client.get(ME, headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 403

    def test_foreign_secret_returns_403(self, client):
        foreign = TokenService(OTHER_SECRET, "1h").issue("user-1")
        resp = client.get(ME, headers={"Authorization": f"Bearer {foreign}"})
        assert resp.status_code == 403

    def test_valid_token_attaches_subject(self, client, tokens):
        resp = client.get(ME, headers={"Authorization": f"Bearer {tokens.issue('user-42')}"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user_id"] == "user-42"
        assert body["expires_at"] - body["issued_at"] == 3600

    def test_token_in_json_body(self, client, tokens):
        resp = client.request("GET", ME, json={"token": tokens.issue("user-9")})
        assert resp.status_code == 200
        assert resp.json()["user_id"] == "user-9"

    def test_header_wins_over_body(self, client, tokens):
        resp = client.request(
            "GET",
            ME,
            headers={"Authorization": f"Bearer {tokens.issue('from-header')}"},
            json={"token": tokens.issue("from-body")},
        )
        assert resp.json()["user_id"] == "from-header"

    def test_gate_does_not_require_user_to_exist(self, client, tokens, store):
        assert store.users == {}
        resp = client.get(ME, headers={"Authorization": f"Bearer {tokens.issue('ghost')}"})
        assert resp.status_code == 200
