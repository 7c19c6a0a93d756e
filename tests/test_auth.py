"""Tests for the identity context: token factory, claim normalization, auth dependencies."""

import logging

from fastapi.security import HTTPAuthorizationCredentials

from docward.core.auth import Principal, normalize_claims, optional_auth
from docward.core.config import settings
from docward.core.token_factory import create_token, decode_token
from tests.conftest import auth_headers, make_document


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("u1", "test-secret", name="Ada", o={"id": "orgA"})
        claims = decode_token(token, "test-secret")
        assert claims is not None
        assert claims["sub"] == "u1"
        assert claims["name"] == "Ada"
        assert claims["o"] == {"id": "orgA"}

    def test_none_claims_are_omitted(self):
        claims = decode_token(create_token("u1", "s", email=None), "s")
        assert "email" not in claims

    def test_wrong_secret_returns_none(self):
        token = create_token("u1", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("u1", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_unsupported_algorithm_returns_none(self):
        token = create_token("u1", "secret")
        assert decode_token(token, "secret", algorithm="RS256") is None


class TestNormalizeClaims:

    def test_full_claims(self):
        principal = normalize_claims({
            "sub": "u1",
            "o": {"id": "orgA"},
            "name": "Ada",
            "email": "ada@example.com",
            "picture": "https://img/ada.png",
        })
        assert principal == Principal(
            principal_id="u1",
            organization_id="orgA",
            display_name="Ada",
            email="ada@example.com",
            avatar_url="https://img/ada.png",
        )

    def test_org_falls_back_to_legacy_claim(self):
        assert normalize_claims({"sub": "u1", "org_id": "orgB"}).organization_id == "orgB"

    def test_nested_org_wins_over_legacy(self):
        principal = normalize_claims({"sub": "u1", "o": {"id": "orgA"}, "org_id": "orgB"})
        assert principal.organization_id == "orgA"

    def test_blank_org_is_none(self):
        principal = normalize_claims({"sub": "u1", "o": {"id": "  "}, "org_id": ""})
        assert principal.organization_id is None

    def test_alternate_name_and_avatar_claims(self):
        principal = normalize_claims({"sub": "u1", "full_name": "Ada L", "image_url": "https://img/a"})
        assert principal.display_name == "Ada L"
        assert principal.avatar_url == "https://img/a"

    def test_missing_subject_is_none(self):
        assert normalize_claims({"name": "nobody"}) is None
        assert normalize_claims({"sub": "   "}) is None
        assert normalize_claims(None) is None


class TestAuthDependencies:

    def test_missing_token_is_401(self, client):
        resp = client.get("/api/documents")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHENTICATED"

    def test_token_signed_with_other_secret_is_401(self, client):
        token = create_token("u1", "not-the-configured-secret")
        resp = client.get("/api/documents", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_expired_token_is_401(self, client):
        token = create_token("u1", settings.jwt_secret_key, expires_hours=-1)
        resp = client.get("/api/documents", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_valid_token_is_accepted(self, client):
        resp = client.get("/api/documents", headers=auth_headers("u1"))
        assert resp.status_code == 200

    def test_public_lookup_ignores_bad_token(self, client):
        doc = make_document(client)
        link = client.post(f"/api/documents/{doc['id']}/share-links", json={}, headers=auth_headers("u1")).json()
        resp = client.get(f"/api/share-links/{link['token']}", headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 200

    def test_public_lookup_records_caller_when_identified(self, client, caplog):
        doc = make_document(client)
        link = client.post(f"/api/documents/{doc['id']}/share-links", json={}, headers=auth_headers("u1")).json()

        with caplog.at_level(logging.INFO, logger="docward.services.sharing_service"):
            client.get(f"/api/share-links/{link['token']}", headers=auth_headers("u7"))
            client.get(f"/api/share-links/{link['token']}")

        lookups = [r for r in caplog.records if r.getMessage() == "Share link lookup"]
        assert [r.principal_id for r in lookups] == ["u7", None]


class TestOptionalAuth:

    def test_no_credentials(self):
        assert optional_auth(None) is None

    def test_valid_credentials(self):
        token = create_token("u1", settings.jwt_secret_key, org_id="orgA")
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
        assert optional_auth(credentials) == Principal(principal_id="u1", organization_id="orgA")

    def test_invalid_credentials_do_not_raise(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="junk")
        assert optional_auth(credentials) is None
