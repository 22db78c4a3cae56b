"""Tests for the admission gate."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from briefgate.app.core.security import check_origin, check_token, constant_time_equals
from briefgate.app.exceptions import (
    AdmissionRejected,
    OriginRejected,
    RefererRejected,
    TokenInvalid,
    TokenMissing,
    TokenNotConfigured,
    TokenRejected,
)
from briefgate.app.main import app as main_app
from briefgate.app.middleware.admission import require_first_party

APP_URL = "https://example.com"


class TestCheckOrigin:
    """Origin/Referer checks against the canonical app URL."""

    def test_matching_origin_passes(self):
        check_origin(Headers({"origin": "https://example.com"}), APP_URL)

    def test_foreign_origin_rejected(self):
        with pytest.raises(OriginRejected):
            check_origin(Headers({"origin": "https://evil.com"}), APP_URL)

    def test_no_headers_passes(self):
        check_origin(Headers({}), APP_URL)

    def test_referer_under_app_url_passes(self):
        check_origin(Headers({"referer": "https://example.com/app"}), APP_URL)

    def test_foreign_referer_rejected(self):
        with pytest.raises(RefererRejected):
            check_origin(Headers({"referer": "https://evil.com"}), APP_URL)

    def test_origin_with_trailing_slash_rejected(self):
        """Origin must be byte-identical; no normalization."""
        with pytest.raises(OriginRejected):
            check_origin(Headers({"origin": "https://example.com/"}), APP_URL)

    def test_origin_scheme_mismatch_rejected(self):
        with pytest.raises(OriginRejected):
            check_origin(Headers({"origin": "http://example.com"}), APP_URL)

    def test_good_origin_with_bad_referer_rejected(self):
        headers = Headers({"origin": APP_URL, "referer": "https://evil.com/page"})
        with pytest.raises(RefererRejected):
            check_origin(headers, APP_URL)

    def test_rejections_share_base_class(self):
        assert issubclass(OriginRejected, AdmissionRejected)
        assert issubclass(RefererRejected, AdmissionRejected)
        assert OriginRejected().status_code == 403


class TestCheckToken:
    """Shared-secret token checks."""

    def test_matching_token_passes(self):
        check_token(Headers({"x-app-token": "abc123"}), "abc123")

    def test_one_byte_difference_rejected(self):
        with pytest.raises(TokenInvalid):
            check_token(Headers({"x-app-token": "abc124"}), "abc123")

    def test_completely_different_token_rejected_the_same_way(self):
        """A near miss and a total miss are indistinguishable to the caller."""
        with pytest.raises(TokenInvalid) as near:
            check_token(Headers({"x-app-token": "abc124"}), "abc123")
        with pytest.raises(TokenInvalid) as far:
            check_token(Headers({"x-app-token": "zzzzzz"}), "abc123")
        assert near.value.to_response() == far.value.to_response()
        assert near.value.status_code == far.value.status_code == 401

    def test_length_mismatch_rejected(self):
        with pytest.raises(TokenInvalid):
            check_token(Headers({"x-app-token": "abc1234"}), "abc123")

    def test_missing_header(self):
        with pytest.raises(TokenMissing):
            check_token(Headers({}), "abc123")

    def test_empty_header_counts_as_missing(self):
        with pytest.raises(TokenMissing):
            check_token(Headers({"x-app-token": ""}), "abc123")

    def test_unconfigured_secret(self):
        with pytest.raises(TokenNotConfigured):
            check_token(Headers({"x-app-token": "abc123"}), "")

    def test_custom_header_name(self):
        check_token(Headers({"x-brief-key": "abc123"}), "abc123", header_name="x-brief-key")
        with pytest.raises(TokenMissing):
            check_token(Headers({"x-app-token": "abc123"}), "abc123", header_name="x-brief-key")

    def test_all_failures_are_unauthorized(self):
        reasons = set()
        for exc_type in (TokenMissing, TokenInvalid, TokenNotConfigured):
            exc = exc_type()
            assert isinstance(exc, TokenRejected)
            assert exc.status_code == 401
            assert exc.to_response() == {"error": "unauthorized", "message": "Unauthorized"}
            reasons.add(exc.reason)
        assert len(reasons) == 3


class TestConstantTimeEquals:

    @pytest.mark.parametrize(
        ("provided", "expected", "result"),
        [
            ("abc123", "abc123", True),
            ("abc124", "abc123", False),
            ("zzzzzz", "abc123", False),
            ("abc", "abc123", False),
            ("", "abc123", False),
            ("ключ", "ключ", True),
        ],
    )
    def test_comparison(self, provided, expected, result):
        assert constant_time_equals(provided, expected) is result


class TestRequireFirstParty:
    """The FastAPI dependency wiring for the gate."""

    @pytest.fixture
    def client(self, gate_settings):
        app = FastAPI()
        app.exception_handlers.update(main_app.exception_handlers)

        @app.get("/protected")
        async def protected(_admitted=Depends(require_first_party)):
            return {"ok": True}

        return TestClient(app)

    def test_admits_first_party_request(self, client):
        response = client.get(
            "/protected",
            headers={"Origin": "https://example.com", "x-app-token": "abc123"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_foreign_origin_is_forbidden(self, client):
        response = client.get(
            "/protected",
            headers={"Origin": "https://evil.com", "x-app-token": "abc123"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_origin_checked_before_token(self, client):
        response = client.get("/protected", headers={"Origin": "https://evil.com"})
        assert response.status_code == 403

    def test_missing_token_is_unauthorized(self, client):
        response = client.get("/protected")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_unconfigured_secret_is_unauthorized(self, client, monkeypatch):
        from briefgate.app.core.config import settings

        monkeypatch.setattr(settings, "api_shared_secret", "")
        response = client.get("/protected", headers={"x-app-token": "abc123"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
