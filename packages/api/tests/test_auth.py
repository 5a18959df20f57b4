# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

from unittest.mock import patch

import pytest
from db.enums import UserRole
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.core.config import settings
from src.middleware.auth import CurrentUser, _resolve_bank_id, _resolve_role, require_roles
from src.schemas.auth import TokenPayload


def _me_app() -> FastAPI:
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {
            "user_id": user.user_id,
            "role": user.role.value,
            "bank_id": user.data_scope.bank_id,
            "full_pipeline": user.data_scope.full_pipeline,
            "own_cases_only": user.data_scope.own_cases_only,
        }

    return app


# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    resp = TestClient(_me_app()).get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"
    assert body["full_pipeline"] is True


# ---------------------------------------------------------------------------
# Missing / malformed token
# ---------------------------------------------------------------------------


def test_missing_token_returns_401(monkeypatch):
    """A request with no Authorization header should get 401."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    resp = TestClient(_me_app()).get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


def test_bank_token_builds_bank_scope(monkeypatch):
    """A bank user's bank_id claim becomes their data scope."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    payload = TokenPayload(
        sub="hdfc-desk",
        name="HDFC Desk",
        bank_id="HDFC",
        realm_access={"roles": ["bank"]},
    )

    with patch("src.middleware.auth._decode_token", return_value=payload):
        resp = TestClient(_me_app()).get("/me", headers={"Authorization": "Bearer token"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["role"] == "bank"
    assert body["bank_id"] == "HDFC"
    assert body["full_pipeline"] is False


def test_student_token_builds_own_cases_scope(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    payload = TokenPayload(sub="student-1", realm_access={"roles": ["student"]})

    with patch("src.middleware.auth._decode_token", return_value=payload):
        resp = TestClient(_me_app()).get("/me", headers={"Authorization": "Bearer token"})

    assert resp.status_code == 200
    assert resp.json()["own_cases_only"] is True


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_picks_known_role():
    """_resolve_role ignores Keycloak built-in roles."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "staff", "uma_authorization"]},
    )
    assert _resolve_role(payload) == UserRole.STAFF


def test_resolve_role_no_known_role_forbidden():
    """_resolve_role rejects tokens without any recognized role."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )

    with pytest.raises(HTTPException) as exc_info:
        _resolve_role(payload)
    assert exc_info.value.status_code == 403


def test_resolve_bank_id_requires_claim_for_bank_users():
    payload = TokenPayload(sub="bank-1", realm_access={"roles": ["bank"]})

    with pytest.raises(HTTPException) as exc_info:
        _resolve_bank_id(payload, UserRole.BANK)
    assert exc_info.value.status_code == 403


def test_resolve_bank_id_ignored_for_other_roles():
    payload = TokenPayload(sub="ops-1", bank_id="HDFC", realm_access={"roles": ["staff"]})
    assert _resolve_bank_id(payload, UserRole.STAFF) is None


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/bank-only", dependencies=[Depends(require_roles(UserRole.BANK))])
    async def bank_only(user: CurrentUser):
        return {"ok": True}

    # dev-user is admin, not bank
    resp = TestClient(app).get("/bank-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_resolve_role_prefers_most_privileged():
    payload = TokenPayload(sub="user-1", realm_access={"roles": ["student", "staff", "admin"]})
    assert _resolve_role(payload) == UserRole.ADMIN


def test_resolve_bank_id_strips_claim():
    payload = TokenPayload(sub="bank-1", bank_id=" HDFC ", realm_access={"roles": ["bank"]})
    assert _resolve_bank_id(payload, UserRole.BANK) == "HDFC"


def test_unnamed_bank_user_named_after_bank(monkeypatch):
    """History rows need a readable actor even when the token carries no name."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    payload = TokenPayload(sub="axis-desk", bank_id="AXIS", realm_access={"roles": ["bank"]})

    app = FastAPI()

    @app.get("/name")
    async def name(user: CurrentUser):
        return {"name": user.name}

    with patch("src.middleware.auth._decode_token", return_value=payload):
        resp = TestClient(app).get("/name", headers={"Authorization": "Bearer token"})

    assert resp.json()["name"] == "AXIS Bank Desk"
