# tests/test_principal_dependency.py
from http import HTTPStatus

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies.principal import Principal, get_current_principal, require_manager


@pytest.fixture
def principal_client() -> TestClient:
    """
    Tiny app exposing the identity dependencies directly.
    """
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(principal: Principal = Depends(get_current_principal)):
        return {"user_id": principal.user_id, "role": principal.role}

    @app.get("/managers-only")
    async def managers_only(principal: Principal = Depends(require_manager)):
        return {"ok": True}

    return TestClient(app)


def test_missing_headers_are_unauthorized(principal_client):
    response = principal_client.get("/whoami")

    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["detail"] == "Missing caller identity headers."


def test_role_is_normalized(principal_client):
    response = principal_client.get(
        "/whoami", headers={"X-User-Id": "4", "X-User-Role": " Team Leader "}
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"user_id": 4, "role": "team_leader"}


def test_unknown_role_is_unauthorized(principal_client):
    response = principal_client.get("/whoami", headers={"X-User-Id": "4", "X-User-Role": "admin"})
    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_manager_gate(principal_client):
    leader = principal_client.get(
        "/managers-only", headers={"X-User-Id": "4", "X-User-Role": "team_leader"}
    )
    manager = principal_client.get(
        "/managers-only", headers={"X-User-Id": "5", "X-User-Role": "manager"}
    )

    assert leader.status_code == HTTPStatus.FORBIDDEN
    assert leader.json()["detail"] == "Only managers can perform this action."
    assert manager.status_code == HTTPStatus.OK
