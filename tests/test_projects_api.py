# tests/test_projects_api.py
from http import HTTPStatus


def _build_project_payload(
    name: str = "Riverside Apartments",
    address: str | None = "12 Quay Street, Dublin",
    is_active: bool = True,
) -> dict:
    return {
        "name": name,
        "address": address,
        "is_active": is_active,
    }


def test_create_project_success(client):
    """
    Creating a project should return a 201 with the created object.
    """
    payload = _build_project_payload()

    response = client.post("/projects", json=payload)
    assert response.status_code == HTTPStatus.CREATED

    data = response.json()
    assert data["name"] == payload["name"]
    assert data["address"] == payload["address"]
    assert data["is_active"] is True
    assert isinstance(data["id"], int)


def test_create_project_requires_name(client):
    response = client.post("/projects", json=_build_project_payload(name=""))
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_list_projects_filter_only_active(client):
    """
    Filtering with only_active=true should return projects where is_active is true.
    """
    client.post("/projects", json=_build_project_payload(name="Active Site"))
    client.post("/projects", json=_build_project_payload(name="Closed Site", is_active=False))

    response = client.get("/projects?only_active=true")
    assert response.status_code == HTTPStatus.OK
    assert [p["name"] for p in response.json()] == ["Active Site"]

    response = client.get("/projects?only_active=false")
    assert [p["name"] for p in response.json()] == ["Closed Site"]

    response = client.get("/projects")
    assert len(response.json()) == 2


def test_get_project_by_id_and_update(client):
    """
    End-to-end test: create a project, fetch by ID, then patch some fields
    and verify they are updated.
    """
    create_resp = client.post("/projects", json=_build_project_payload())
    assert create_resp.status_code == HTTPStatus.CREATED
    project_id = create_resp.json()["id"]

    get_resp = client.get(f"/projects/{project_id}")
    assert get_resp.status_code == HTTPStatus.OK
    assert get_resp.json()["name"] == "Riverside Apartments"

    patch_resp = client.patch(
        f"/projects/{project_id}",
        json={"name": "Riverside Phase 2", "address": None},
    )
    assert patch_resp.status_code == HTTPStatus.OK
    updated = patch_resp.json()

    assert updated["name"] == "Riverside Phase 2"
    assert updated["address"] is None
    # is_active should be unchanged
    assert updated["is_active"] is True


def test_get_missing_project_is_404(client):
    response = client.get("/projects/4242")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["detail"] == "Project with id 4242 not found."
