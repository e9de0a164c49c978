# tests/test_logs_api.py
from http import HTTPStatus


def _log_payload(seeded, **overrides) -> dict:
    payload = {
        "log_date": "2024-03-01",
        "project_id": seeded.project,
        "employee_ids": seeded.employees[:2],
        "start_time": "2024-03-01T08:00:00",
        "end_time": "2024-03-01T16:30:00",
        "work_description": "Poured slab for block B",
        "weather": "Dry",
        "materials_used": [{"name": "Concrete", "quantity": 5, "unit": "m3"}],
    }
    payload.update(overrides)
    return payload


def test_create_log_returns_draft_with_resolved_names(client, seeded, as_user):
    response = client.post("/logs", json=_log_payload(seeded), headers=as_user(seeded.leader))

    assert response.status_code == HTTPStatus.CREATED
    data = response.json()
    assert data["status"] == "draft"
    assert data["team_leader_id"] == seeded.leader
    assert data["team_leader_name"] == "Jane Murphy"
    assert data["project_name"] == "Riverside Apartments"
    assert data["employee_names"] == ["Tom Byrne", "Sean Ryan"]
    assert data["materials_used"][0]["quantity"] == 5.0
    assert data["photos"] == [] and data["documents"] == []


def test_duplicate_log_is_409_with_existing_id(client, seeded, as_user, notifier):
    first = client.post("/logs", json=_log_payload(seeded), headers=as_user(seeded.leader))
    second = client.post("/logs", json=_log_payload(seeded), headers=as_user(seeded.leader))

    assert second.status_code == HTTPStatus.CONFLICT
    body = second.json()
    assert body["kind"] == "duplicate_log"
    assert body["detail"] == "A log already exists for this date and project"
    assert body["existing_log_id"] == first.json()["id"]
    assert len(notifier.duplicate_attempts) == 1


def test_missing_fields_are_400_with_details(client, seeded, as_user):
    response = client.post(
        "/logs",
        json={"project_id": seeded.project, "work_description": "x"},
        headers=as_user(seeded.leader),
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.json()
    assert body["kind"] == "validation_error"
    assert {e["field"] for e in body["errors"]} == {"log_date", "start_time", "end_time"}


def test_requests_without_identity_are_401(client):
    assert client.get("/logs").status_code == HTTPStatus.UNAUTHORIZED


def test_full_lifecycle_over_http(client, seeded, as_user, notifier):
    leader = as_user(seeded.leader)
    manager = as_user(seeded.manager, "manager")
    log_id = client.post("/logs", json=_log_payload(seeded), headers=leader).json()["id"]

    patched = client.patch(f"/logs/{log_id}", json={"weather": "Showers"}, headers=leader)
    assert patched.status_code == HTTPStatus.OK
    assert patched.json()["weather"] == "Showers"
    assert patched.json()["work_description"] == "Poured slab for block B"

    early_approve = client.post(f"/logs/{log_id}/approve", headers=manager)
    assert early_approve.status_code == HTTPStatus.CONFLICT
    assert early_approve.json()["current_status"] == "draft"

    submitted = client.post(f"/logs/{log_id}/submit", headers=leader)
    assert submitted.status_code == HTTPStatus.OK
    assert submitted.json() == {
        "message": "Log submitted successfully",
        "id": log_id,
        "status": "submitted",
    }

    resubmit = client.post(f"/logs/{log_id}/submit", headers=leader)
    assert resubmit.status_code == HTTPStatus.CONFLICT
    assert resubmit.json()["detail"] == "Log is already submitted"

    leader_approve = client.post(f"/logs/{log_id}/approve", headers=leader)
    assert leader_approve.status_code == HTTPStatus.FORBIDDEN

    approved = client.post(f"/logs/{log_id}/approve", headers=manager)
    assert approved.status_code == HTTPStatus.OK
    assert approved.json()["status"] == "approved"
    assert notifier.approved == [log_id]

    fetched = client.get(f"/logs/{log_id}", headers=leader).json()
    assert fetched["approved_by_name"] == "Aoife Kelly"
    assert fetched["approved_at"] is not None

    frozen = client.patch(f"/logs/{log_id}", json={"weather": "Sunny"}, headers=leader)
    assert frozen.status_code == HTTPStatus.CONFLICT
    assert frozen.json()["detail"] == "Cannot update an approved log"

    owner_delete = client.delete(f"/logs/{log_id}", headers=leader)
    assert owner_delete.status_code == HTTPStatus.CONFLICT

    manager_delete = client.delete(f"/logs/{log_id}", headers=manager)
    assert manager_delete.status_code == HTTPStatus.OK
    assert manager_delete.json() == {"message": "Log deleted successfully"}

    assert client.get(f"/logs/{log_id}", headers=manager).status_code == HTTPStatus.NOT_FOUND


def test_unregistered_manager_gets_403_on_approve(client, seeded, as_user, notifier):
    leader = as_user(seeded.leader)
    log_id = client.post("/logs", json=_log_payload(seeded), headers=leader).json()["id"]
    client.post(f"/logs/{log_id}/submit", headers=leader)

    response = client.post(f"/logs/{log_id}/approve", headers=as_user(9999, "manager"))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()["detail"] == "Unknown user cannot approve logs"
    assert client.get(f"/logs/{log_id}", headers=leader).json()["status"] == "submitted"
    assert notifier.approved == []


def test_list_scopes_team_leaders_to_their_own_logs(client, seeded, as_user):
    own = client.post("/logs", json=_log_payload(seeded), headers=as_user(seeded.leader)).json()
    other = client.post(
        "/logs", json=_log_payload(seeded), headers=as_user(seeded.other_leader)
    ).json()

    leader_view = client.get(
        "/logs",
        params={"team_leader_id": seeded.other_leader},
        headers=as_user(seeded.leader),
    )
    assert [log["id"] for log in leader_view.json()] == [own["id"]]

    manager_view = client.get(
        "/logs",
        params={"team_leader_id": seeded.other_leader},
        headers=as_user(seeded.manager, "manager"),
    )
    assert [log["id"] for log in manager_view.json()] == [other["id"]]


def test_list_filters_by_date_range_and_search(client, seeded, as_user):
    leader = as_user(seeded.leader)
    for day, text in (("01", "Excavation"), ("02", "Rebar fixing"), ("03", "Slab pour")):
        client.post(
            "/logs",
            json=_log_payload(
                seeded,
                log_date=f"2024-03-{day}",
                start_time=f"2024-03-{day}T08:00:00",
                end_time=f"2024-03-{day}T16:00:00",
                work_description=text,
            ),
            headers=leader,
        )

    ranged = client.get(
        "/logs", params={"start_date": "2024-03-02", "end_date": "2024-03-03"}, headers=leader
    ).json()
    assert [log["log_date"] for log in ranged] == ["2024-03-03", "2024-03-02"]

    searched = client.get("/logs", params={"search_term": "REBAR"}, headers=leader).json()
    assert [log["work_description"] for log in searched] == ["Rebar fixing"]


def test_other_leader_cannot_view_or_edit(client, seeded, as_user):
    log_id = client.post(
        "/logs", json=_log_payload(seeded), headers=as_user(seeded.leader)
    ).json()["id"]
    intruder = as_user(seeded.other_leader)

    assert client.get(f"/logs/{log_id}", headers=intruder).status_code == HTTPStatus.FORBIDDEN
    assert (
        client.patch(f"/logs/{log_id}", json={"weather": "x"}, headers=intruder).status_code
        == HTTPStatus.FORBIDDEN
    )
    assert client.delete(f"/logs/{log_id}", headers=intruder).status_code == HTTPStatus.FORBIDDEN
    assert (
        client.get(f"/logs/{log_id}/export/pdf", headers=intruder).status_code
        == HTTPStatus.FORBIDDEN
    )


def test_export_pdf(client, seeded, as_user):
    log_id = client.post(
        "/logs", json=_log_payload(seeded, materials_used=[]), headers=as_user(seeded.leader)
    ).json()["id"]

    response = client.get(
        f"/logs/{log_id}/export/pdf", headers=as_user(seeded.manager, "manager")
    )

    assert response.status_code == HTTPStatus.OK
    assert response.headers["content-type"] == "application/pdf"
    assert (
        response.headers["content-disposition"]
        == f"attachment; filename=daily-log-{log_id}.pdf"
    )
    assert response.content.startswith(b"%PDF")


def test_unknown_log_is_404(client, seeded, as_user):
    response = client.get("/logs/9999", headers=as_user(seeded.manager, "manager"))

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json() == {"kind": "not_found", "detail": "Log with id=9999 not found."}
