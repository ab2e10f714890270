from safecity.models.enums import IncidentStatus, Role
from safecity.models.incident_history import IncidentHistory


def _patch_status(client, incident_id, status, headers):
	return client.patch(f"/api/incidents/{incident_id}/status", json={"status": status}, headers=headers)


def test_citizen_cannot_change_status_but_admin_can(client, make_user, make_incident, auth_header, db_session):
	citizen = make_user("citizen@test.com")
	admin = make_user("admin@test.com", role=Role.ADMIN)
	incident = make_incident(citizen.id)

	denied = _patch_status(client, incident.id, "IN_PROGRESS", auth_header(citizen))
	assert denied.status_code == 403
	assert denied.get_json()["code"] == "FORBIDDEN"
	assert IncidentHistory.query.filter_by(incident_id=incident.id).count() == 0

	ok = _patch_status(client, incident.id, "IN_PROGRESS", auth_header(admin))
	assert ok.status_code == 200
	assert ok.get_json()["data"]["status"] == "IN_PROGRESS"

	rows = IncidentHistory.query.filter_by(incident_id=incident.id).all()
	assert len(rows) == 1
	assert rows[0].old_status == IncidentStatus.PENDING
	assert rows[0].new_status == IncidentStatus.IN_PROGRESS
	assert rows[0].changed_by_id == admin.id

	db_session.refresh(incident)
	assert incident.status == IncidentStatus.IN_PROGRESS


def test_only_assigned_operator_can_change_status(client, make_user, make_incident, auth_header):
	citizen = make_user("c@test.com")
	assigned = make_user("op1@test.com", role=Role.OPERATOR)
	other_op = make_user("op2@test.com", role=Role.OPERATOR)
	incident = make_incident(citizen.id, assigned_to_id=assigned.id)

	denied = _patch_status(client, incident.id, "RESOLVED", auth_header(other_op))
	assert denied.status_code == 403

	ok = _patch_status(client, incident.id, "RESOLVED", auth_header(assigned))
	assert ok.status_code == 200
	assert ok.get_json()["data"]["status"] == "RESOLVED"


def test_same_status_is_noop(client, make_user, make_incident, auth_header):
	citizen = make_user("noop@test.com")
	admin = make_user("noop-admin@test.com", role=Role.ADMIN)
	incident = make_incident(citizen.id)

	resp = _patch_status(client, incident.id, "PENDING", auth_header(admin))
	assert resp.status_code == 200
	assert resp.get_json()["data"]["status"] == "PENDING"
	assert IncidentHistory.query.filter_by(incident_id=incident.id).count() == 0


def test_any_transition_is_allowed(client, make_user, make_incident, auth_header):
	citizen = make_user("back@test.com")
	admin = make_user("back-admin@test.com", role=Role.ADMIN)
	incident = make_incident(citizen.id, status=IncidentStatus.RESOLVED)

	resp = _patch_status(client, incident.id, "pending", auth_header(admin))
	assert resp.status_code == 200
	assert resp.get_json()["data"]["status"] == "PENDING"


def test_invalid_status_is_bad_request(client, make_user, make_incident, auth_header):
	citizen = make_user("bad@test.com")
	admin = make_user("bad-admin@test.com", role=Role.ADMIN)
	incident = make_incident(citizen.id)

	resp = _patch_status(client, incident.id, "CLOSED", auth_header(admin))
	assert resp.status_code == 400
	assert resp.get_json()["message"] == "Invalid status"

	missing = client.patch(f"/api/incidents/{incident.id}/status", json={}, headers=auth_header(admin))
	assert missing.status_code == 400


def test_status_unknown_incident(client, make_user, auth_header):
	admin = make_user("ghost-admin@test.com", role=Role.ADMIN)
	resp = _patch_status(client, 12345, "RESOLVED", auth_header(admin))
	assert resp.status_code == 404


def test_history_lists_changes_in_order(client, make_user, make_incident, auth_header):
	citizen = make_user("hist@test.com")
	admin = make_user("hist-admin@test.com", role=Role.ADMIN, first_name="Ada", last_name="Admin")
	incident = make_incident(citizen.id)
	headers = auth_header(admin)

	_patch_status(client, incident.id, "IN_PROGRESS", headers)
	_patch_status(client, incident.id, "RESOLVED", headers)

	resp = client.get(f"/api/incidents/{incident.id}/history")
	assert resp.status_code == 200
	rows = resp.get_json()["data"]
	assert [(r["old_status"], r["new_status"]) for r in rows] == [
		("PENDING", "IN_PROGRESS"),
		("IN_PROGRESS", "RESOLVED"),
	]
	assert rows[0]["changed_by_name"] == "Ada Admin"

	detail = client.get(f"/api/incidents/{incident.id}").get_json()["data"]
	assert len(detail["history"]) == 2


def test_status_requires_auth(client, make_user, make_incident):
	citizen = make_user("anon@test.com")
	incident = make_incident(citizen.id)
	resp = client.patch(f"/api/incidents/{incident.id}/status", json={"status": "RESOLVED"})
	assert resp.status_code == 401
