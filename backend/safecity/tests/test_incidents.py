from datetime import datetime, timedelta

from safecity.models.enums import IncidentStatus, Role
from safecity.models.incident import Incident
from safecity.models.photo import Photo
from safecity.utils.dates import utcnow


def _payload(**overrides) -> dict:
	data = {
		"description": "Large pothole in front of the school",
		"category": "Potholes",
		"latitude": 19.4326,
		"longitude": -99.1332,
		"address": "  Reforma 222  ",
	}
	data.update(overrides)
	return data


def test_create_incident_starts_pending(client, make_user, auth_header):
	user = make_user("reporter@test.com")

	# status in the payload is ignored
	resp = client.post("/api/incidents", json=_payload(status="RESOLVED"), headers=auth_header(user))
	assert resp.status_code == 201
	data = resp.get_json()["data"]
	assert data["status"] == IncidentStatus.PENDING.value
	assert data["upvotes"] == 0
	assert data["user_id"] == user.id
	assert data["address"] == "Reforma 222"
	assert data["photo_ids"] == []


def test_create_incident_requires_auth(client):
	resp = client.post("/api/incidents", json=_payload())
	assert resp.status_code == 401


def test_create_incident_validation(client, make_user, auth_header):
	user = make_user("invalid@test.com")
	headers = auth_header(user)

	short = client.post("/api/incidents", json=_payload(description="too short"), headers=headers)
	assert short.status_code == 422
	assert "description" in short.get_json()["errors"]

	blank = client.post("/api/incidents", json=_payload(description=" " * 12 + "abc"), headers=headers)
	assert blank.status_code == 422

	category = client.post("/api/incidents", json=_payload(category="Aliens"), headers=headers)
	assert category.status_code == 422
	assert "category" in category.get_json()["errors"]

	lat = client.post("/api/incidents", json=_payload(latitude=91), headers=headers)
	assert lat.status_code == 422
	assert "latitude" in lat.get_json()["errors"]

	lng = client.post("/api/incidents", json=_payload(longitude=-180.5), headers=headers)
	assert lng.status_code == 422
	assert "longitude" in lng.get_json()["errors"]

	assert Incident.query.count() == 0


def test_create_incident_attaches_uploaded_photos(client, make_user, auth_header, db_session):
	user = make_user("photos@test.com")
	photos = [Photo(uploaded_by_id=user.id, mime_type="image/png", size=3, data=b"abc") for _ in range(2)]
	db_session.add_all(photos)
	db_session.commit()
	ids = [p.id for p in photos]

	resp = client.post(
		"/api/incidents",
		json=_payload(photo_ids=[ids[0], ids[1], ids[0]]),
		headers=auth_header(user),
	)
	assert resp.status_code == 201
	data = resp.get_json()["data"]
	assert data["photo_ids"] == sorted(ids)


def test_create_incident_skips_photos_attached_elsewhere(client, make_user, make_incident, auth_header, db_session):
	user = make_user("claimed@test.com")
	first = make_incident(user.id)
	taken = Photo(incident_id=first.id, uploaded_by_id=user.id, mime_type="image/png", size=3, data=b"abc")
	free = Photo(uploaded_by_id=user.id, mime_type="image/png", size=3, data=b"def")
	db_session.add_all([taken, free])
	db_session.commit()
	taken_id, free_id = taken.id, free.id

	resp = client.post(
		"/api/incidents",
		json=_payload(photo_ids=[taken_id, free_id]),
		headers=auth_header(user),
	)
	assert resp.status_code == 201
	assert resp.get_json()["data"]["photo_ids"] == [free_id]

	db_session.refresh(taken)
	assert taken.incident_id == first.id
	detail = client.get(f"/api/incidents/{first.id}").get_json()["data"]
	assert detail["photo_ids"] == [taken_id]


def test_create_incident_too_many_photos(client, make_user, auth_header):
	user = make_user("many@test.com")
	resp = client.post("/api/incidents", json=_payload(photo_ids=[1, 2, 3, 4]), headers=auth_header(user))
	assert resp.status_code == 422
	assert "photo_ids" in resp.get_json()["errors"]


def test_list_is_public_and_paginated(client, make_user, make_incident):
	user = make_user("list@test.com")
	for n in range(5):
		make_incident(user.id, description=f"Incident number {n} description")

	resp = client.get("/api/incidents?page=1&pageSize=2")
	assert resp.status_code == 200
	data = resp.get_json()["data"]
	assert data["total"] == 5
	assert data["page_size"] == 2
	assert data["pages"] == 3
	assert len(data["items"]) == 2

	last = client.get("/api/incidents?page=3&pageSize=2").get_json()["data"]
	assert len(last["items"]) == 1

	beyond = client.get("/api/incidents?page=9&pageSize=2").get_json()["data"]
	assert beyond["items"] == []
	assert beyond["total"] == 5


def test_list_page_size_is_capped(client, make_user, make_incident):
	user = make_user("cap@test.com")
	make_incident(user.id)

	data = client.get("/api/incidents?pageSize=100000").get_json()["data"]
	assert data["page_size"] == 100


def test_list_orders_by_upvotes_then_newest(client, make_user, make_incident):
	user = make_user("order@test.com")
	now = utcnow()
	old_popular = make_incident(user.id, upvotes=5, created_at=now - timedelta(days=3))
	newest = make_incident(user.id, upvotes=0, created_at=now)
	older = make_incident(user.id, upvotes=0, created_at=now - timedelta(days=1))

	items = client.get("/api/incidents").get_json()["data"]["items"]
	assert [i["id"] for i in items] == [old_popular.id, newest.id, older.id]


def test_list_filters(client, make_user, make_incident):
	user = make_user("filters@test.com")
	make_incident(user.id, category="Potholes", status=IncidentStatus.RESOLVED, created_at=datetime(2024, 3, 10, 12))
	make_incident(user.id, category="Potholes", status=IncidentStatus.PENDING, created_at=datetime(2024, 3, 20, 23, 30))
	make_incident(user.id, category="Garbage", status=IncidentStatus.PENDING, created_at=datetime(2024, 4, 2))

	by_status = client.get("/api/incidents?status=PENDING").get_json()["data"]
	assert by_status["total"] == 2
	assert all(i["status"] == "PENDING" for i in by_status["items"])

	both = client.get("/api/incidents?status=PENDING&category=Potholes").get_json()["data"]
	assert both["total"] == 1

	# "any" and blanks mean no filter
	anything = client.get("/api/incidents?status=any&category=").get_json()["data"]
	assert anything["total"] == 3

	# A bare endDate includes the whole day
	march = client.get("/api/incidents?startDate=2024-03-01&endDate=2024-03-20").get_json()["data"]
	assert march["total"] == 2


def test_list_filter_rejects_bad_values(client):
	assert client.get("/api/incidents?status=DONE").status_code == 422
	assert client.get("/api/incidents?startDate=yesterday").status_code == 422


def test_get_incident_detail(client, make_user, make_incident, make_comment):
	user = make_user("detail@test.com", first_name="Luis", last_name="Perez")
	incident = make_incident(user.id)
	make_comment(incident.id, user.id)

	resp = client.get(f"/api/incidents/{incident.id}")
	assert resp.status_code == 200
	data = resp.get_json()["data"]
	assert data["id"] == incident.id
	assert data["comment_count"] == 1
	assert data["history"] == []
	assert data["user"] == {"first_name": "Luis", "last_name": "Perez"}


def test_get_incident_not_found(client):
	resp = client.get("/api/incidents/999")
	assert resp.status_code == 404
	assert resp.get_json()["code"] == "NOT_FOUND"


def test_my_incidents_only_lists_own(client, make_user, make_incident, auth_header):
	me = make_user("me@test.com")
	other = make_user("other@test.com")
	make_incident(me.id)
	make_incident(other.id)
	make_incident(other.id)

	resp = client.get("/api/incidents/mine", headers=auth_header(me))
	assert resp.status_code == 200
	data = resp.get_json()["data"]
	assert data["total"] == 1
	assert data["items"][0]["user_id"] == me.id


def test_delete_incident_owner_or_admin(client, make_user, make_incident, auth_header):
	owner = make_user("owner@test.com")
	stranger = make_user("stranger@test.com")
	admin = make_user("admin@test.com", role=Role.ADMIN)

	first = make_incident(owner.id)
	second = make_incident(owner.id)
	first_id, second_id = first.id, second.id

	denied = client.delete(f"/api/incidents/{first_id}", headers=auth_header(stranger))
	assert denied.status_code == 403

	ok = client.delete(f"/api/incidents/{first_id}", headers=auth_header(owner))
	assert ok.status_code == 200
	assert client.get(f"/api/incidents/{first_id}").status_code == 404

	by_admin = client.delete(f"/api/incidents/{second_id}", headers=auth_header(admin))
	assert by_admin.status_code == 200


def test_trending(client, make_user, make_incident):
	user = make_user("trend@test.com")
	make_incident(user.id, upvotes=1)
	high = make_incident(user.id, upvotes=9)

	resp = client.get("/api/incidents/trending?limit=1")
	assert resp.status_code == 200
	items = resp.get_json()["data"]
	assert [i["id"] for i in items] == [high.id]
