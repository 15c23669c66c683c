import pytest

INSTRUCTOR = {
    "email": "dosen@lecturer.akbid.ac.id",
    "full_name": "Dr. Sari Wulandari",
    "role": "instructor",
    "nim_nip": "198501012010",
}
STUDENT = {
    "email": "mahasiswa@student.akbid.ac.id",
    "full_name": "Rina Putri",
    "role": "student",
    "nim_nip": "2021000001",
}
LAB_001 = {"code": "LAB-001", "name": "Midwifery Skills Lab", "capacity": 20, "location": "Building A"}


def _session(course_id, lab_room_id, start, end, **extra):
    body = {
        "course_id": course_id,
        "lab_room_id": lab_room_id,
        "weekday": "senin",
        "date": "2024-03-04",
        "start_time": start,
        "end_time": end,
        "topic": "Antenatal examination",
    }
    body.update(extra)
    return body


async def _post(client, url, body, headers=None):
    response = await client.post(url, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _token(client, email):
    response = await client.post("/api/auth/token", json={"email": email})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
async def catalogue(client):
    instructor = await _post(client, "/api/users", INSTRUCTOR)
    room = await _post(client, "/api/lab-rooms", LAB_001)
    course = await _post(
        client,
        "/api/courses",
        {
            "code": "KEB301",
            "name": "Antenatal Care Practice",
            "credits": 3,
            "semester": 3,
            "instructor_id": instructor["id"],
            "lab_room_id": room["id"],
        },
    )
    return {"instructor": instructor, "room": room, "course": course}


async def test_health(client):
    response = await client.get("/api/health")
    assert response.json()["status"] == "healthy"


async def test_booking_scenario(client, catalogue):
    course_id, room_id = catalogue["course"]["id"], catalogue["room"]["id"]

    first = await _post(client, "/api/schedule-entries", _session(course_id, room_id, "09:00", "11:00"))
    assert first["instructor_id"] == catalogue["instructor"]["id"]
    assert first["status"] == "scheduled"
    assert first["course"]["code"] == "KEB301"

    response = await client.post("/api/schedule-entries", json=_session(course_id, room_id, "10:30", "12:00"))
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "room_conflict"
    assert body["conflicts"][0]["id"] == first["id"]
    assert body["conflicts"][0]["course"] == "Antenatal Care Practice"

    await _post(client, "/api/schedule-entries", _session(course_id, room_id, "11:00", "12:30"))

    response = await client.get("/api/schedule-entries", params={"lab_room_id": room_id})
    assert response.json()["total"] == 2

    response = await client.get(f"/api/lab-rooms/{room_id}")
    assert response.json()["course_count"] == 1


async def test_availability_endpoint(client, catalogue):
    course_id, room_id = catalogue["course"]["id"], catalogue["room"]["id"]
    entry = await _post(client, "/api/schedule-entries", _session(course_id, room_id, "09:00", "11:00"))
    query = {"lab_room_id": room_id, "weekday": "senin", "date": "2024-03-04", "start_time": "10:00", "end_time": "12:00"}

    response = await client.post("/api/schedule-entries/availability", json=query)
    assert response.status_code == 200
    assert response.json()["available"] is False
    assert response.json()["conflicts"][0]["instructor"] == "Dr. Sari Wulandari"

    response = await client.post("/api/schedule-entries/availability", json=dict(query, exclude_entry_id=entry["id"]))
    assert response.json() == {"available": True, "conflicts": []}

    response = await client.post("/api/schedule-entries/availability", json=dict(query, end_time="09:30", start_time="10:00"))
    assert response.status_code == 422


async def test_status_change_over_http(client, catalogue):
    course_id, room_id = catalogue["course"]["id"], catalogue["room"]["id"]
    entry = await _post(client, "/api/schedule-entries", _session(course_id, room_id, "09:00", "11:00"))

    response = await client.patch(f"/api/schedule-entries/{entry['id']}", json={"status": "completed"})
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_status_transition"

    response = await client.patch(f"/api/schedule-entries/{entry['id']}", json={"status": "cancelled"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


async def test_validation_errors_map_to_422(client):
    response = await client.post("/api/lab-rooms", json=dict(LAB_001, code="lab 1", capacity=0))
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert set(body["errors"]) == {"code", "capacity"}


async def test_email_domain_checked_on_user_create(client):
    response = await client.post("/api/users", json=dict(INSTRUCTOR, email="sari@gmail.com"))
    assert response.status_code == 422
    assert "email" in response.json()["errors"]


async def test_duplicate_maps_to_409(client):
    await _post(client, "/api/lab-rooms", LAB_001)
    response = await client.post("/api/lab-rooms", json=LAB_001)
    assert response.status_code == 409
    assert response.json()["error"] == "duplicate_key"
    assert response.json()["field"] == "code"


async def test_delete_room_in_use_maps_to_409(client, catalogue):
    response = await client.delete(f"/api/lab-rooms/{catalogue['room']['id']}")
    assert response.status_code == 409
    assert response.json()["error"] == "dependency_exists"


async def test_missing_entities_map_to_404(client):
    assert (await client.get("/api/lab-rooms/999")).status_code == 404
    response = await client.patch("/api/courses/999", json={"credits": 2})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_student_cannot_manage_rooms(client):
    await _post(client, "/api/users", STUDENT)
    headers = await _token(client, STUDENT["email"])

    response = await client.post("/api/lab-rooms", json=LAB_001, headers=headers)
    assert response.status_code == 403
    assert response.json()["error"] == "permission_denied"

    response = await client.get("/api/schedule-entries", headers=headers)
    assert response.status_code == 200


async def test_instructor_only_edits_own_sessions(client, catalogue):
    course_id, room_id = catalogue["course"]["id"], catalogue["room"]["id"]
    colleague = await _post(
        client, "/api/users", dict(INSTRUCTOR, email="ani@lecturer.akbid.ac.id", nim_nip="199001012015")
    )
    entry = await _post(client, "/api/schedule-entries", _session(course_id, room_id, "09:00", "11:00"))

    headers = await _token(client, colleague["email"])
    response = await client.patch(f"/api/schedule-entries/{entry['id']}", json={"topic": "Changed"}, headers=headers)
    assert response.status_code == 403

    headers = await _token(client, INSTRUCTOR["email"])
    response = await client.patch(f"/api/schedule-entries/{entry['id']}", json={"topic": "Changed"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["topic"] == "Changed"


async def test_token_for_unknown_email(client):
    response = await client.post("/api/auth/token", json={"email": "nobody@akbid.ac.id"})
    assert response.status_code == 404


async def test_permissions_me(client):
    response = await client.get("/api/permissions/me")
    body = response.json()
    assert body["role"] == "admin"
    assert "users.create" in body["permissions"]

    await _post(client, "/api/users", STUDENT)
    headers = await _token(client, STUDENT["email"])
    response = await client.get("/api/permissions/check", params={"route": "/admin/users"}, headers=headers)
    assert response.json() == {"role": "student", "route": False}


async def test_dashboard_stats(client, catalogue):
    response = await client.get("/api/dashboard/stats")
    assert response.status_code == 200
    body = response.json()
    assert body["lab_rooms"]["total"] == 1
    assert body["courses"]["total"] == 1
    assert body["users"]["by_role"]["instructor"] == 1
    assert body["schedule"]["total"] == 0


async def test_room_delete_waits_for_course_delete(client):
    room = await _post(client, "/api/lab-rooms", LAB_001)
    course = await _post(
        client,
        "/api/courses",
        {"code": "KEB301", "name": "Antenatal Care Practice", "credits": 3, "semester": 3, "lab_room_id": room["id"]},
    )

    response = await client.delete(f"/api/lab-rooms/{room['id']}")
    assert response.status_code == 409
    assert response.json()["dependent"] == "courses"

    assert (await client.delete(f"/api/courses/{course['id']}")).status_code == 200
    response = await client.delete(f"/api/lab-rooms/{room['id']}")
    assert response.status_code == 200
    assert (await client.get(f"/api/lab-rooms/{room['id']}")).status_code == 404


@pytest.mark.parametrize(
    "patch,field",
    [
        ({"role": "admin"}, "email"),
        ({"email": "rina@gmail.com"}, "email"),
        ({"nim_nip": "ABCDE"}, "nim_nip"),
    ],
)
async def test_user_patch_checked_against_stored_row(client, patch, field):
    student = await _post(client, "/api/users", STUDENT)
    response = await client.patch(f"/api/users/{student['id']}", json=patch)
    assert response.status_code == 422
    assert field in response.json()["errors"]

    stored = (await client.get(f"/api/users/{student['id']}")).json()
    assert (stored["role"], stored["email"], stored["nim_nip"]) == ("student", STUDENT["email"], STUDENT["nim_nip"])


async def test_user_patch_of_unrelated_field(client):
    student = await _post(client, "/api/users", STUDENT)
    response = await client.patch(f"/api/users/{student['id']}", json={"phone": "08123456789"})
    assert response.status_code == 200
    assert response.json()["phone"] == "08123456789"


async def test_user_patch_missing_user(client):
    response = await client.patch("/api/users/999", json={"role": "admin"})
    assert response.status_code == 404


@pytest.mark.parametrize("url,body", [("/api/lab-rooms", LAB_001), ("/api/users", STUDENT)])
async def test_null_status_is_a_validation_error(client, url, body):
    created = await _post(client, url, body)
    response = await client.patch(f"{url}/{created['id']}", json={"status": None})
    assert response.status_code == 422
    assert response.json()["errors"] == {"status": "Status cannot be empty"}


async def test_null_schedule_fields_are_validation_errors(client, catalogue):
    course_id, room_id = catalogue["course"]["id"], catalogue["room"]["id"]
    entry = await _post(client, "/api/schedule-entries", _session(course_id, room_id, "09:00", "11:00"))
    response = await client.patch(
        f"/api/schedule-entries/{entry['id']}", json={"status": None, "instructor_id": None}
    )
    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"status", "instructor_id"}
