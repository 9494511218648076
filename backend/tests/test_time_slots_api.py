def test_create_and_list_time_slots(client, admin_headers, student_headers):
    for name, start, end in [("Afternoon", "13:00", "14:30"), ("Morning", "08:00", "09:30")]:
        response = client.post(
            "/api/time-slots",
            json={"name": name, "startTime": start, "endTime": end},
            headers=admin_headers,
        )
        assert response.status_code == 201

    slots = client.get("/api/time-slots", headers=student_headers).json()
    assert [(slot["name"], slot["startTime"], slot["endTime"]) for slot in slots] == [
        ("Morning", "08:00", "09:30"),
        ("Afternoon", "13:00", "14:30"),
    ]


def test_time_slot_validation(client, admin_headers):
    inverted = client.post(
        "/api/time-slots",
        json={"name": "Bad", "startTime": "10:00", "endTime": "09:00"},
        headers=admin_headers,
    )
    assert inverted.status_code == 400
    assert inverted.json()["code"] == "invalid_time_range"

    client.post("/api/time-slots", json={"name": "P1", "startTime": "08:00", "endTime": "09:00"}, headers=admin_headers)
    duplicate = client.post(
        "/api/time-slots",
        json={"name": "P1", "startTime": "09:00", "endTime": "10:00"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409


def test_students_cannot_create_time_slots(client, student_headers):
    response = client.post(
        "/api/time-slots",
        json={"name": "P1", "startTime": "08:00", "endTime": "09:00"},
        headers=student_headers,
    )
    assert response.status_code == 403
