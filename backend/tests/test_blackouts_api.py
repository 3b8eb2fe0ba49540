def create_teacher(client, headers, name="Pr. Joao"):
    response = client.post("/api/teachers/", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def create_schedule(client, headers, teacher_id, **overrides):
    payload = {
        "name": "Teologia Sistematica",
        "teacher_id": teacher_id,
        "weekdays": ["Tuesday"],
        "start_time": "19:00",
        "end_time": "21:00",
        "start_date": "2024-02-06",
        "end_date": "2024-06-25",
        "status": "open_enrollment",
    }
    payload.update(overrides)
    return client.post("/api/schedules/", json=payload, headers=headers)


def create_blackout(client, headers, **overrides):
    payload = {
        "title": "Semana Santa",
        "start_date": "2024-03-25",
        "end_date": "2024-03-31",
        "kind": "holiday",
        "scope": "global",
    }
    payload.update(overrides)
    return client.post("/api/blackouts", json=payload, headers=headers)


def test_create_blackout_uses_kind_color(client, coordinator_headers):
    response = create_blackout(client, coordinator_headers)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["color"] == "#f97316"
    assert body["active"] is True

    custom = create_blackout(client, coordinator_headers, title="Congresso", kind="event", color="#10B981")
    assert custom.json()["color"] == "#10b981"


def test_scoped_blackout_requires_reference(client, coordinator_headers):
    response = create_blackout(client, coordinator_headers, scope="room")
    assert response.status_code == 422
    assert response.json()["details"]["errors"] == ["a room blackout needs the room id"]


def test_inverted_blackout_dates_are_rejected(client, coordinator_headers):
    response = create_blackout(client, coordinator_headers, start_date="2024-04-01", end_date="2024-03-01")
    assert response.status_code == 422


def test_holiday_blocks_schedule_and_event_only_warns(client, coordinator_headers):
    teacher_id = create_teacher(client, coordinator_headers)
    holiday = create_blackout(client, coordinator_headers).json()

    blocked = create_schedule(client, coordinator_headers, teacher_id)
    assert blocked.status_code == 409
    conflict = blocked.json()["details"]["conflicts"][0]
    assert conflict["kind"] == "BLACKOUT_OVERLAP"
    assert conflict["severity"] == 3
    assert conflict["related_id"] == holiday["id"]

    client.put(f"/api/blackouts/{holiday['id']}", json={"kind": "event"}, headers=coordinator_headers)
    accepted = create_schedule(client, coordinator_headers, teacher_id)
    assert accepted.status_code == 201, accepted.text
    assert [(item["kind"], item["severity"]) for item in accepted.json()["warnings"]] == [("BLACKOUT_OVERLAP", 1)]


def test_teacher_blackout_only_affects_that_teacher(client, coordinator_headers):
    joao = create_teacher(client, coordinator_headers, name="Pr. Joao")
    maria = create_teacher(client, coordinator_headers, name="Pra. Maria")
    create_blackout(client, coordinator_headers, title="Licenca", kind="blackout", scope="teacher", scope_ref_id=joao)

    assert create_schedule(client, coordinator_headers, joao).status_code == 409
    assert create_schedule(client, coordinator_headers, maria).status_code == 201


def test_deactivated_blackout_no_longer_blocks(client, coordinator_headers):
    teacher_id = create_teacher(client, coordinator_headers)
    holiday = create_blackout(client, coordinator_headers).json()

    deleted = client.delete(f"/api/blackouts/{holiday['id']}", headers=coordinator_headers)
    assert deleted.status_code == 200
    assert client.get("/api/blackouts", headers=coordinator_headers).json() == []
    history = client.get("/api/blackouts", params={"include_inactive": True}, headers=coordinator_headers).json()
    assert [item["active"] for item in history] == [False]

    assert create_schedule(client, coordinator_headers, teacher_id).status_code == 201


def test_affected_schedules_lists_overlapping_classes(client, coordinator_headers):
    teacher_id = create_teacher(client, coordinator_headers)
    inside = create_schedule(client, coordinator_headers, teacher_id).json()["schedule"]
    create_schedule(
        client,
        coordinator_headers,
        teacher_id,
        name="Curso de Ferias",
        start_date="2024-07-01",
        end_date="2024-07-31",
    )
    holiday = create_blackout(client, coordinator_headers).json()

    response = client.get(f"/api/blackouts/{holiday['id']}/affected-schedules", headers=coordinator_headers)
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [inside["id"]]


def test_teachers_cannot_manage_blackouts(client, teacher_headers):
    assert create_blackout(client, teacher_headers).status_code == 403
    assert client.get("/api/blackouts", headers=teacher_headers).status_code == 200


def test_unknown_blackout_is_not_found(client, coordinator_headers):
    response = client.put("/api/blackouts/missing", json={"title": "X"}, headers=coordinator_headers)
    assert response.status_code == 404


def test_changing_kind_moves_default_color_but_keeps_custom(client, coordinator_headers):
    default = create_blackout(client, coordinator_headers, kind="blackout").json()
    assert default["color"] == "#ef4444"
    recolored = client.put(f"/api/blackouts/{default['id']}", json={"kind": "event"}, headers=coordinator_headers)
    assert recolored.status_code == 200, recolored.text
    assert recolored.json()["color"] == "#8b5cf6"

    custom = create_blackout(client, coordinator_headers, title="Congresso", kind="event", color="#10b981").json()
    kept = client.put(f"/api/blackouts/{custom['id']}", json={"kind": "holiday"}, headers=coordinator_headers)
    assert kept.json()["kind"] == "holiday"
    assert kept.json()["color"] == "#10b981"
