import pytest

from conftest import create, new_employee


@pytest.fixture
def roster(client, department_id, shift_id):
    ids = {
        "zoe": new_employee(client, department_id, "Zoe Adams"),
        "amy": new_employee(client, department_id, "Amy Brown"),
        "old": new_employee(client, department_id, "Old Timer", status="inactive"),
    }
    for who, day in (("zoe", "2024-01-02"), ("zoe", "2024-01-01"), ("amy", "2024-01-03"), ("amy", "2024-02-01"), ("old", "2024-01-02")):
        create(client, "schedules", {"employee_id": ids[who], "shift_id": shift_id, "work_date": day})
    return ids


def test_roster_requires_date_range(client):
    r = client.get("/api/schedules")
    assert r.status_code == 400
    assert r.json() == {"message": "start and end date are required"}

    r = client.get("/api/schedules", params={"start": "2024-01-01"})
    assert r.json() == {"message": "start and end date are required"}


def test_roster_rejects_bad_dates(client):
    r = client.get("/api/schedules", params={"start": "yesterday", "end": "2024-01-01"})
    assert r.status_code == 400

    r = client.get("/api/schedules", params={"start": "2024-02-01", "end": "2024-01-01"})
    assert r.status_code == 400


def test_roster_groups_schedules_by_active_employee(client, roster):
    r = client.get("/api/schedules", params={"start": "2024-01-01", "end": "2024-01-31"})
    assert r.status_code == 200
    body = r.json()

    assert body["meta"] == {"page": 1, "limit": 10, "total": 2, "totalPages": 1}
    assert [e["name"] for e in body["data"]] == ["Amy Brown", "Zoe Adams"]

    amy, zoe = body["data"]
    assert amy["employee_id"] == roster["amy"]
    assert [s["work_date"] for s in amy["schedules"]] == ["2024-01-03"]
    assert [s["work_date"] for s in zoe["schedules"]] == ["2024-01-01", "2024-01-02"]
    assert zoe["schedules"][0]["shift_name"] == "Morning"
    assert zoe["schedules"][0]["status"] == "scheduled"


def test_roster_pages_over_employees(client, roster):
    r = client.get("/api/schedules", params={"start": "2024-01-01", "end": "2024-12-31", "limit": "1", "page": "2"})
    body = r.json()
    assert body["meta"]["totalPages"] == 2
    assert [e["name"] for e in body["data"]] == ["Zoe Adams"]
    assert len(body["data"][0]["schedules"]) == 2


def test_roster_search_and_empty_window(client, roster):
    r = client.get("/api/schedules", params={"start": "2024-03-01", "end": "2024-03-31", "search": "amy"})
    body = r.json()
    assert body["meta"]["total"] == 1
    assert body["data"] == [{"employee_id": roster["amy"], "name": "Amy Brown", "schedules": []}]


def test_one_schedule_per_employee_per_day(client, roster, shift_id):
    r = client.post(
        "/api/schedules",
        json={"employee_id": roster["zoe"], "shift_id": shift_id, "work_date": "2024-01-01"},
    )
    assert r.status_code == 409
    assert r.json() == {"message": "Employee already has a schedule on this date"}


def test_schedule_create_requires_shift(client, roster):
    r = client.post("/api/schedules", json={"employee_id": roster["zoe"], "work_date": "2024-06-01"})
    assert r.status_code == 400
    assert r.json() == {"message": "Missing required fields: shift_id"}


def test_schedule_item_routes(client, roster):
    rows = client.get(f"/api/schedules/employee/{roster['amy']}").json()
    sid = rows[0]["id"]

    item = client.get(f"/api/schedules/{sid}").json()
    assert item["employee_name"] == "Amy Brown"
    assert item["shift_name"] == "Morning"

    # employee_id is not part of a schedule update
    r = client.patch(f"/api/schedules/{sid}", json={"employee_id": roster["zoe"]})
    assert r.json() == {"message": "No fields to update"}

    r = client.patch(f"/api/schedules/{sid}", json={"status": "off", "notes": "swap"})
    assert r.status_code == 200
    item = client.get(f"/api/schedules/{sid}").json()
    assert (item["status"], item["notes"]) == ("off", "swap")
    assert item["updated_at"] is not None

    assert client.delete(f"/api/schedules/{sid}").status_code == 200
    assert client.get(f"/api/schedules/{sid}").status_code == 404


def test_schedules_for_employee(client, roster):
    r = client.get(f"/api/schedules/employee/{roster['amy']}")
    assert r.status_code == 200
    assert [s["work_date"] for s in r.json()] == ["2024-01-03", "2024-02-01"]

    r = client.get("/api/schedules/employee/999")
    assert r.status_code == 404
    assert r.json() == {"message": "Employee not found"}

    r = client.get("/api/schedules/employee/abc")
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid employee id"}


def test_schedules_for_out_of_range_employee_id(client):
    r = client.get("/api/schedules/employee/99999999999999999999")
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid employee id"}
