import pytest
from pydantic import ValidationError

from career_readiness.schemas.api import NewUnlockOut


def _evaluate(client, headers, path_id, **overrides):
    payload = {
        "user_id": "student-1",
        "career_path_id": str(path_id),
        "cycle_number": 2,
        "milestone_completion_rate": 50,
        "engaged_pillars": ["Skill Development"],
    }
    payload.update(overrides)
    return client.post("/user/unlocks/evaluate", json=payload, headers=headers)


def test_evaluate_then_list_unlocks_with_reason(client, auth_headers, make_path, add_opportunity):
    path_id = make_path()
    add_opportunity(path_id, "Regional Hackathon", [{"cycle": 2, "rate": 50}], kind="competition", difficulty=2)
    add_opportunity(path_id, "Internship", [{"cycle": 3, "rate": 80}], kind="internship", difficulty=3)

    evaluated = _evaluate(client, auth_headers(), path_id)
    listed = client.get("/user/unlocks", headers=auth_headers())

    assert evaluated.status_code == 200
    assert [u["title"] for u in evaluated.json()["new_unlocks"]] == ["Regional Hackathon"]
    assert listed.status_code == 200
    rows = listed.json()
    assert len(rows) == 1
    assert rows[0]["seen"] is False
    assert rows[0]["accepted"] is False
    assert rows[0]["opportunity"]["title"] == "Regional Hackathon"
    assert rows[0]["opportunity"]["difficulty_level"] == 2
    assert rows[0]["reason"] == "You unlocked this by: 50%+ plan completion, reached Cycle 2"


def test_evaluate_defaults_to_first_cycle_and_zero_rate(client, auth_headers, make_path, add_opportunity):
    path_id = make_path()
    add_opportunity(path_id, "Tech Talk", [{"rate": 0}])
    add_opportunity(path_id, "Bootcamp", [{"rate": 10}])

    response = client.post(
        "/user/unlocks/evaluate",
        json={"user_id": "student-1", "career_path_id": str(path_id)},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert [u["title"] for u in response.json()["new_unlocks"]] == ["Tech Talk"]


def test_evaluate_for_another_user_is_forbidden(client, auth_headers, make_path):
    path_id = make_path()

    response = _evaluate(client, auth_headers("student-2"), path_id)

    assert response.status_code == 403


def test_mark_seen_and_accepted(client, auth_headers, make_path, add_opportunity):
    path_id = make_path()
    add_opportunity(path_id, "Tech Talk", [{"rate": 0}])
    unlock_id = _evaluate(client, auth_headers(), path_id).json()["new_unlocks"][0]["id"]

    seen = client.post(f"/user/unlocks/{unlock_id}/seen", headers=auth_headers())
    assert seen.status_code == 200
    assert seen.json()["seen"] is True
    assert seen.json()["accepted"] is False

    accepted = client.post(f"/user/unlocks/{unlock_id}/accepted", headers=auth_headers())
    assert accepted.status_code == 200
    assert accepted.json()["seen"] is True
    assert accepted.json()["accepted"] is True


def test_cannot_touch_another_users_unlock(client, auth_headers, make_path, add_opportunity):
    path_id = make_path()
    add_opportunity(path_id, "Tech Talk", [{"rate": 0}])
    unlock_id = _evaluate(client, auth_headers(), path_id).json()["new_unlocks"][0]["id"]

    response = client.post(f"/user/unlocks/{unlock_id}/accepted", headers=auth_headers("student-2"))

    assert response.status_code == 404


def test_career_catalog_endpoints(client, make_path, add_opportunity):
    path_id = make_path(pillars=(("Academic Readiness", 3.0), ("Skill Development", 1.0)))
    add_opportunity(path_id, "Internship", [{"rate": 80}], kind="internship", difficulty=3)
    add_opportunity(path_id, "Tech Talk", [{"rate": 0}], difficulty=1)
    add_opportunity(path_id, "Retired", [{"rate": 0}], is_active=False)

    pillars = client.get(f"/careers/{path_id}/pillars").json()
    opportunities = client.get(f"/careers/{path_id}/opportunities").json()

    assert [(p["name"], p["normalized_weight"]) for p in pillars] == [
        ("Academic Readiness", 0.75),
        ("Skill Development", 0.25),
    ]
    assert [o["title"] for o in opportunities] == ["Tech Talk", "Internship"]
    assert [o["type"] for o in opportunities] == ["event", "internship"]


def test_unlock_payload_rejects_unknown_opportunity_type():
    payload = {
        "id": "2b0b3a52-4a55-4c3e-9f39-6f5a0e2f4c11",
        "opportunity_id": "6f0e1b7a-8c3d-4d2e-a1f0-3c9b2e7d5a40",
        "title": "Mystery",
        "description": "",
    }

    assert NewUnlockOut(**payload, type="competition").type == "competition"
    with pytest.raises(ValidationError):
        NewUnlockOut(**payload, type="side-quest")
