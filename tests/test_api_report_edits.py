"""HTTP surface for positional per-discipline edits."""
import pytest

from tests.conftest import AUTH_HEADERS

API = "/api/v1/reports"


@pytest.fixture
def report_id(client):
    response = client.post(API, headers=AUTH_HEADERS)
    assert response.status_code == 201
    return response.json()["id"]


def test_add_then_remove_team_member(client, report_id):
    added = client.post(f"{API}/{report_id}/team", json={"name": "Ana", "role": "Quality engineer"})
    assert added.status_code == 200
    assert added.json()["d1_team"][-1] == {"name": "Ana", "role": "Quality engineer"}

    removed = client.delete(f"{API}/{report_id}/team/1")
    assert removed.status_code == 200
    assert removed.json()["d1_team"] == [{"name": "User user-a", "role": "Leader"}]


def test_update_team_member(client, report_id):
    response = client.patch(f"{API}/{report_id}/team/0", json={"field": "role", "value": "Champion"})

    assert response.status_code == 200
    assert response.json()["d1_team"][0]["role"] == "Champion"


def test_team_edit_out_of_range_returns_404(client, report_id):
    response = client.delete(f"{API}/{report_id}/team/7")

    assert response.status_code == 404
    assert "No item at position 7" in response.json()["detail"]


def test_team_edit_with_unknown_field_returns_422(client, report_id):
    response = client.patch(f"{API}/{report_id}/team/0", json={"field": "email", "value": "x@example.com"})

    assert response.status_code == 422
    assert response.json()["detail"].startswith("Invalid edit")


def test_set_problem_field(client, report_id):
    response = client.put(f"{API}/{report_id}/problem/how_many", json={"value": "120 pcs"})

    assert response.status_code == 200
    problem = response.json()["d2_problem"]
    assert problem["how_many"] == "120 pcs"
    assert problem["what"] == ""


def test_action_edits(client, report_id):
    assert client.post(f"{API}/{report_id}/actions/d5_corrective_actions").status_code == 200

    client.patch(
        f"{API}/{report_id}/actions/d5_corrective_actions/1",
        json={"field": "action", "value": "Replace bearing"},
    )
    response = client.patch(
        f"{API}/{report_id}/actions/d5_corrective_actions/1",
        json={"field": "verified", "value": True},
    )
    assert response.json()["d5_corrective_actions"][1] == {
        "action": "Replace bearing", "responsible": "", "date": "", "verified": True,
    }

    response = client.delete(f"{API}/{report_id}/actions/d5_corrective_actions/0")
    assert [a["action"] for a in response.json()["d5_corrective_actions"]] == ["Replace bearing"]
    assert len(response.json()["d3_containment"]) == 1


def test_actions_on_a_non_action_field_are_rejected(client, report_id):
    assert client.post(f"{API}/{report_id}/actions/d1_team").status_code == 422
    assert client.post(f"{API}/{report_id}/actions/nonsense").status_code == 422


def test_badly_typed_action_value_is_rejected(client, report_id):
    response = client.patch(
        f"{API}/{report_id}/actions/d3_containment/0",
        json={"field": "verified", "value": {"yes": 1}},
    )

    assert response.status_code == 422


def test_why_edits(client, report_id):
    client.patch(f"{API}/{report_id}/whys/0", json={"value": "no calibration"})
    client.post(f"{API}/{report_id}/whys")
    response = client.patch(f"{API}/{report_id}/whys/1", json={"value": "sensor drift"})

    assert response.json()["d4_root_cause"]["five_whys"] == ["no calibration", "sensor drift"]


def test_fishbone_edits(client, report_id):
    client.post(f"{API}/{report_id}/fishbone/Machine", json={"cause": "worn bearing"})
    client.post(f"{API}/{report_id}/fishbone/Machine")
    client.patch(f"{API}/{report_id}/fishbone/Machine/1", json={"value": "loose belt"})
    response = client.delete(f"{API}/{report_id}/fishbone/Machine/0")

    fishbone = response.json()["d4_root_cause"]["fishbone"]
    assert fishbone["Machine"] == ["loose belt"]
    assert all(causes == [] for category, causes in fishbone.items() if category != "Machine")


def test_unknown_fishbone_category_is_rejected(client, report_id):
    assert client.post(f"{API}/{report_id}/fishbone/Weather").status_code == 422


def test_set_text_field(client, report_id):
    response = client.put(f"{API}/{report_id}/sections/d8_recognition/celebration_date", json={"value": "2024-06-01"})

    assert response.status_code == 200
    assert response.json()["d8_recognition"]["celebration_date"] == "2024-06-01"
    assert client.put(f"{API}/{report_id}/sections/d8_recognition/budget", json={"value": "x"}).status_code == 422


def test_edit_on_missing_report_returns_404(client):
    assert client.post(f"{API}/does-not-exist/whys").status_code == 404
