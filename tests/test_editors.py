"""Per-discipline edits are positional and never mutate the report they read."""
import copy

import pytest

from app.services import editors
from app.services.update_resolver import FieldUpdate, PathUpdate, apply_update
from app.services.utils.report_helpers import build_default_report


@pytest.fixture
def report():
    data = build_default_report("abcdef123456")
    data["id"] = "report-1"
    return data


def test_add_then_remove_team_member_restores_roster(report):
    roster = copy.deepcopy(report["d1_team"])

    grown = apply_update(report, editors.add_team_member(report, "Ana", "Quality engineer"))
    assert grown["d1_team"][-1] == {"name": "Ana", "role": "Quality engineer"}

    shrunk = apply_update(grown, editors.remove_team_member(grown, len(grown["d1_team"]) - 1))
    assert shrunk["d1_team"] == roster


def test_removing_shifts_later_positions(report):
    report = apply_update(report, editors.add_team_member(report, "Ana", "QE"))
    report = apply_update(report, editors.add_team_member(report, "Bo", "Maintenance"))

    report = apply_update(report, editors.remove_team_member(report, 1))

    assert [m["name"] for m in report["d1_team"]] == ["User abcdef", "Bo"]


def test_update_team_member_does_not_mutate_input(report):
    before = copy.deepcopy(report)

    target = editors.update_team_member(report, 0, "role", "Champion")

    assert isinstance(target, FieldUpdate)
    assert target.value == [{"name": "User abcdef", "role": "Champion"}]
    assert report == before


def test_team_member_edits_check_position_and_field(report):
    with pytest.raises(IndexError):
        editors.remove_team_member(report, 5)
    with pytest.raises(ValueError):
        editors.update_team_member(report, 0, "email", "x@example.com")


def test_problem_field_edit_targets_one_key():
    target = editors.set_problem_field("how_many", "120 pcs")

    assert isinstance(target, PathUpdate)
    assert target.path.value == "d2_problem.how_many"
    with pytest.raises(ValueError):
        editors.set_problem_field("colour", "red")


@pytest.mark.parametrize("field", ["d3_containment", "d5_corrective_actions"])
def test_action_list_edits(report, field):
    report = apply_update(report, editors.add_action(report, field))
    assert len(report[field]) == 2

    report = apply_update(report, editors.update_action(report, field, 1, "action", "100% inspection"))
    report = apply_update(report, editors.update_action(report, field, 1, "verified", True))
    assert report[field][1] == {"action": "100% inspection", "responsible": "", "date": "", "verified": True}

    report = apply_update(report, editors.remove_action(report, field, 0))
    assert [a["action"] for a in report[field]] == ["100% inspection"]


def test_action_edits_reject_other_fields(report):
    with pytest.raises(ValueError):
        editors.add_action(report, "d1_team")
    with pytest.raises(ValueError):
        editors.update_action(report, "d3_containment", 0, "cost", "10")


def test_five_whys_edits(report):
    report = apply_update(report, editors.update_why(report, 0, "no calibration"))
    report = apply_update(report, editors.add_why(report))
    report = apply_update(report, editors.update_why(report, 1, "sensor drift"))

    assert report["d4_root_cause"]["five_whys"] == ["no calibration", "sensor drift"]


def test_fishbone_edits_only_touch_one_category(report):
    report = apply_update(report, editors.add_fishbone_cause(report, "Machine", "worn bearing"))
    report = apply_update(report, editors.add_fishbone_cause(report, "Machine"))
    report = apply_update(report, editors.update_fishbone_cause(report, "Machine", 1, "loose belt"))

    fishbone = report["d4_root_cause"]["fishbone"]
    assert fishbone["Machine"] == ["worn bearing", "loose belt"]
    assert all(causes == [] for category, causes in fishbone.items() if category != "Machine")

    report = apply_update(report, editors.remove_fishbone_cause(report, "Machine", 0))
    assert report["d4_root_cause"]["fishbone"]["Machine"] == ["loose belt"]

    with pytest.raises(ValueError):
        editors.add_fishbone_cause(report, "Weather")


def test_text_field_edits():
    target = editors.set_text_field("d7_prevention", "updated_docs", "PFMEA rev C")

    assert target.path.value == "d7_prevention.updated_docs"
    with pytest.raises(ValueError):
        editors.set_text_field("d7_prevention", "summary", "x")
