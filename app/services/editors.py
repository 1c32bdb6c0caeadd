# app/services/editors.py
"""
Per-discipline edits.

Each helper reads the current report, builds the new value for one field and
returns the update that writes it. The report itself is never mutated.

List items are addressed by position: removing an item shifts every later
item down by one. Removing what was just added restores the same values,
not the same objects.
"""

import copy
from typing import Any, Dict, List, Mapping

from app.models.enums import FishboneCategoryEnum, ProblemKeyEnum
from app.schemas.report_data import ReportData
from app.services.update_resolver import FieldUpdate, PathUpdate, ReportField
from app.services.utils.report_helpers import empty_action

ACTION_FIELDS = (ReportField.D3_CONTAINMENT, ReportField.D5_CORRECTIVE_ACTIONS)
TEXT_PATHS = {
    "d6_implementation": ("summary", "validation_results"),
    "d7_prevention": ("updated_docs", "new_standards"),
    "d8_recognition": ("summary", "celebration_date"),
}


def _current(report: Mapping[str, Any]) -> Dict[str, Any]:
    """Report normalised to its full JSON shape"""
    return ReportData.model_validate(dict(report)).model_dump(mode="json", by_alias=True)


def _check_index(items: List[Any], index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"No item at position {index}")


# ─────────────────────────────────────────────────────────────────────────────
# D1 – Team
# ─────────────────────────────────────────────────────────────────────────────

def add_team_member(report: Mapping[str, Any], name: str = "", role: str = "") -> FieldUpdate:
    team = _current(report)["d1_team"] + [{"name": name, "role": role}]
    return FieldUpdate(field=ReportField.D1_TEAM, value=team)


def update_team_member(report: Mapping[str, Any], index: int, field: str, value: str) -> FieldUpdate:
    team = _current(report)["d1_team"]
    _check_index(team, index)
    if field not in ("name", "role"):
        raise ValueError(f"Unknown team member field '{field}'")
    team[index][field] = value
    return FieldUpdate(field=ReportField.D1_TEAM, value=team)


def remove_team_member(report: Mapping[str, Any], index: int) -> FieldUpdate:
    team = _current(report)["d1_team"]
    _check_index(team, index)
    return FieldUpdate(field=ReportField.D1_TEAM, value=[m for i, m in enumerate(team) if i != index])


# ─────────────────────────────────────────────────────────────────────────────
# D2 – Problem description
# ─────────────────────────────────────────────────────────────────────────────

def set_problem_field(key: Any, value: str) -> PathUpdate:
    key = ProblemKeyEnum(key)
    return PathUpdate(path=f"d2_problem.{key.value}", value=value)


# ─────────────────────────────────────────────────────────────────────────────
# D3 / D5 – Actions
# ─────────────────────────────────────────────────────────────────────────────

def _action_field(field: Any) -> ReportField:
    field = ReportField(field)
    if field not in ACTION_FIELDS:
        raise ValueError(f"{field.value} is not an action list")
    return field


def add_action(report: Mapping[str, Any], field: Any) -> FieldUpdate:
    field = _action_field(field)
    actions = _current(report)[field.value] + [empty_action()]
    return FieldUpdate(field=field, value=actions)


def update_action(report: Mapping[str, Any], field: Any, index: int, key: str, value: Any) -> FieldUpdate:
    field = _action_field(field)
    actions = _current(report)[field.value]
    _check_index(actions, index)
    if key not in empty_action():
        raise ValueError(f"Unknown action field '{key}'")
    actions[index][key] = value
    return FieldUpdate(field=field, value=actions)


def remove_action(report: Mapping[str, Any], field: Any, index: int) -> FieldUpdate:
    field = _action_field(field)
    actions = _current(report)[field.value]
    _check_index(actions, index)
    return FieldUpdate(field=field, value=[a for i, a in enumerate(actions) if i != index])


# ─────────────────────────────────────────────────────────────────────────────
# D4 – 5 Whys and fishbone
# ─────────────────────────────────────────────────────────────────────────────

def add_why(report: Mapping[str, Any]) -> PathUpdate:
    whys = _current(report)["d4_root_cause"]["five_whys"] + [""]
    return PathUpdate(path="d4_root_cause.five_whys", value=whys)


def update_why(report: Mapping[str, Any], index: int, value: str) -> PathUpdate:
    whys = _current(report)["d4_root_cause"]["five_whys"]
    _check_index(whys, index)
    whys[index] = value
    return PathUpdate(path="d4_root_cause.five_whys", value=whys)


def _fishbone(report: Mapping[str, Any]) -> Dict[str, List[str]]:
    return copy.deepcopy(_current(report)["d4_root_cause"]["fishbone"])


def add_fishbone_cause(report: Mapping[str, Any], category: Any, cause: str = "") -> PathUpdate:
    category = FishboneCategoryEnum(category)
    fishbone = _fishbone(report)
    fishbone[category.value].append(cause)
    return PathUpdate(path="d4_root_cause.fishbone", value=fishbone)


def update_fishbone_cause(report: Mapping[str, Any], category: Any, index: int, value: str) -> PathUpdate:
    category = FishboneCategoryEnum(category)
    fishbone = _fishbone(report)
    _check_index(fishbone[category.value], index)
    fishbone[category.value][index] = value
    return PathUpdate(path="d4_root_cause.fishbone", value=fishbone)


def remove_fishbone_cause(report: Mapping[str, Any], category: Any, index: int) -> PathUpdate:
    category = FishboneCategoryEnum(category)
    fishbone = _fishbone(report)
    _check_index(fishbone[category.value], index)
    del fishbone[category.value][index]
    return PathUpdate(path="d4_root_cause.fishbone", value=fishbone)


# ─────────────────────────────────────────────────────────────────────────────
# D6 – D8 free text
# ─────────────────────────────────────────────────────────────────────────────

def set_text_field(section: str, name: str, value: str) -> PathUpdate:
    if name not in TEXT_PATHS.get(section, ()):
        raise ValueError(f"Unknown field '{section}.{name}'")
    return PathUpdate(path=f"{section}.{name}", value=value)
