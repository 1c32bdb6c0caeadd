# app/services/update_resolver.py
"""
Deep update resolver.

An update addresses exactly one place in a report:

  FieldUpdate  – replaces a whole top-level field
                 e.g. {"kind": "field", "field": "d3_containment", "value": [...]}
  PathUpdate   – sets one nested key through a known dotted path
                 e.g. {"kind": "path", "path": "d2_problem.where", "value": "Line 3"}

Both fields and paths are closed enumerations; each maps to the concrete type
its value must satisfy, so an invalid path or a badly shaped value is
rejected before anything reaches the store.
"""

import enum
from typing import Annotated, Any, Dict, List, Literal, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from app.models.enums import DisciplineEnum, FishboneCategoryEnum, ProblemKeyEnum
from app.schemas.report_data import (
    ActionItem, Fishbone, Implementation, Prevention, ProblemDescription,
    Recognition, RootCauseAnalysis, TeamMember,
)
from app.services.document_store import set_path


class ReportField(str, enum.Enum):
    """Top-level report fields that can be replaced wholesale"""
    TITLE = "title"
    CURRENT_DISCIPLINE = "currentDiscipline"
    D1_TEAM = "d1_team"
    D2_PROBLEM = "d2_problem"
    D3_CONTAINMENT = "d3_containment"
    D4_ROOT_CAUSE = "d4_root_cause"
    D5_CORRECTIVE_ACTIONS = "d5_corrective_actions"
    D6_IMPLEMENTATION = "d6_implementation"
    D7_PREVENTION = "d7_prevention"
    D8_RECOGNITION = "d8_recognition"


FIELD_TYPES: Dict[ReportField, Any] = {
    ReportField.TITLE: str,
    ReportField.CURRENT_DISCIPLINE: DisciplineEnum,
    ReportField.D1_TEAM: List[TeamMember],
    ReportField.D2_PROBLEM: ProblemDescription,
    ReportField.D3_CONTAINMENT: List[ActionItem],
    ReportField.D4_ROOT_CAUSE: RootCauseAnalysis,
    ReportField.D5_CORRECTIVE_ACTIONS: List[ActionItem],
    ReportField.D6_IMPLEMENTATION: Implementation,
    ReportField.D7_PREVENTION: Prevention,
    ReportField.D8_RECOGNITION: Recognition,
}


def _known_paths() -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    for key in ProblemKeyEnum:
        paths[f"d2_problem.{key.value}"] = str
    paths["d4_root_cause.five_whys"] = List[str]
    paths["d4_root_cause.fishbone"] = Fishbone
    for category in FishboneCategoryEnum:
        paths[f"d4_root_cause.fishbone.{category.value}"] = List[str]
    for name in ("summary", "validation_results"):
        paths[f"d6_implementation.{name}"] = str
    for name in ("updated_docs", "new_standards"):
        paths[f"d7_prevention.{name}"] = str
    for name in ("summary", "celebration_date"):
        paths[f"d8_recognition.{name}"] = str
    return paths


PATH_TYPES: Dict[str, Any] = _known_paths()

ReportPath = enum.Enum(
    "ReportPath",
    {p.upper().replace(".", "__"): p for p in PATH_TYPES},
    module=__name__,
    type=str,
)
ReportPath.__doc__ = "Known dotted paths into nested report fields"

_FIELD_ADAPTERS = {field: TypeAdapter(type_) for field, type_ in FIELD_TYPES.items()}
_PATH_ADAPTERS = {path: TypeAdapter(type_) for path, type_ in PATH_TYPES.items()}


def _normalize(adapter: TypeAdapter, value: Any) -> Any:
    """Validate value and return its JSON form"""
    return adapter.dump_python(adapter.validate_python(value), mode="json")


class FieldUpdate(BaseModel):
    """Replace an entire top-level field"""
    kind: Literal["field"] = "field"
    field: ReportField
    value: Any

    @model_validator(mode="after")
    def _check_value(self):
        self.value = _normalize(_FIELD_ADAPTERS[self.field], self.value)
        return self


class PathUpdate(BaseModel):
    """Set one nested value through a known dotted path"""
    kind: Literal["path"] = "path"
    path: ReportPath
    value: Any

    @model_validator(mode="after")
    def _check_value(self):
        self.value = _normalize(_PATH_ADAPTERS[self.path.value], self.value)
        return self


UpdateTarget = Annotated[Union[FieldUpdate, PathUpdate], Field(discriminator="kind")]

update_target_adapter = TypeAdapter(UpdateTarget)


def parse_update(payload: Any) -> Union[FieldUpdate, PathUpdate]:
    return update_target_adapter.validate_python(payload)


def resolve_update(target: Union[FieldUpdate, PathUpdate]) -> Tuple[str, Any]:
    """Dotted store path and JSON value for an update target"""
    if isinstance(target, FieldUpdate):
        return target.field.value, target.value
    return target.path.value, target.value


def apply_update(document: Dict[str, Any], target: Union[FieldUpdate, PathUpdate]) -> Dict[str, Any]:
    """Copy of document with only the addressed field replaced"""
    path, value = resolve_update(target)
    return set_path(document, path, value)
