# app/services/export_service.py
"""
Turns a report into an ordered list of printable sections.

Section order is fixed:
  D1 team table, D2 5W2H table, D3 containment table,
  D4 numbered 5 Whys followed by the fishbone table,
  D5 corrective actions table, D6/D7/D8 field tables.

Page breaks are left to the renderer.
"""

from typing import Annotated, Any, List, Literal, Mapping, Union

from pydantic import BaseModel, Field

from app.models.enums import DisciplineEnum, FishboneCategoryEnum, ProblemKeyEnum
from app.schemas.report_data import ActionItem, ReportData
from app.services.utils.report_helpers import get_discipline_name


class TableSection(BaseModel):
    kind: Literal["table"] = "table"
    title: str
    head: List[str]
    rows: List[List[str]] = Field(default_factory=list)


class TextSection(BaseModel):
    kind: Literal["text"] = "text"
    title: str
    lines: List[str] = Field(default_factory=list)


ExportSection = Annotated[Union[TableSection, TextSection], Field(discriminator="kind")]


class ExportDocument(BaseModel):
    title: str = "8D Report"
    subtitle: str = ""
    filename: str
    sections: List[ExportSection] = Field(default_factory=list)


def export_filename(report_id: str) -> str:
    return f"8D_Report_{report_id}.pdf"


def _heading(code: DisciplineEnum) -> str:
    return f"{code.value}: {get_discipline_name(code)}"


def _action_rows(actions: List[ActionItem]) -> List[List[str]]:
    return [[a.action, a.responsible, a.date] for a in actions]


def build_sections(report: Mapping[str, Any]) -> List[Union[TableSection, TextSection]]:
    data = ReportData.model_validate(dict(report))
    root_cause = data.d4_root_cause

    sections: List[Union[TableSection, TextSection]] = [
        TableSection(
            title=_heading(DisciplineEnum.D1),
            head=["Name", "Role"],
            rows=[[m.name, m.role] for m in data.d1_team],
        ),
        TableSection(
            title=f"{_heading(DisciplineEnum.D2)} (5W2H)",
            head=["Question", "Description"],
            rows=[[key.value, getattr(data.d2_problem, key.value)] for key in ProblemKeyEnum],
        ),
        TableSection(
            title=_heading(DisciplineEnum.D3),
            head=["Action", "Responsible", "Date"],
            rows=_action_rows(data.d3_containment),
        ),
        TextSection(
            title=f"{_heading(DisciplineEnum.D4)} - 5 Whys",
            lines=[f"{i}. {why}" for i, why in enumerate(root_cause.five_whys, start=1)],
        ),
        TableSection(
            title="Ishikawa Diagram",
            head=["Category", "Potential Causes"],
            rows=[
                [category.value, "\n".join(root_cause.fishbone.get(category, []))]
                for category in FishboneCategoryEnum
            ],
        ),
        TableSection(
            title=_heading(DisciplineEnum.D5),
            head=["Action", "Responsible", "Date"],
            rows=_action_rows(data.d5_corrective_actions),
        ),
        TableSection(
            title=_heading(DisciplineEnum.D6),
            head=["Field", "Value"],
            rows=[
                ["Implementation summary", data.d6_implementation.summary],
                ["Validation results", data.d6_implementation.validation_results],
            ],
        ),
        TableSection(
            title=_heading(DisciplineEnum.D7),
            head=["Field", "Value"],
            rows=[
                ["Updated documents", data.d7_prevention.updated_docs],
                ["New standards", data.d7_prevention.new_standards],
            ],
        ),
        TableSection(
            title=_heading(DisciplineEnum.D8),
            head=["Field", "Value"],
            rows=[
                ["Recognition summary", data.d8_recognition.summary],
                ["Celebration date", data.d8_recognition.celebration_date],
            ],
        ),
    ]
    return sections


def build_export_document(report: Mapping[str, Any]) -> ExportDocument:
    return ExportDocument(
        subtitle=str(report.get("title") or ""),
        filename=export_filename(str(report["id"])),
        sections=build_sections(report),
    )
