# app/api/routes/report_edits.py
"""
Positional edits on one report.

Items are addressed by their index in the list; removing an item shifts the
later ones down. Every edit writes exactly one field and returns the report.
"""

from typing import Callable, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException

from app.api.deps import get_document_store
from app.api.routes.reports import get_report_or_404
from app.models.enums import FishboneCategoryEnum, ProblemKeyEnum
from app.schemas.report_data import ReportRead
from app.schemas.report_edits import CauseAdd, ItemFieldEdit, TeamMemberAdd, TextValue
from app.services import editors
from app.services.document_store import DocumentStore
from app.services.report_service import ReportService
from app.services.update_resolver import FieldUpdate, PathUpdate

router = APIRouter()


def _apply_edit(
    store: DocumentStore,
    report_id: str,
    build: Callable[[dict], Union[FieldUpdate, PathUpdate]],
) -> dict:
    report = get_report_or_404(store, report_id)
    try:
        target = build(report)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid edit: {str(e)}")

    if not ReportService.update_report(store, report_id, target):
        raise HTTPException(status_code=503, detail="Report could not be updated")
    return get_report_or_404(store, report_id)


# ─────────────────────────────────────────────────────────────────────────────
# D1 – Team
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/{report_id}/team", response_model=ReportRead)
def add_team_member(
    report_id: str,
    payload: Optional[TeamMemberAdd] = Body(None),
    store: DocumentStore = Depends(get_document_store),
):
    payload = payload or TeamMemberAdd()
    return _apply_edit(store, report_id, lambda r: editors.add_team_member(r, payload.name, payload.role))


@router.patch("/{report_id}/team/{index}", response_model=ReportRead)
def update_team_member(
    report_id: str,
    index: int,
    payload: ItemFieldEdit,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(
        store, report_id,
        lambda r: editors.update_team_member(r, index, payload.field, payload.value),
    )


@router.delete("/{report_id}/team/{index}", response_model=ReportRead)
def remove_team_member(report_id: str, index: int, store: DocumentStore = Depends(get_document_store)):
    return _apply_edit(store, report_id, lambda r: editors.remove_team_member(r, index))


# ─────────────────────────────────────────────────────────────────────────────
# D2 – Problem description
# ─────────────────────────────────────────────────────────────────────────────

@router.put("/{report_id}/problem/{key}", response_model=ReportRead)
def set_problem_field(
    report_id: str,
    key: ProblemKeyEnum,
    payload: TextValue,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(store, report_id, lambda r: editors.set_problem_field(key, payload.value))


# ─────────────────────────────────────────────────────────────────────────────
# D3 / D5 – Actions  (field: d3_containment | d5_corrective_actions)
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/{report_id}/actions/{field}", response_model=ReportRead)
def add_action(report_id: str, field: str, store: DocumentStore = Depends(get_document_store)):
    return _apply_edit(store, report_id, lambda r: editors.add_action(r, field))


@router.patch("/{report_id}/actions/{field}/{index}", response_model=ReportRead)
def update_action(
    report_id: str,
    field: str,
    index: int,
    payload: ItemFieldEdit,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(
        store, report_id,
        lambda r: editors.update_action(r, field, index, payload.field, payload.value),
    )


@router.delete("/{report_id}/actions/{field}/{index}", response_model=ReportRead)
def remove_action(report_id: str, field: str, index: int, store: DocumentStore = Depends(get_document_store)):
    return _apply_edit(store, report_id, lambda r: editors.remove_action(r, field, index))


# ─────────────────────────────────────────────────────────────────────────────
# D4 – 5 Whys and fishbone
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/{report_id}/whys", response_model=ReportRead)
def add_why(report_id: str, store: DocumentStore = Depends(get_document_store)):
    return _apply_edit(store, report_id, editors.add_why)


@router.patch("/{report_id}/whys/{index}", response_model=ReportRead)
def update_why(
    report_id: str,
    index: int,
    payload: TextValue,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(store, report_id, lambda r: editors.update_why(r, index, payload.value))


@router.post("/{report_id}/fishbone/{category}", response_model=ReportRead)
def add_fishbone_cause(
    report_id: str,
    category: FishboneCategoryEnum,
    payload: Optional[CauseAdd] = Body(None),
    store: DocumentStore = Depends(get_document_store),
):
    cause = payload.cause if payload else ""
    return _apply_edit(store, report_id, lambda r: editors.add_fishbone_cause(r, category, cause))


@router.patch("/{report_id}/fishbone/{category}/{index}", response_model=ReportRead)
def update_fishbone_cause(
    report_id: str,
    category: FishboneCategoryEnum,
    index: int,
    payload: TextValue,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(
        store, report_id,
        lambda r: editors.update_fishbone_cause(r, category, index, payload.value),
    )


@router.delete("/{report_id}/fishbone/{category}/{index}", response_model=ReportRead)
def remove_fishbone_cause(
    report_id: str,
    category: FishboneCategoryEnum,
    index: int,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(store, report_id, lambda r: editors.remove_fishbone_cause(r, category, index))


# ─────────────────────────────────────────────────────────────────────────────
# D6 – D8 free text
# ─────────────────────────────────────────────────────────────────────────────

@router.put("/{report_id}/sections/{section}/{name}", response_model=ReportRead)
def set_text_field(
    report_id: str,
    section: str,
    name: str,
    payload: TextValue,
    store: DocumentStore = Depends(get_document_store),
):
    return _apply_edit(store, report_id, lambda r: editors.set_text_field(section, name, payload.value))
