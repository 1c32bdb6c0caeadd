# app/api/routes/sessions.py
"""
Dashboard / Workspace sessions.

A thin client opens a session, then drives it with screen transitions:

  POST   /sessions                               – open (identity from X-User-Id or anonymous)
  GET    /sessions/{sid}                         – current state
  POST   /sessions/{sid}/reports                 – create a report and open it
  POST   /sessions/{sid}/reports/{rid}/select    – open an existing report
  POST   /sessions/{sid}/dashboard               – back to the dashboard
  PUT    /sessions/{sid}/discipline              – navigate to D1..D8
  POST   /sessions/{sid}/reports/{rid}/delete-intent
  POST   /sessions/{sid}/delete/confirm | /delete/cancel
  DELETE /sessions/{sid}                         – close, drops live subscriptions
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_document_store, get_identity_provider, get_session_registry
from app.schemas.report_data import DisciplineSelect
from app.services.document_store import DocumentStore
from app.services.identity import IdentityProvider
from app.services.workspace_session import NoActiveReportError, SessionRegistry, WorkspaceSession

router = APIRouter()


def _get_session(session_id: str, registry: SessionRegistry) -> WorkspaceSession:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("", status_code=status.HTTP_201_CREATED)
def open_session(
    provider: IdentityProvider = Depends(get_identity_provider),
    store: DocumentStore = Depends(get_document_store),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    return registry.open(provider, store).state()


@router.get("/{session_id}")
def get_session_state(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    return _get_session(session_id, registry).state()


@router.post("/{session_id}/reports", status_code=status.HTTP_201_CREATED)
def create_report(
    session_id: str,
    store: DocumentStore = Depends(get_document_store),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    if not session.create_report(store):
        raise HTTPException(status_code=503, detail="Report could not be created")
    return session.state()


@router.post("/{session_id}/reports/{report_id}/select")
def select_report(
    session_id: str,
    report_id: str,
    store: DocumentStore = Depends(get_document_store),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    session.select_report(store, report_id)
    return session.state()


@router.post("/{session_id}/dashboard")
def go_to_dashboard(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    session.go_to_dashboard()
    return session.state()


@router.put("/{session_id}/discipline")
def select_discipline(
    session_id: str,
    payload: DisciplineSelect,
    store: DocumentStore = Depends(get_document_store),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    try:
        session.select_discipline(store, payload.discipline)
    except NoActiveReportError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.state()


@router.post("/{session_id}/reports/{report_id}/delete-intent")
def request_delete(
    session_id: str,
    report_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    session.request_delete(report_id)
    return session.state()


@router.post("/{session_id}/delete/confirm")
def confirm_delete(
    session_id: str,
    store: DocumentStore = Depends(get_document_store),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    if not session.pending_delete:
        raise HTTPException(status_code=400, detail="No delete pending")
    deleted = session.confirm_delete(store)
    return {**session.state(), "deleted": deleted}


@router.post("/{session_id}/delete/cancel")
def cancel_delete(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_session(session_id, registry)
    session.cancel_delete()
    return session.state()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    if not registry.close(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
