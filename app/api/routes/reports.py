import asyncio
import json
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from app.api.deps import get_current_identity, get_document_store, get_pdf_renderer
from app.core.config import settings
from app.schemas.report_data import DisciplineSelect, ReportCreate, ReportListItem, ReportRead
from app.services.document_store import DocumentStore, StoreUnavailableError
from app.services.export_service import ExportDocument, build_export_document
from app.services.pdf_renderer import PdfRenderer, RendererUnavailableError
from app.services.report_service import ReportService
from app.services.subscriptions import Subscription
from app.services.update_resolver import parse_update

logger = logging.getLogger(__name__)

router = APIRouter()


def get_report_or_404(store: DocumentStore, report_id: str) -> dict:
    """Current report; 503 when the store is down, 404 when it does not exist"""
    try:
        report = store.get_document(report_id)
    except StoreUnavailableError as e:
        logger.error("Error fetching report %s: %s", report_id, e)
        raise HTTPException(status_code=503, detail="Report store unavailable")
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


def _event_stream(request: Request, queue: "asyncio.Queue", subscription: Subscription):
    async def events():
        try:
            while True:
                try:
                    payload = await asyncio.wait_for(queue.get(), timeout=settings.SSE_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    if await request.is_disconnected():
                        break
                    yield ": keep-alive\n\n"
                    continue
                yield f"data: {json.dumps(jsonable_encoder(payload))}\n\n"
        finally:
            subscription.cancel()

    return StreamingResponse(events(), media_type="text/event-stream")


def _queue_callback(queue: "asyncio.Queue"):
    loop = asyncio.get_running_loop()

    def push(payload: Any) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, payload)

    return push


@router.post("", response_model=ReportRead, status_code=status.HTTP_201_CREATED)
def create_report(
    payload: Optional[ReportCreate] = Body(None),
    store: DocumentStore = Depends(get_document_store),
    identity: str = Depends(get_current_identity),
):
    """
    Create a new 8D report with the default skeleton
    """
    report_id = ReportService.create_report(store, identity, title=payload.title if payload else None)
    if not report_id:
        raise HTTPException(status_code=503, detail="Report could not be created")
    return get_report_or_404(store, report_id)


@router.get("", response_model=List[ReportListItem])
def list_reports(store: DocumentStore = Depends(get_document_store)):
    """List all reports of the namespace."""
    return ReportService.list_reports(store)


@router.get("/stream")
async def stream_reports(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
):
    """Live report list as server-sent events (full list on every change)."""
    queue: asyncio.Queue = asyncio.Queue()
    subscription = await run_in_threadpool(
        store.subscribe_collection,
        _queue_callback(queue),
        lambda error: logger.error("Error fetching reports: %s", error),
    )
    return _event_stream(request, queue, subscription)


@router.get("/{report_id}", response_model=ReportRead)
def get_report(report_id: str, store: DocumentStore = Depends(get_document_store)):
    return get_report_or_404(store, report_id)


@router.get("/{report_id}/stream")
async def stream_report(
    report_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
):
    """Live report document; `null` is sent once it no longer exists."""
    queue: asyncio.Queue = asyncio.Queue()
    subscription = await run_in_threadpool(
        store.subscribe_document,
        report_id,
        _queue_callback(queue),
        lambda error: logger.error("Error fetching report %s: %s", report_id, error),
    )
    return _event_stream(request, queue, subscription)


@router.patch("/{report_id}", response_model=ReportRead)
def update_report(
    report_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Deep update of one field.

    Body: {"kind": "field", "field": "d3_containment", "value": [...]}
       or {"kind": "path", "path": "d2_problem.where", "value": "..."}
    """
    try:
        target = parse_update(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid update: {str(e)}")

    get_report_or_404(store, report_id)
    if not ReportService.update_report(store, report_id, target):
        raise HTTPException(status_code=503, detail="Report could not be updated")
    return get_report_or_404(store, report_id)


@router.put("/{report_id}/discipline", response_model=ReportRead)
def select_discipline(
    report_id: str,
    payload: DisciplineSelect,
    store: DocumentStore = Depends(get_document_store),
):
    """Persist the discipline the report was last viewed at."""
    get_report_or_404(store, report_id)
    if not ReportService.set_current_discipline(store, report_id, payload.discipline):
        raise HTTPException(status_code=503, detail="Discipline could not be saved")
    return get_report_or_404(store, report_id)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(report_id: str, store: DocumentStore = Depends(get_document_store)) -> None:
    get_report_or_404(store, report_id)
    if not ReportService.delete_report(store, report_id):
        raise HTTPException(status_code=503, detail="Report could not be deleted")


@router.get("/{report_id}/export/sections", response_model=ExportDocument)
def export_sections(report_id: str, store: DocumentStore = Depends(get_document_store)):
    """Printable sections of the report, in export order."""
    return build_export_document(get_report_or_404(store, report_id))


@router.get("/{report_id}/export/pdf")
def export_pdf(
    report_id: str,
    store: DocumentStore = Depends(get_document_store),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
):
    document = build_export_document(get_report_or_404(store, report_id))
    try:
        content = renderer.render(document)
    except RendererUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"PDF renderer unavailable: {str(e)}")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
