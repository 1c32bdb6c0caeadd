# app/services/workspace_session.py
"""
Dashboard / Workspace session.

One session holds everything a single user view needs: who is signed in,
which screen is shown, the live report list, the active report and its
discipline. Transitions:

  dashboard --create_report / select_report--> workspace
  workspace --go_to_dashboard--> dashboard
  active report vanishes or its subscription fails --> dashboard
  request_delete / confirm_delete / cancel_delete never change the screen

The report list and the active report are each backed by their own live
subscription; both are cancelled when the view stops needing them, so no
callback ever writes into a closed session.
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from app.core.config import settings
from app.models.enums import DisciplineEnum, ScreenEnum
from app.services.document_store import DocumentStore
from app.services.export_service import build_export_document
from app.services.identity import IdentityProvider, IdentityUnavailableError
from app.services.navigation import DisciplineNavigator
from app.services.pdf_renderer import PdfRenderer, RendererUnavailableError
from app.services.report_service import ReportService
from app.services.subscriptions import Subscription
from app.services.update_resolver import FieldUpdate, PathUpdate

logger = logging.getLogger(__name__)


class NoActiveReportError(RuntimeError):
    """The operation needs a report open in the workspace"""


class WorkspaceSession:

    def __init__(self, identity_provider: IdentityProvider, session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.identity_provider = identity_provider
        self.identity: Optional[str] = None
        self.ready = False
        self.closed = False

        self.screen = ScreenEnum.DASHBOARD
        self.reports: List[Dict[str, Any]] = []
        self.is_loading = True

        self.active_report_id: Optional[str] = None
        self.active_report: Optional[Dict[str, Any]] = None
        self.navigator = DisciplineNavigator()

        self.pending_delete: Optional[str] = None
        self.is_generating_pdf = False

        self._lock = threading.RLock()
        self._list_subscription: Optional[Subscription] = None
        self._report_subscription: Optional[Subscription] = None
        self._identity_subscription: Optional[Subscription] = None

    # ─────────────────────────────────────────────────────────────────────────
    # STARTUP / SHUTDOWN
    # ─────────────────────────────────────────────────────────────────────────

    def start(self, store: DocumentStore) -> "WorkspaceSession":
        """Resolve the identity and open the live report list."""
        try:
            self.identity = self.identity_provider.ensure_identity()
        except IdentityUnavailableError as e:
            # degraded but usable: lists work, creation does not
            logger.error("Error initializing identity: %s", e)
            self.identity = None
        self._identity_subscription = self.identity_provider.on_identity_change(self._on_identity)
        self.ready = True

        self.is_loading = True
        self._list_subscription = store.subscribe_collection(self._on_reports, self._on_reports_error)
        return self

    def close(self) -> None:
        with self._lock:
            subscriptions = (self._report_subscription, self._list_subscription, self._identity_subscription)
            self._report_subscription = None
            self._list_subscription = None
            self._identity_subscription = None
            self.closed = True
        # cancel outside the session lock: a running callback may be waiting for it
        for subscription in subscriptions:
            if subscription is not None:
                subscription.cancel()
        logger.info("Session %s closed", self.id)

    # ─────────────────────────────────────────────────────────────────────────
    # SUBSCRIPTION CALLBACKS
    # ─────────────────────────────────────────────────────────────────────────

    def _on_identity(self, identity: Optional[str]) -> None:
        with self._lock:
            if not self.closed:
                self.identity = identity

    def _on_reports(self, reports: List[Dict[str, Any]]) -> None:
        with self._lock:
            if self.closed:
                return
            self.reports = list(reports)
            self.is_loading = False

    def _on_reports_error(self, error: Exception) -> None:
        logger.error("Error fetching reports: %s", error)
        with self._lock:
            if self.closed:
                return
            self.reports = []
            self.is_loading = False

    def _on_active_report(self, report_id: str, report: Optional[Dict[str, Any]]) -> None:
        if report is None:
            logger.error("Report %s not found", report_id)
            self._leave_workspace(report_id)
            return
        with self._lock:
            # late delivery for a report that is no longer open
            if self.closed or self.active_report_id != report_id:
                return
            self.active_report = report
            self.navigator.load(report)

    def _on_active_report_error(self, report_id: str, error: Exception) -> None:
        logger.error("Error fetching report %s: %s", report_id, error)
        self._leave_workspace(report_id)

    # ─────────────────────────────────────────────────────────────────────────
    # TRANSITIONS
    # ─────────────────────────────────────────────────────────────────────────

    def _enter_workspace(self, store: DocumentStore, report_id: str) -> None:
        with self._lock:
            previous, self._report_subscription = self._report_subscription, None
            self.active_report_id = report_id
            self.active_report = None
            self.screen = ScreenEnum.WORKSPACE
        if previous is not None:
            previous.cancel()

        subscription = store.subscribe_document(
            report_id,
            lambda report: self._on_active_report(report_id, report),
            lambda error: self._on_active_report_error(report_id, error),
        )
        with self._lock:
            keep = (
                not self.closed
                and self.active_report_id == report_id
                and self._report_subscription is None
            )
            if keep:
                self._report_subscription = subscription
        if not keep:
            # redirected to the dashboard or replaced by another report meanwhile
            subscription.cancel()

    def _leave_workspace(self, report_id: Optional[str] = None) -> None:
        """Back to the dashboard; with report_id only if that report is still the open one."""
        with self._lock:
            if report_id is not None and self.active_report_id != report_id:
                return
            subscription, self._report_subscription = self._report_subscription, None
            self.screen = ScreenEnum.DASHBOARD
            self.active_report_id = None
            self.active_report = None
            self.navigator.reset()
        if subscription is not None:
            subscription.cancel()

    def create_report(self, store: DocumentStore) -> Optional[str]:
        if not self.identity:
            logger.error("Cannot create report without an identity")
            return None
        report_id = ReportService.create_report(store, self.identity)
        if report_id:
            self._enter_workspace(store, report_id)
        return report_id

    def select_report(self, store: DocumentStore, report_id: str) -> None:
        if not report_id:
            raise ValueError("report_id is required")
        self._enter_workspace(store, report_id)

    def go_to_dashboard(self) -> None:
        self._leave_workspace()

    def request_delete(self, report_id: str) -> None:
        """Record delete intent; the screen and active report stay as they are."""
        self.pending_delete = report_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self, store: DocumentStore) -> bool:
        report_id, self.pending_delete = self.pending_delete, None
        if not report_id:
            return False
        return ReportService.delete_report(store, report_id)

    # ─────────────────────────────────────────────────────────────────────────
    # WORKSPACE
    # ─────────────────────────────────────────────────────────────────────────

    def _require_report(self) -> str:
        if self.screen != ScreenEnum.WORKSPACE or not self.active_report_id:
            raise NoActiveReportError("No report is open")
        return self.active_report_id

    def select_discipline(self, store: DocumentStore, discipline: Any) -> DisciplineEnum:
        report_id = self._require_report()
        return self.navigator.select(
            discipline,
            persist=lambda d: ReportService.set_current_discipline(store, report_id, d),
        )

    def update(self, store: DocumentStore, target: Union[FieldUpdate, PathUpdate]) -> bool:
        return ReportService.update_report(store, self._require_report(), target)

    def export_pdf(self, renderer: PdfRenderer) -> Optional[Tuple[str, bytes]]:
        """Filename and PDF bytes, or None when the renderer cannot be loaded."""
        self._require_report()
        if self.active_report is None:
            return None
        self.is_generating_pdf = True
        try:
            document = build_export_document(self.active_report)
            return document.filename, renderer.render(document)
        except RendererUnavailableError as e:
            logger.error("Failed to load PDF generation: %s", e)
            return None
        finally:
            self.is_generating_pdf = False

    # ─────────────────────────────────────────────────────────────────────────
    # STATE
    # ─────────────────────────────────────────────────────────────────────────

    def state(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "session_id": self.id,
                "identity": self.identity,
                "ready": self.ready,
                "screen": self.screen.value,
                "is_loading": self.is_loading,
                "reports": list(self.reports),
                "active_report_id": self.active_report_id,
                "active_report": self.active_report,
                "active_discipline": self.navigator.active.value if self.navigator.active else None,
                "pending_delete": self.pending_delete,
                "is_generating_pdf": self.is_generating_pdf,
            }


class SessionRegistry:
    """
    Open sessions, keyed by id.

    Every lookup refreshes the session's last access time. Sessions idle for
    longer than idle_seconds are closed on the next open or lookup, so
    clients that disappear without closing do not keep subscriptions alive.
    """

    def __init__(self, idle_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.idle_seconds = settings.SESSION_IDLE_SECONDS if idle_seconds is None else idle_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, WorkspaceSession] = {}
        self._last_access: Dict[str, float] = {}

    def open(self, identity_provider: IdentityProvider, store: DocumentStore) -> WorkspaceSession:
        self.expire_idle_sessions()
        session = WorkspaceSession(identity_provider).start(store)
        with self._lock:
            self._sessions[session.id] = session
            self._last_access[session.id] = self._clock()
        logger.info("Session %s opened for %s", session.id, session.identity)
        return session

    def get(self, session_id: str) -> Optional[WorkspaceSession]:
        self.expire_idle_sessions()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_access[session_id] = self._clock()
            return session

    def close(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_access.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def expire_idle_sessions(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                self._sessions.pop(session_id)
                for session_id, last_access in list(self._last_access.items())
                if now - last_access > self.idle_seconds
            ]
            for session in expired:
                self._last_access.pop(session.id, None)
        for session in expired:
            session.close()
        if expired:
            logger.info("Expired %d idle sessions", len(expired))
        return len(expired)

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._last_access.clear()
        for session in sessions:
            session.close()


session_registry = SessionRegistry()
