"""
Full lifecycle of 8D reports: create, list, read, deep update, delete.

Failures of the identity or the store never propagate out of here: they are
logged and reported to the caller as None / False, with no retry.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from app.models.enums import DisciplineEnum
from app.services.document_store import DocumentStore, StoreUnavailableError
from app.services.update_resolver import FieldUpdate, PathUpdate, ReportField, resolve_update
from app.services.utils.report_helpers import build_default_report

logger = logging.getLogger(__name__)


class ReportService:

    @staticmethod
    def create_report(
        store: Optional[DocumentStore],
        identity: Optional[str],
        title: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Optional[str]:
        """
        Creates a report with the full default skeleton and returns its id
        """
        if store is None or not identity:
            logger.error("Cannot create report: identity or store unavailable")
            return None

        data = build_default_report(identity, today)
        if title:
            data['title'] = title
        try:
            return store.create_document(data)
        except StoreUnavailableError as e:
            logger.error("Error creating new report: %s", e)
            return None

    @staticmethod
    def list_reports(store: DocumentStore) -> List[Dict[str, Any]]:
        try:
            return store.list_documents()
        except StoreUnavailableError as e:
            logger.error("Error fetching reports: %s", e)
            return []

    @staticmethod
    def get_report(store: DocumentStore, report_id: str) -> Optional[Dict[str, Any]]:
        if not report_id:
            return None
        try:
            return store.get_document(report_id)
        except StoreUnavailableError as e:
            logger.error("Error fetching report %s: %s", report_id, e)
            return None

    @staticmethod
    def update_report(
        store: Optional[DocumentStore],
        report_id: Optional[str],
        target: Union[FieldUpdate, PathUpdate],
    ) -> bool:
        """
        Applies one field or dotted-path update; sibling fields are untouched
        """
        if store is None or not report_id:
            logger.error("Cannot update report: no report selected or store unavailable")
            return False

        path, value = resolve_update(target)
        try:
            updated = store.update_field(report_id, path, value)
        except StoreUnavailableError as e:
            logger.error("Error updating %s of report %s: %s", path, report_id, e)
            return False

        if not updated:
            logger.warning("Report %s not found, update of %s dropped", report_id, path)
        return updated

    @staticmethod
    def set_current_discipline(
        store: Optional[DocumentStore],
        report_id: Optional[str],
        discipline: DisciplineEnum,
    ) -> bool:
        target = FieldUpdate(field=ReportField.CURRENT_DISCIPLINE, value=discipline)
        return ReportService.update_report(store, report_id, target)

    @staticmethod
    def delete_report(store: Optional[DocumentStore], report_id: str) -> bool:
        if store is None or not report_id:
            return False
        try:
            return store.delete_document(report_id)
        except StoreUnavailableError as e:
            logger.error("Error deleting report %s: %s", report_id, e)
            return False
