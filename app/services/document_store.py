# app/services/document_store.py
"""
Namespaced document store for 8D reports.

Documents live under artifacts/{appId}/public/data/8d-reports/{reportId}.
The store is schemaless: it persists whatever mapping it is given and only
knows about dotted field paths for partial updates. Every committed write is
published through the SubscriptionHub so live observers see it (last write
wins, no merge).
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from app.models.report import ReportDocument, collection_path
from app.services.subscriptions import OnError, OnNext, Subscription, SubscriptionHub

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """The backing database could not serve the request"""


def set_path(data: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """
    Return a copy of data with the dotted path set to value.
    Intermediate mappings are created when missing; siblings are untouched.
    """
    keys = path.split(".")
    if not path or any(not key for key in keys):
        raise ValueError(f"Invalid field path '{path}'")

    result = copy.deepcopy(data)
    node = result
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[keys[-1]] = copy.deepcopy(value)
    return result


def to_snapshot(row: ReportDocument) -> Dict[str, Any]:
    return {**(row.data or {}), "id": row.id, "createdAt": row.created_at}


class DocumentStore:
    """SQLAlchemy-backed report collection for one application namespace"""

    def __init__(self, db: Session, hub: SubscriptionHub, app_id: str):
        self.db = db
        self.hub = hub
        self.app_id = app_id

    @property
    def collection_path(self) -> str:
        return collection_path(self.app_id)

    def document_path(self, document_id: str) -> str:
        return f"{self.collection_path}/{document_id}"

    # ─────────────────────────────────────────────────────────────────────────
    # READ
    # ─────────────────────────────────────────────────────────────────────────

    def _get_row(self, document_id: str) -> Optional[ReportDocument]:
        return self.db.query(ReportDocument).filter(
            ReportDocument.app_id == self.app_id,
            ReportDocument.id == document_id,
        ).first()

    def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        try:
            row = self._get_row(document_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e)) from e
        return to_snapshot(row) if row else None

    def list_documents(self) -> List[Dict[str, Any]]:
        try:
            rows = self.db.query(ReportDocument).filter(
                ReportDocument.app_id == self.app_id,
            ).all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e)) from e
        return [to_snapshot(row) for row in rows]

    # ─────────────────────────────────────────────────────────────────────────
    # WRITE
    # ─────────────────────────────────────────────────────────────────────────

    def create_document(self, data: Dict[str, Any]) -> str:
        row = ReportDocument(app_id=self.app_id, data=copy.deepcopy(data))
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(str(e)) from e

        logger.info("Created %s", row.path)
        self._publish_document(row.id, to_snapshot(row))
        self._publish_collection()
        return row.id

    def update_field(self, document_id: str, path: str, value: Any) -> bool:
        """Set one dotted field path in one transaction. False if the document is missing."""
        try:
            row = self._get_row(document_id)
            if row is None:
                return False
            row.data = set_path(row.data or {}, path, value)
            flag_modified(row, "data")
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(str(e)) from e

        logger.debug("Updated %s field %s", row.path, path)
        self._publish_document(row.id, to_snapshot(row))
        self._publish_collection()
        return True

    def delete_document(self, document_id: str) -> bool:
        try:
            row = self._get_row(document_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(str(e)) from e

        logger.info("Deleted %s", self.document_path(document_id))
        self._publish_document(document_id, None)
        self._publish_collection()
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # LIVE
    # ─────────────────────────────────────────────────────────────────────────

    def subscribe_collection(self, on_next: OnNext, on_error: Optional[OnError] = None) -> Subscription:
        """Register for the full report list; the current list is delivered immediately."""
        subscription = self.hub.register(self.hub.collection_key(self.app_id), on_next, on_error)
        try:
            subscription.deliver(self.list_documents())
        except StoreUnavailableError as e:
            subscription.fail(e)
        return subscription

    def subscribe_document(
        self, document_id: str, on_next: OnNext, on_error: Optional[OnError] = None,
    ) -> Subscription:
        """Register for one report; delivers None while it does not exist."""
        subscription = self.hub.register(self.hub.document_key(self.app_id, document_id), on_next, on_error)
        try:
            subscription.deliver(self.get_document(document_id))
        except StoreUnavailableError as e:
            subscription.fail(e)
        return subscription

    def _publish_document(self, document_id: str, snapshot: Optional[Dict[str, Any]]) -> None:
        self.hub.publish(self.hub.document_key(self.app_id, document_id), snapshot)

    def _publish_collection(self) -> None:
        key = self.hub.collection_key(self.app_id)
        if not self.hub.has_subscribers(key):
            return
        try:
            documents = self.list_documents()
        except StoreUnavailableError as e:
            self.hub.publish_error(key, e)
            return
        self.hub.publish(key, documents)
