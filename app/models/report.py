import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, DateTime, JSON, Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from app.db.base import Base


REPORTS_COLLECTION = "8d-reports"


def collection_path(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data/{REPORTS_COLLECTION}"


class ReportDocument(Base):
    """8D report stored as a schemaless document, namespaced by application id"""
    __tablename__ = 'report_documents'

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    app_id = Column(String(100), nullable=False, index=True)
    data = Column(JSON().with_variant(JSONB, 'postgresql'), nullable=False, default=dict,
                  comment="Report body (title, createdBy, currentDiscipline, d1_team..d8_recognition)")
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index('idx_report_documents_app_created', 'app_id', 'created_at'),
    )

    @property
    def path(self) -> str:
        return f"{collection_path(self.app_id)}/{self.id}"

    def __repr__(self):
        return f"<ReportDocument(id='{self.id}', path='{self.path}')>"
