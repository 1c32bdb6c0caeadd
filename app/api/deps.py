from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.document_store import DocumentStore
from app.services.identity import IdentityProvider
from app.services.pdf_renderer import PdfRenderer, pdf_renderer
from app.services.subscriptions import SubscriptionHub, subscription_hub
from app.services.workspace_session import SessionRegistry, session_registry


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_subscription_hub() -> SubscriptionHub:
    return subscription_hub


def get_document_store(
    db: Session = Depends(get_db),
    hub: SubscriptionHub = Depends(get_subscription_hub),
) -> DocumentStore:
    return DocumentStore(db=db, hub=hub, app_id=settings.APP_ID)


def get_identity_provider(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> IdentityProvider:
    """Identity from the X-User-Id header; anonymous sign-in happens on demand."""
    return IdentityProvider(identity=x_user_id)


def get_current_identity(
    provider: IdentityProvider = Depends(get_identity_provider),
) -> str:
    return provider.ensure_identity()


def get_pdf_renderer() -> PdfRenderer:
    return pdf_renderer


def get_session_registry() -> SessionRegistry:
    return session_registry
