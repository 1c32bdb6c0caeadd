# app/services/identity.py
"""
Identity provider.

The rest of the service only needs two things from it: the current identity
id, and a notification when that id changes. When nobody is signed in an
anonymous identity is created automatically.
"""

import logging
import uuid
from typing import Callable, Optional

from app.services.subscriptions import Subscription, SubscriptionHub

logger = logging.getLogger(__name__)


class IdentityUnavailableError(RuntimeError):
    """No identity could be established"""


class IdentityProvider:

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity or None
        self._hub = SubscriptionHub()

    def current_identity(self) -> Optional[str]:
        return self._identity

    def sign_in_anonymously(self) -> str:
        self._set_identity(f"anon-{uuid.uuid4().hex}")
        logger.info("Signed in anonymously as %s", self._identity)
        return self._identity

    def sign_in(self, identity: str) -> str:
        if not identity:
            raise IdentityUnavailableError("Empty identity")
        self._set_identity(identity)
        return identity

    def ensure_identity(self) -> str:
        """Current identity, signing in anonymously when there is none"""
        return self._identity or self.sign_in_anonymously()

    def on_identity_change(self, callback: Callable[[Optional[str]], None]) -> Subscription:
        return self._hub.register(("identity",), callback)

    def _set_identity(self, identity: Optional[str]) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        self._hub.publish(("identity",), identity)
