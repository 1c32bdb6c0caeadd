# app/services/subscriptions.py
"""
Live subscriptions for report documents.

The document store publishes a snapshot after every write; the hub fans it
out to the registered observers:

  collection subscribers: receive the full list of reports in a namespace
  document subscribers: receive one report, or None once it is gone

Every registration returns a Subscription handle. Once cancel() returns the
callback is never invoked again, even if a publish is running concurrently
on another thread.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

OnNext = Callable[[Any], None]
OnError = Callable[[Exception], None]


class Subscription:
    """Cancellation handle for one observer"""

    def __init__(self, key: Tuple[str, ...], on_next: OnNext, on_error: Optional[OnError] = None):
        self.key = key
        self._on_next = on_next
        self._on_error = on_error
        self._active = True
        # held while dispatching so cancel() waits for an in-flight callback
        self._lock = threading.RLock()
        self._hub: Optional["SubscriptionHub"] = None

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        with self._lock:
            self._active = False
        if self._hub is not None:
            self._hub._remove(self)
            self._hub = None

    def deliver(self, payload: Any) -> None:
        with self._lock:
            if not self._active:
                return
            try:
                self._on_next(payload)
            except Exception:
                logger.exception("Subscriber callback failed for %s", "/".join(self.key))

    def fail(self, error: Exception) -> None:
        with self._lock:
            if not self._active:
                return
            if self._on_error is None:
                logger.error("Subscription %s failed: %s", "/".join(self.key), error)
                return
            try:
                self._on_error(error)
            except Exception:
                logger.exception("Subscriber error handler failed for %s", "/".join(self.key))


class SubscriptionHub:
    """Thread-safe registry of collection and document observers"""

    def __init__(self):
        self._lock = threading.RLock()
        self._subscriptions: Dict[Tuple[str, ...], List[Subscription]] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # REGISTRATION
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def collection_key(app_id: str) -> Tuple[str, ...]:
        return (app_id,)

    @staticmethod
    def document_key(app_id: str, document_id: str) -> Tuple[str, ...]:
        return (app_id, document_id)

    def register(self, key: Tuple[str, ...], on_next: OnNext, on_error: Optional[OnError] = None) -> Subscription:
        subscription = Subscription(key, on_next, on_error)
        subscription._hub = self
        with self._lock:
            self._subscriptions.setdefault(key, []).append(subscription)
        logger.debug("Subscribed to %s", "/".join(key))
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.key, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscriptions.pop(subscription.key, None)
        logger.debug("Unsubscribed from %s", "/".join(subscription.key))

    def has_subscribers(self, key: Tuple[str, ...]) -> bool:
        with self._lock:
            return bool(self._subscriptions.get(key))

    def subscriber_count(self, key: Tuple[str, ...]) -> int:
        with self._lock:
            return len(self._subscriptions.get(key, []))

    # ─────────────────────────────────────────────────────────────────────────
    # DISPATCH
    # ─────────────────────────────────────────────────────────────────────────

    def _snapshot(self, key: Tuple[str, ...]) -> List[Subscription]:
        with self._lock:
            return list(self._subscriptions.get(key, []))

    def publish(self, key: Tuple[str, ...], payload: Any) -> None:
        for subscription in self._snapshot(key):
            subscription.deliver(payload)

    def publish_error(self, key: Tuple[str, ...], error: Exception) -> None:
        for subscription in self._snapshot(key):
            subscription.fail(error)


subscription_hub = SubscriptionHub()
