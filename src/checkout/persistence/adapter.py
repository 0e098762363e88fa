"""Saves checkout sessions to scoped storage and restores them on re-entry."""

import threading

import structlog

from checkout.config import get_settings
from checkout.errors import PersistenceError
from checkout.persistence import snapshot
from checkout.persistence.storage import SessionStorage, get_storage
from checkout.session.session import SessionStatus

logger = structlog.get_logger(__name__)


class PersistenceAdapter:
    """Writes one snapshot per browsing session under a fixed key.

    ``save`` serializes immediately but defers the write by the debounce
    interval; rapid successive saves coalesce into the last one. With an
    interval of zero every save is written synchronously.
    """

    def __init__(
        self,
        storage: SessionStorage | None = None,
        key: str | None = None,
        debounce_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self._storage = storage
        self.key = key or settings.storage_key
        self.debounce_seconds = settings.persistence_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._pending: dict[str, str] = {}
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def storage(self) -> SessionStorage:
        return self._storage or get_storage()

    def save(self, session) -> None:
        payload = snapshot.dumps(session)
        session_key = session.session_key

        if not self.debounce_seconds:
            self._write(session_key, payload)
            return

        with self._lock:
            self._pending[session_key] = payload
            timer = self._timers.pop(session_key, None)
            if timer is not None:
                timer.cancel()
            timer = threading.Timer(self.debounce_seconds, self._flush_one, args=(session_key,))
            timer.daemon = True
            self._timers[session_key] = timer
            timer.start()

    def _flush_one(self, session_key: str) -> None:
        # Written under the lock so a concurrent discard() cannot be overtaken
        with self._lock:
            self._timers.pop(session_key, None)
            payload = self._pending.pop(session_key, None)
            if payload is not None:
                self._write(session_key, payload)

    def _write(self, session_key: str, payload: str) -> None:
        self.storage.scoped(session_key).set(self.key, payload)
        logger.debug("Checkout session saved", session_key=session_key)

    def flush(self) -> None:
        """Write every pending snapshot now."""
        with self._lock:
            timers, self._timers = self._timers, {}
            pending, self._pending = self._pending, {}
            for timer in timers.values():
                timer.cancel()
            for session_key, payload in pending.items():
                self._write(session_key, payload)

    def restore(self, session_key: str):
        """Return the stored session for ``session_key``, or None.

        A snapshot that cannot be read, or that belongs to a checkout that
        was already submitted or cancelled, is discarded and reported as
        None; this never raises.
        """
        self._flush_pending(session_key)
        scoped = self.storage.scoped(session_key)

        try:
            raw = scoped.get(self.key)
            if raw is None:
                return None
            session = snapshot.loads(raw)
        except PersistenceError as exc:
            logger.warning("Discarding unreadable checkout snapshot", session_key=session_key, error=str(exc))
            scoped.remove(self.key)
            return None

        if session.status != SessionStatus.ACTIVE.value:
            logger.warning("Discarding closed checkout snapshot", session_key=session_key, status=session.status)
            scoped.remove(self.key)
            return None
        return session

    def _flush_pending(self, session_key: str) -> None:
        with self._lock:
            timer = self._timers.pop(session_key, None)
            payload = self._pending.pop(session_key, None)
            if timer is not None:
                timer.cancel()
            if payload is not None:
                self._write(session_key, payload)

    def discard(self, session_key: str) -> None:
        """Forget the stored session and any write still pending for it."""
        with self._lock:
            timer = self._timers.pop(session_key, None)
            self._pending.pop(session_key, None)
            if timer is not None:
                timer.cancel()
            self.storage.scoped(session_key).remove(self.key)
        logger.info("Checkout session discarded", session_key=session_key)


_current_adapter: PersistenceAdapter | None = None


def get_persistence() -> PersistenceAdapter:
    global _current_adapter
    if _current_adapter is None:
        _current_adapter = PersistenceAdapter()
    return _current_adapter


def set_persistence(adapter: PersistenceAdapter) -> None:
    global _current_adapter
    _current_adapter = adapter


def reset_persistence() -> None:
    global _current_adapter
    if _current_adapter is not None:
        _current_adapter.flush()
    _current_adapter = None
