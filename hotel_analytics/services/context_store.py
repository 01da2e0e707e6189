"""In-memory conversation state keyed by session id."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from threading import Lock
from types import MappingProxyType
from typing import Callable, Optional

from hotel_analytics.domain.models import ConversationContext, EntityBag, Intent, Query
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationContextStore:
    """Owns every ``ConversationContext`` and the only writer to them.

    Each session has its own lock, so a read-modify-write for one session
    never waits on another. The registry lock only guards the dictionaries
    and is never held while a session is being updated. Contexts are
    immutable snapshots replaced wholesale on each update.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or _utc_now
        self._ttl = timedelta(seconds=self._settings.session_ttl_seconds)
        self._sweep_interval = timedelta(
            seconds=self._settings.session_sweep_interval_seconds
        )
        self._contexts: dict[str, ConversationContext] = {}
        self._session_locks: dict[str, Lock] = {}
        self._registry_lock = Lock()
        self._last_sweep: Optional[datetime] = None

    def _lock_for(self, session_id: str) -> Lock:
        with self._registry_lock:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = Lock()
                self._session_locks[session_id] = lock
            return lock

    def _acquire_session_lock(self, session_id: str) -> Lock:
        # A sweep may retire the lock between lookup and acquire; retry then.
        while True:
            lock = self._lock_for(session_id)
            lock.acquire()
            with self._registry_lock:
                if self._session_locks.get(session_id) is lock:
                    return lock
            lock.release()

    def _is_expired(self, context: ConversationContext, now: datetime) -> bool:
        return now - context.last_interaction > self._ttl

    def get(self, session_id: str) -> Optional[ConversationContext]:
        with self._registry_lock:
            context = self._contexts.get(session_id)
        if context is None or self._is_expired(context, self._clock()):
            return None
        return context

    def update(
        self,
        session_id: str,
        query: Query,
        intent: Intent,
        entities: EntityBag,
    ) -> ConversationContext:
        lock = self._acquire_session_lock(session_id)
        try:
            now = self._clock()
            with self._registry_lock:
                current = self._contexts.get(session_id)

            if current is None or self._is_expired(current, now):
                recent: tuple[str, ...] = ()
                merged: dict = {}
                customer_id = query.customer_id
            else:
                recent = current.recent_queries
                merged = dict(current.extracted_entities)
                customer_id = query.customer_id or current.customer_id

            # Dates typed in this turn replace a period remembered from earlier.
            if "dates" in entities.explicit and "period" not in entities.explicit:
                merged.pop("period", None)
            merged.update(entities.explicit_items())
            recent = (recent + (query.text,))[-self._settings.max_recent_queries:]

            updated = ConversationContext(
                session_id=session_id,
                customer_id=customer_id,
                recent_queries=recent,
                extracted_entities=MappingProxyType(merged),
                last_intent=intent.type,
                last_interaction=now,
            )
            with self._registry_lock:
                self._contexts[session_id] = updated
        finally:
            lock.release()

        self._maybe_sweep(now)
        return updated

    def _maybe_sweep(self, now: datetime) -> None:
        with self._registry_lock:
            if self._last_sweep is not None and now - self._last_sweep < self._sweep_interval:
                return
            self._last_sweep = now
        evicted = self.evict_expired(now)
        if evicted:
            logger.info("Expired conversation sessions evicted | count=%s", evicted)

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        """Drop sessions idle longer than the TTL; returns how many went."""
        reference = now or self._clock()
        evicted = 0
        with self._registry_lock:
            for session_id, context in list(self._contexts.items()):
                if not self._is_expired(context, reference):
                    continue
                lock = self._session_locks.get(session_id)
                # A held lock means an update is in flight; leave it alone.
                if lock is not None and not lock.acquire(blocking=False):
                    continue
                try:
                    del self._contexts[session_id]
                    self._session_locks.pop(session_id, None)
                    evicted += 1
                finally:
                    if lock is not None:
                        lock.release()
        return evicted

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._contexts)
