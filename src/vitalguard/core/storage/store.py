"""Assessment history stores.

Everything that reads history (trend analysis, the history tool) depends only
on the :class:`PredictionStore` protocol. The in-memory store keeps a bounded
window for the current process; the SQLite repository satisfies the same
protocol when persistence is configured.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from vitalguard.core.storage.models import AssessmentRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 50


@runtime_checkable
class PredictionStore(Protocol):
    """Append-only assessment history, read newest first."""

    def append(self, record: AssessmentRecord) -> str:
        ...

    def recent(self, limit: int = DEFAULT_MAX_RECORDS) -> list[AssessmentRecord]:
        ...

    def count(self) -> int:
        ...


class InMemoryPredictionStore:
    """Bounded in-process history. The oldest record is dropped once full.

    Usage::

        store = InMemoryPredictionStore(max_records=50)
        store.append(record)
        latest = store.recent(1)[0]
    """

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self.max_records = max_records
        self._records: deque[AssessmentRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def append(self, record: AssessmentRecord) -> str:
        record.id = record.id or str(uuid.uuid4())
        record.created_at = record.created_at or datetime.now(timezone.utc).isoformat()
        with self._lock:
            self._records.append(record)
        logger.debug("Stored assessment %s in memory (%d held)", record.id, len(self._records))
        return record.id

    def recent(self, limit: int = DEFAULT_MAX_RECORDS) -> list[AssessmentRecord]:
        if limit <= 0:
            return []
        with self._lock:
            records = list(self._records)
        return records[::-1][:limit]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._records)
            self._records.clear()
        return removed
