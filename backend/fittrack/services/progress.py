"""In-memory progress metrics storage.

Stand-in for the relational storage layer; only the operations the
progress endpoints need are provided.
"""

import itertools
import threading
from datetime import UTC, datetime

from fittrack.schemas.progress import ProgressMetricsCreate, ProgressMetricsResponse


class ProgressService:
    def __init__(self) -> None:
        self._metrics: list[ProgressMetricsResponse] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, data: ProgressMetricsCreate) -> ProgressMetricsResponse:
        with self._lock:
            entry = ProgressMetricsResponse(
                id=next(self._ids),
                date=datetime.now(tz=UTC),
                **data.model_dump(),
            )
            self._metrics.append(entry)
        return entry

    def list_for_user(self, user_id: int) -> list[ProgressMetricsResponse]:
        """Newest first."""
        with self._lock:
            entries = [m for m in self._metrics if m.user_id == user_id]
        return sorted(entries, key=lambda m: m.date, reverse=True)
