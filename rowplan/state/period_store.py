"""
Period Store
------------
Session-local list of training periods with add / remove / update
operations keyed by period id. Nothing is persisted.

Each mutation swaps in new `TrainingPeriod` instances (snapshots already
handed out are never changed) and notifies listeners synchronously.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from rowplan.models.schemas import Distribution, Intensity, TrainingPeriod


Snapshot = Tuple[TrainingPeriod, ...]
Listener = Callable[[Snapshot], None]

DEFAULT_DISTRIBUTION = {"UT2": 70, "UT1": 20, "AT": 10, "TR": 0, "AN": 0}
DEFAULT_PERIOD_DAYS = 7


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class PeriodStore:
    def __init__(self, periods: Optional[Iterable[TrainingPeriod]] = None) -> None:
        self._periods: List[TrainingPeriod] = list(periods or [])
        self._listeners: List[Listener] = []

    @property
    def periods(self) -> Snapshot:
        return tuple(self._periods)

    def __len__(self) -> int:
        return len(self._periods)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, periods: List[TrainingPeriod]) -> None:
        self._periods = periods
        snapshot = self.periods
        for listener in list(self._listeners):
            listener(snapshot)

    def _index(self, period_id: str) -> int:
        for idx, p in enumerate(self._periods):
            if p.id == period_id:
                return idx
        raise KeyError(period_id)

    def get(self, period_id: str) -> TrainingPeriod:
        return self._periods[self._index(period_id)]

    def load(self, periods: Iterable[TrainingPeriod]) -> None:
        self._commit(list(periods))

    def add(self, today: Optional[date] = None) -> TrainingPeriod:
        """Append a default one-week period starting today."""
        start = today or _utc_today()
        period = TrainingPeriod(
            id=str(uuid.uuid4()),
            name=f"Period {len(self._periods) + 1}",
            startDate=start,
            endDate=start + timedelta(days=DEFAULT_PERIOD_DAYS),
            distribution=Distribution(**DEFAULT_DISTRIBUTION),
        )
        self._commit(self._periods + [period])
        return period

    def remove(self, period_id: str) -> None:
        idx = self._index(period_id)
        self._commit(self._periods[:idx] + self._periods[idx + 1:])

    def update(self, period_id: str, **changes: Any) -> TrainingPeriod:
        """Apply a partial update. The id itself cannot be changed."""
        if "id" in changes:
            raise ValueError("period id cannot be updated")
        idx = self._index(period_id)
        data = self._periods[idx].model_dump()
        data.update(changes)
        updated = TrainingPeriod.model_validate(data)
        self._commit(self._periods[:idx] + [updated] + self._periods[idx + 1:])
        return updated

    def update_distribution(self, period_id: str, intensity: Intensity | str, value: int) -> TrainingPeriod:
        tag = Intensity(intensity).value
        current = self.get(period_id).distribution.model_dump()
        current[tag] = value
        return self.update(period_id, distribution=current)

    def unbalanced(self) -> List[TrainingPeriod]:
        """Periods whose distribution does not total 100."""
        return [p for p in self._periods if not p.distribution.is_balanced]


def build_request_body(periods: Iterable[TrainingPeriod]) -> Dict[str, Any]:
    """The full POST body for /api/generate-workouts."""
    return {"periods": [p.model_dump(mode="json") for p in periods]}
