"""
Pure function rules for visited-location histories.

A history is the chipping point (a synthetic head record at the chipping
timestamp) followed by the animal's visit records in (visited_at, id)
order. No two adjacent entries may share a point, and every visit lies
strictly between its neighbours in time. All functions here are free of
side effects; the sequencer loads state, asks for a decision and writes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class VisitViolation(str, Enum):
    """Why a placement was rejected."""

    FIRST_POINT_IS_CHIPPING_POINT = "first_point_is_chipping_point"
    SAME_AS_PREVIOUS_POINT = "same_as_previous_point"
    SAME_AS_NEXT_POINT = "same_as_next_point"
    POSTHUMOUS_VISIT = "posthumous_visit"
    NOT_AFTER_CHIPPING = "not_after_chipping"
    NOT_AFTER_PREVIOUS_VISIT = "not_after_previous_visit"
    NOT_BEFORE_NEXT_VISIT = "not_before_next_visit"


VIOLATION_MESSAGES = {
    VisitViolation.FIRST_POINT_IS_CHIPPING_POINT: "first visited point cannot be the chipping point",
    VisitViolation.SAME_AS_PREVIOUS_POINT: "point equals the previous visited point",
    VisitViolation.SAME_AS_NEXT_POINT: "point equals the next visited point",
    VisitViolation.POSTHUMOUS_VISIT: "visit would be after the animal's death",
    VisitViolation.NOT_AFTER_CHIPPING: "visit must be after the chipping time",
    VisitViolation.NOT_AFTER_PREVIOUS_VISIT: "visit must be after the previous visit",
    VisitViolation.NOT_BEFORE_NEXT_VISIT: "visit must be before the next visit",
}


@dataclass(frozen=True)
class VisitStop:
    """One visit record reduced to what the ordering rules need."""

    record_id: Optional[int]
    point_id: int
    visited_at: datetime

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        # Unsaved records sort after saved ones at the same instant
        return (self.visited_at, self.record_id if self.record_id is not None else 2**63)


@dataclass(frozen=True)
class VisitHistory:
    """Chronological visit history of one animal, headed by its chipping point."""

    chipping_point_id: int
    chipping_date_time: datetime
    stops: Tuple[VisitStop, ...] = ()
    death_date_time: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        chipping_point_id: int,
        chipping_date_time: datetime,
        stops: Iterable[VisitStop],
        death_date_time: Optional[datetime] = None,
    ) -> "VisitHistory":
        """Create a history, sorting stops by (visited_at, id)."""
        ordered = tuple(sorted(stops, key=lambda stop: stop.sort_key))
        return cls(
            chipping_point_id=chipping_point_id,
            chipping_date_time=chipping_date_time,
            stops=ordered,
            death_date_time=death_date_time,
        )

    def __len__(self) -> int:
        return len(self.stops)

    def index_of(self, record_id: int) -> Optional[int]:
        for index, stop in enumerate(self.stops):
            if stop.record_id == record_id:
                return index
        return None

    def point_before(self, index: int) -> int:
        """Point of the entry preceding position ``index`` (chipping point at the head)."""
        if index <= 0:
            return self.chipping_point_id
        return self.stops[index - 1].point_id

    def point_at(self, index: int) -> Optional[int]:
        if 0 <= index < len(self.stops):
            return self.stops[index].point_id
        return None

    @property
    def points(self) -> List[int]:
        """Point ids including the synthetic chipping head."""
        return [self.chipping_point_id] + [stop.point_id for stop in self.stops]


@dataclass(frozen=True)
class PlacementDecision:
    """Decision result for inserting or editing a visit."""

    allowed: bool
    position: int = 0
    violations: Tuple[VisitViolation, ...] = field(default_factory=tuple)
    changed: bool = True

    @property
    def reason(self) -> Optional[str]:
        if not self.violations:
            return None
        return "; ".join(VIOLATION_MESSAGES[v] for v in self.violations)

    @classmethod
    def reject(cls, position: int, *violations: VisitViolation) -> "PlacementDecision":
        return cls(allowed=False, position=position, violations=tuple(violations))


def _point_violations(
    history: VisitHistory, position: int, point_id: int, next_index: int
) -> List[VisitViolation]:
    """Adjacency checks for ``point_id`` placed at ``position``."""
    violations = []
    if point_id == history.point_before(position):
        violations.append(
            VisitViolation.FIRST_POINT_IS_CHIPPING_POINT
            if position == 0
            else VisitViolation.SAME_AS_PREVIOUS_POINT
        )
    if point_id == history.point_at(next_index):
        violations.append(VisitViolation.SAME_AS_NEXT_POINT)
    return violations


def evaluate_append(
    history: VisitHistory, point_id: int, visited_at: datetime
) -> PlacementDecision:
    """
    Decide whether a new visit to ``point_id`` at ``visited_at`` may be recorded.

    Rules:
    1. No posthumous movement: a dead animal cannot visit after its death time
    2. The first visit cannot be the chipping point
    3. A visit cannot repeat the point of the entry just before it
    4. Nor the point of the entry just after it (visits timestamped in the future)

    Returns:
        PlacementDecision with the insertion position in the history
    """
    position = sum(1 for stop in history.stops if stop.visited_at <= visited_at)

    if history.death_date_time is not None and visited_at > history.death_date_time:
        return PlacementDecision.reject(position, VisitViolation.POSTHUMOUS_VISIT)

    violations = _point_violations(history, position, point_id, position)
    if violations:
        return PlacementDecision.reject(position, *violations)

    return PlacementDecision(allowed=True, position=position)


def evaluate_update(
    history: VisitHistory,
    record_id: int,
    point_id: int,
    visited_at: datetime,
) -> PlacementDecision:
    """
    Decide whether an existing visit may be moved to ``point_id`` at ``visited_at``.

    The record keeps its place in the sequence: a new timestamp must lie
    strictly after the previous entry (the chipping time for the first
    visit) and strictly before the next one. An exact collision with a
    neighbour is rejected. The new point must differ from both neighbours.

    Raises:
        KeyError: If the record is not part of the history
    """
    index = history.index_of(record_id)
    if index is None:
        raise KeyError(record_id)

    current = history.stops[index]
    if current.point_id == point_id and current.visited_at == visited_at:
        return PlacementDecision(allowed=True, position=index, changed=False)

    violations: List[VisitViolation] = []

    if visited_at != current.visited_at:
        if index == 0:
            if visited_at <= history.chipping_date_time:
                violations.append(VisitViolation.NOT_AFTER_CHIPPING)
        elif visited_at <= history.stops[index - 1].visited_at:
            violations.append(VisitViolation.NOT_AFTER_PREVIOUS_VISIT)

        if index + 1 < len(history.stops) and visited_at >= history.stops[index + 1].visited_at:
            violations.append(VisitViolation.NOT_BEFORE_NEXT_VISIT)

        if history.death_date_time is not None and visited_at > history.death_date_time:
            violations.append(VisitViolation.POSTHUMOUS_VISIT)

    if point_id != current.point_id:
        violations.extend(_point_violations(history, index, point_id, index + 1))

    if violations:
        return PlacementDecision.reject(index, *violations)

    return PlacementDecision(allowed=True, position=index)


def find_adjacent_duplicates(history: VisitHistory) -> List[Tuple[int, int]]:
    """
    List positions (i, i + 1) of adjacent entries sharing a point.

    Positions count the chipping head as 0. An empty list means the history
    satisfies the adjacency rule.
    """
    points = history.points
    return [
        (i, i + 1) for i in range(len(points) - 1) if points[i] == points[i + 1]
    ]
