"""Best-per-student ranking of event performances."""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from trackcoach import models
from trackcoach.services.measurements import (
    is_better,
    is_blank,
    lower_is_better,
    normalize_measurement,
)


@dataclass(frozen=True)
class RankingEntry:
    """One student's placing in an event."""

    student_id: Any
    student: Optional[models.Student]
    performance: models.Performance
    value: float
    rank: int

    @property
    def measurement(self) -> str:
        return self.performance.measurement

    @property
    def student_name(self) -> Optional[str]:
        return self.student.name if self.student is not None else None


def best_performance(
    performances: Iterable[models.Performance], event_type: str
) -> Optional[Tuple[models.Performance, float]]:
    """Return a student's best row and its value; the earliest row wins equal values."""

    best: Optional[Tuple[models.Performance, float]] = None
    for performance in performances:
        value = normalize_measurement(performance.measurement, event_type)
        if best is None or is_better(value, best[1], event_type):
            best = (performance, value)
    return best


def rank_performances(
    event: models.Event,
    performances: Iterable[models.Performance],
    students: Optional[Mapping[Any, models.Student]] = None,
) -> List[RankingEntry]:
    """Rank students by their best measurement in ``event``.

    Running events rank ascending by time, field events descending by
    distance. Rows with a blank measurement are ignored, so students with no
    usable rows do not appear at all. Ranks run 1..N with no gaps; equal
    values keep the order in which the students were first seen.
    """

    students = students or {}
    grouped: Dict[Any, List[models.Performance]] = defaultdict(list)
    for performance in performances:
        if is_blank(performance.measurement):
            continue
        grouped[performance.student_id].append(performance)

    bests: List[Tuple[Any, models.Performance, float]] = []
    for student_id, rows in grouped.items():
        performance, value = best_performance(rows, event.type)
        bests.append((student_id, performance, value))

    # sorted() is stable in both directions
    bests.sort(key=lambda item: item[2], reverse=not lower_is_better(event.type))

    return [
        RankingEntry(
            student_id=student_id,
            student=students.get(student_id),
            performance=performance,
            value=value,
            rank=position,
        )
        for position, (student_id, performance, value) in enumerate(bests, start=1)
    ]


def ranking_payload(entries: Iterable[RankingEntry]) -> List[dict]:
    """JSON-safe form of a ranking, as stored in ``Event.results``."""

    return [
        {
            "rank": entry.rank,
            "student_id": str(entry.student_id),
            "student_name": entry.student_name,
            "performance_id": str(entry.performance.id),
            "measurement": entry.measurement,
            "round": entry.performance.round,
        }
        for entry in entries
    ]
