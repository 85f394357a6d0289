"""Measurement parsing and comparison for timed and distance events."""

import enum
import math
import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

from trackcoach.models import EventType

_NON_NUMERIC = re.compile(r"[^0-9.]")


class MeasurementError(ValueError):
    """Raised when a measurement string cannot be read as a number."""


class MeasurementKind(str, enum.Enum):
    DURATION = "duration"  # seconds, lower wins
    DISTANCE = "distance"  # metres, higher wins


_KIND_BY_TYPE: Dict[EventType, MeasurementKind] = {
    EventType.RUNNING: MeasurementKind.DURATION,
    EventType.LONG_JUMP: MeasurementKind.DISTANCE,
    EventType.HIGH_JUMP: MeasurementKind.DISTANCE,
    EventType.SHOT_PUT: MeasurementKind.DISTANCE,
    EventType.JAVELIN: MeasurementKind.DISTANCE,
    EventType.DISCUS: MeasurementKind.DISTANCE,
}

# Value a malformed stored row normalises to. It must lose every comparison,
# so it is tied to the same direction that ranking uses.
_WORST_BY_KIND: Dict[MeasurementKind, float] = {
    MeasurementKind.DURATION: math.inf,
    MeasurementKind.DISTANCE: 0.0,
}


@dataclass(frozen=True)
class Measurement:
    """A parsed measurement: seconds for durations, metres for distances."""

    kind: MeasurementKind
    value: float
    raw: str

    @property
    def unit(self) -> str:
        return "s" if self.kind is MeasurementKind.DURATION else "m"


def kind_for(event_type: Union[EventType, str]) -> MeasurementKind:
    """Return the measurement kind recorded for an event type."""

    return _KIND_BY_TYPE[EventType(event_type)]


def lower_is_better(event_type: Union[EventType, str]) -> bool:
    return kind_for(event_type) is MeasurementKind.DURATION


def worst_value(event_type: Union[EventType, str]) -> float:
    return _WORST_BY_KIND[kind_for(event_type)]


def is_blank(raw: Optional[str]) -> bool:
    return raw is None or not str(raw).strip()


def _to_float(text: str, raw: str) -> float:
    cleaned = _NON_NUMERIC.sub("", text)
    if not cleaned:
        raise MeasurementError(f"No numeric value in measurement {raw!r}.")
    try:
        return float(cleaned)
    except ValueError as exc:
        raise MeasurementError(f"Invalid measurement {raw!r}.") from exc


def _parse_duration(text: str) -> float:
    """Parse ``ss.SSS`` or ``mm:ss.SSS`` into seconds."""

    if ":" in text:
        parts = text.split(":")
        if len(parts) != 2:
            raise MeasurementError("Use mm:ss.SSS or ss.SSS for times.")
        minutes, seconds = parts
        return _to_float(minutes, text) * 60 + _to_float(seconds, text)
    return _to_float(text, text)


def _parse_distance(text: str) -> float:
    """Parse a distance in metres; a ``cm`` suffix is converted."""

    if text.lower().endswith("cm"):
        return _to_float(text[:-2], text) / 100
    return _to_float(text, text)


def parse_measurement(raw: Optional[str], event_type: Union[EventType, str]) -> Measurement:
    """Parse free-text input such as ``"12.5s"`` or ``"5.2 m"`` for an event type.

    Anything other than digits and the decimal point is discarded before the
    number is read. Raises :class:`MeasurementError` for blank or
    non-numeric input.
    """

    if is_blank(raw):
        raise MeasurementError("Measurement is required.")
    text = str(raw).strip()
    kind = kind_for(event_type)
    if kind is MeasurementKind.DURATION:
        value = _parse_duration(text)
    else:
        value = _parse_distance(text)
    return Measurement(kind=kind, value=value, raw=text)


def normalize_measurement(raw: Optional[str], event_type: Union[EventType, str]) -> float:
    """Return a comparable number for a stored measurement.

    Rows that cannot be parsed normalise to :func:`worst_value`, so they sort
    last and never win. Blank rows should be filtered out before calling this.
    """

    try:
        return parse_measurement(raw, event_type).value
    except MeasurementError:
        return worst_value(event_type)


def is_better(candidate: float, incumbent: float, event_type: Union[EventType, str]) -> bool:
    """Strict comparison: True when ``candidate`` beats ``incumbent``."""

    if lower_is_better(event_type):
        return candidate < incumbent
    return candidate > incumbent
