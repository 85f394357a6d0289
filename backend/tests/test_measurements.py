import math

import pytest

from trackcoach.models import EventType
from trackcoach.services.measurements import (
    MeasurementError,
    MeasurementKind,
    is_better,
    is_blank,
    kind_for,
    lower_is_better,
    normalize_measurement,
    parse_measurement,
    worst_value,
)


def test_running_is_a_duration_and_field_events_are_distances():
    assert kind_for(EventType.RUNNING) is MeasurementKind.DURATION
    for event_type in (EventType.LONG_JUMP, EventType.HIGH_JUMP, EventType.SHOT_PUT,
                       EventType.JAVELIN, EventType.DISCUS):
        assert kind_for(event_type) is MeasurementKind.DISTANCE
    assert lower_is_better("running")
    assert not lower_is_better("javelin")


@pytest.mark.parametrize("raw, expected", [
    ("12.5s", 12.5),
    ("12.5", 12.5),
    (" 11.98 sec ", 11.98),
    ("1:05.3", 65.3),
])
def test_parse_duration(raw, expected):
    measurement = parse_measurement(raw, EventType.RUNNING)
    assert measurement.value == pytest.approx(expected)
    assert measurement.unit == "s"


@pytest.mark.parametrize("raw, expected", [
    ("5.2m", 5.2),
    ("5.2 m", 5.2),
    ("520cm", 5.2),
    ("48", 48.0),
])
def test_parse_distance(raw, expected):
    measurement = parse_measurement(raw, "long_jump")
    assert measurement.value == pytest.approx(expected)
    assert measurement.unit == "m"


@pytest.mark.parametrize("raw", ["", "   ", None, "fast", "m", "1:2:3"])
def test_parse_rejects_unusable_input(raw):
    with pytest.raises(MeasurementError):
        parse_measurement(raw, EventType.RUNNING)


def test_parse_keeps_trimmed_raw_text():
    assert parse_measurement("  5.2m ", EventType.DISCUS).raw == "5.2m"


def test_malformed_rows_normalise_to_a_losing_sentinel():
    assert normalize_measurement("DNF", EventType.RUNNING) == math.inf
    assert normalize_measurement("foul", EventType.SHOT_PUT) == 0.0
    assert worst_value(EventType.RUNNING) == math.inf
    assert worst_value(EventType.SHOT_PUT) == 0.0


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert not is_blank("0")


def test_is_better_is_strict_and_directional():
    assert is_better(11.9, 12.0, EventType.RUNNING)
    assert not is_better(12.0, 12.0, EventType.RUNNING)
    assert is_better(5.3, 5.2, EventType.LONG_JUMP)
    assert not is_better(5.2, 5.2, EventType.LONG_JUMP)
    assert not is_better(worst_value("running"), 99.0, "running")
