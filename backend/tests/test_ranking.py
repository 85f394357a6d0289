import uuid

from trackcoach import models
from trackcoach.services.ranking import best_performance, rank_performances, ranking_payload

STUDENT_A = uuid.uuid4()
STUDENT_B = uuid.uuid4()
STUDENT_C = uuid.uuid4()


def perf(student_id, measurement, round=1):
    return models.Performance(
        id=uuid.uuid4(), student_id=student_id, measurement=measurement, round=round
    )


def event(type):
    return models.Event(id=uuid.uuid4(), name="Meet", type=type, rounds=3)


def test_running_ranks_best_round_ascending():
    performances = [
        perf(STUDENT_A, "13.2s", round=1),
        perf(STUDENT_A, "12.8s", round=2),
        perf(STUDENT_B, "12.9s", round=1),
    ]
    ranking = rank_performances(event("running"), performances)

    assert [(entry.student_id, entry.measurement, entry.rank) for entry in ranking] == [
        (STUDENT_A, "12.8s", 1),
        (STUDENT_B, "12.9s", 2),
    ]


def test_field_event_ranks_descending():
    performances = [perf(STUDENT_A, "5.10m"), perf(STUDENT_B, "5.40m")]
    ranking = rank_performances(event("long_jump"), performances)

    assert [(entry.student_id, entry.rank) for entry in ranking] == [
        (STUDENT_B, 1),
        (STUDENT_A, 2),
    ]


def test_blank_rows_are_excluded_but_garbage_ranks_last():
    performances = [
        perf(STUDENT_A, "DNF"),
        perf(STUDENT_B, None),
        perf(STUDENT_C, "14.0"),
    ]
    ranking = rank_performances(event("running"), performances)

    assert [entry.student_id for entry in ranking] == [STUDENT_C, STUDENT_A]
    assert [entry.rank for entry in ranking] == [1, 2]


def test_ties_get_consecutive_ranks_in_encounter_order():
    performances = [perf(STUDENT_B, "6.0m"), perf(STUDENT_A, "6.0m"), perf(STUDENT_C, "6.5m")]
    ranking = rank_performances(event("javelin"), performances)

    assert [(entry.student_id, entry.rank) for entry in ranking] == [
        (STUDENT_C, 1),
        (STUDENT_B, 2),
        (STUDENT_A, 3),
    ]


def test_no_usable_rows_gives_empty_ranking():
    assert rank_performances(event("running"), [perf(STUDENT_A, "  ")]) == []
    assert rank_performances(event("running"), []) == []


def test_best_performance_keeps_first_of_equal_values():
    first = perf(STUDENT_A, "12.0", round=1)
    second = perf(STUDENT_A, "12.0s", round=2)

    best, value = best_performance([first, second], "running")
    assert best is first
    assert value == 12.0


def test_payload_carries_student_names():
    student = models.Student(id=STUDENT_A, name="Asha")
    performance = perf(STUDENT_A, "12.1s", round=2)
    ranking = rank_performances(event("running"), [performance], {STUDENT_A: student})

    assert ranking_payload(ranking) == [{
        "rank": 1,
        "student_id": str(STUDENT_A),
        "student_name": "Asha",
        "performance_id": str(performance.id),
        "measurement": "12.1s",
        "round": 2,
    }]
