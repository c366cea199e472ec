import pytest

from academy.services.progression import (
    CourseStatus,
    course_status,
    exam_access,
    formation_progress_percentage,
    round_half_up_percentage,
)
from academy.services.progression.state import EMPTY_PROGRESS, ExamAttemptRecord, FormationProgressRecord, PartEntry
from academy.services.progression.stores import parts_of
from tests.utils import build_catalog


@pytest.fixture()
def parts():
    catalog = build_catalog()
    return parts_of(catalog, catalog.get_formation(1))


def _progress(completed=(), attempts=()):
    return FormationProgressRecord(completed_course_ids=frozenset(completed), exam_attempts=tuple(attempts))


def test_only_first_course_is_unlocked_for_a_new_learner(parts):
    first, second = parts
    assert course_status(101, first, 0, parts, EMPTY_PROGRESS) == CourseStatus.UNLOCKED
    assert course_status(102, first, 0, parts, EMPTY_PROGRESS) == CourseStatus.LOCKED
    assert course_status(201, second, 1, parts, EMPTY_PROGRESS) == CourseStatus.LOCKED


def test_courses_unlock_sequentially_inside_a_part(parts):
    first = parts[0]
    progress = _progress(completed={101})
    assert course_status(101, first, 0, parts, progress) == CourseStatus.COMPLETED
    assert course_status(102, first, 0, parts, progress) == CourseStatus.UNLOCKED
    assert course_status(103, first, 0, parts, progress) == CourseStatus.LOCKED


def test_next_part_requires_a_passed_exam(parts):
    second = parts[1]
    all_done = _progress(completed={101, 102, 103})
    assert course_status(201, second, 1, parts, all_done) == CourseStatus.LOCKED

    failed = _progress(completed={101, 102, 103}, attempts=[ExamAttemptRecord(1, attempts=1, last_score=33)])
    assert course_status(201, second, 1, parts, failed) == CourseStatus.LOCKED

    passed = _progress(completed={101, 102, 103}, attempts=[ExamAttemptRecord(1, attempts=1, last_score=100, passed=True)])
    assert course_status(201, second, 1, parts, passed) == CourseStatus.UNLOCKED
    assert course_status(202, second, 1, parts, passed) == CourseStatus.LOCKED


def test_course_status_rejects_a_course_from_another_part(parts):
    with pytest.raises(ValueError):
        course_status(201, parts[0], 0, parts, EMPTY_PROGRESS)


def test_exam_requires_every_course_of_the_part(parts):
    first = parts[0]
    assert exam_access(first, _progress(completed={101, 102})).reachable is False

    access = exam_access(first, _progress(completed={101, 102, 103}))
    assert access.reachable is True
    assert access.attempts == 0
    assert access.remaining_attempts == 3
    assert access.last_score is None
    assert access.passed is False


def test_exam_locked_after_three_failures_without_pass(parts):
    first = parts[0]
    exhausted = _progress(completed={101, 102, 103}, attempts=[ExamAttemptRecord(1, attempts=3, last_score=33)])
    access = exam_access(first, exhausted)
    assert access.reachable is False
    assert access.remaining_attempts == 0


def test_exam_stays_reachable_once_passed(parts):
    first = parts[0]
    passed = _progress(completed={101, 102, 103}, attempts=[ExamAttemptRecord(1, attempts=3, last_score=100, passed=True)])
    access = exam_access(first, passed)
    assert access.reachable is True
    assert access.remaining_attempts == 3


def test_exam_of_an_empty_part_waits_for_previous_parts():
    first = PartEntry(id=1, title="A", formation_id=1, exam_id=1, course_ids=(1,))
    empty = PartEntry(id=2, title="B", formation_id=1, exam_id=2)
    assert exam_access(empty, EMPTY_PROGRESS, previous_parts=[first]).reachable is False
    passed = _progress(completed={1}, attempts=[ExamAttemptRecord(1, attempts=1, last_score=100, passed=True)])
    assert exam_access(empty, passed, previous_parts=[first]).reachable is True


@pytest.mark.parametrize(
    "numerator, denominator, expected",
    [(1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (0, 5, 0), (5, 5, 100)],
)
def test_round_half_up_percentage(numerator, denominator, expected):
    assert round_half_up_percentage(numerator, denominator) == expected


def test_percentage_counts_completed_courses(parts):
    assert formation_progress_percentage(parts, _progress(completed={101})) == 20
    assert formation_progress_percentage(parts, _progress(completed={101, 102, 103, 201, 202})) == 100


def test_percentage_ignores_foreign_course_ids(parts):
    assert formation_progress_percentage(parts, _progress(completed={101, 999, 998})) == 20


def test_one_of_three_courses_is_33_percent():
    part = PartEntry(id=1, title="A", formation_id=1, exam_id=1, course_ids=(1, 2, 3))
    assert formation_progress_percentage([part], _progress(completed={1})) == 33


def test_formation_without_courses_is_complete():
    part = PartEntry(id=1, title="A", formation_id=1, exam_id=1)
    assert formation_progress_percentage([part], EMPTY_PROGRESS) == 100
    assert formation_progress_percentage([], EMPTY_PROGRESS) == 100
