"""Gating rules: which course is visible, when an exam opens, how far a learner is.

All functions are pure. They take the formation's ordered parts and the
learner's :class:`FormationProgressRecord` explicitly and never perform I/O.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

from academy.services.progression.state import FormationProgressRecord, PartEntry

MAX_EXAM_ATTEMPTS = 3


class CourseStatus(str, enum.Enum):
    COMPLETED = "completed"
    LOCKED = "locked"
    UNLOCKED = "unlocked"


@dataclass(frozen=True, slots=True)
class ExamAccess:
    reachable: bool
    all_courses_completed: bool
    attempts: int
    remaining_attempts: int
    last_score: Optional[int]
    passed: bool


def round_half_up_percentage(numerator: int, denominator: int) -> int:
    """``round(numerator / denominator * 100)`` with halves rounded up, in integer arithmetic."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (200 * numerator + denominator) // (2 * denominator)


def course_status(
    course_id: int,
    part: PartEntry,
    part_index: int,
    parts: Sequence[PartEntry],
    progress: FormationProgressRecord,
) -> CourseStatus:
    """Statut d'un cours: terminé, verrouillé ou déverrouillé.

    A course unlocks only when every earlier part of the formation has a
    passing exam attempt and every earlier course of its own part is
    completed.
    """
    if course_id not in part.course_ids:
        raise ValueError(f"course {course_id} does not belong to part {part.id}")

    if progress.is_completed(course_id):
        return CourseStatus.COMPLETED

    for previous_part in parts[:part_index]:
        if not progress.is_part_passed(previous_part.id):
            return CourseStatus.LOCKED

    for previous_course_id in part.course_ids[: part.course_ids.index(course_id)]:
        if not progress.is_completed(previous_course_id):
            return CourseStatus.LOCKED

    return CourseStatus.UNLOCKED


def remaining_attempts(attempts: int, passed: bool, max_attempts: int = MAX_EXAM_ATTEMPTS) -> int:
    """Une partie réussie se repasse sans limite: le compteur n'épuise plus rien."""
    if passed:
        return max_attempts
    return max(0, max_attempts - attempts)


def exam_access(
    part: PartEntry,
    progress: FormationProgressRecord,
    max_attempts: int = MAX_EXAM_ATTEMPTS,
    *,
    previous_parts: Sequence[PartEntry] = (),
) -> ExamAccess:
    """Whether the exam of ``part`` can be taken now.

    Every course of the part must be completed, the attempts must not be
    exhausted without a pass, and the earlier parts listed in
    ``previous_parts`` must be passed (only matters for a part without
    courses).
    """
    attempt = progress.attempt_for(part.id)
    attempts = attempt.attempts if attempt else 0
    passed = bool(attempt and attempt.passed)

    all_courses_completed = all(progress.is_completed(cid) for cid in part.course_ids)
    earlier_parts_passed = all(progress.is_part_passed(p.id) for p in previous_parts)
    exhausted = attempts >= max_attempts and not passed

    return ExamAccess(
        reachable=all_courses_completed and earlier_parts_passed and not exhausted,
        all_courses_completed=all_courses_completed,
        attempts=attempts,
        remaining_attempts=remaining_attempts(attempts, passed, max_attempts),
        last_score=attempt.last_score if attempt else None,
        passed=passed,
    )


def count_courses(parts: Sequence[PartEntry], progress: FormationProgressRecord) -> tuple[int, int]:
    """Return ``(completed, total)`` for the given parts."""
    course_ids = [cid for part in parts for cid in part.course_ids]
    completed = sum(1 for cid in course_ids if progress.is_completed(cid))
    return completed, len(course_ids)


def formation_progress_percentage(parts: Sequence[PartEntry], progress: FormationProgressRecord) -> int:
    completed, total = count_courses(parts, progress)
    if total == 0:
        # Une formation sans cours est considérée comme terminée.
        return 100
    return min(100, round_half_up_percentage(completed, total))
