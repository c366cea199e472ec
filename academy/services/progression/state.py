"""Immutable records consumed and produced by the progression engine.

The engine never touches ORM objects: catalog entries are read-only snapshots
built by a :class:`~academy.services.progression.stores.CatalogStore`, and a
learner's progress is a :class:`FormationProgressRecord` value that the
engine replaces rather than mutates.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from academy.models.catalog.course_model import CourseType


@dataclass(frozen=True, slots=True)
class QuestionEntry:
    id: int
    text: str
    options: tuple[str, ...]
    correct_answer_index: int

    def is_correct(self, selected_index: Optional[int]) -> bool:
        return selected_index is not None and selected_index == self.correct_answer_index


@dataclass(frozen=True, slots=True)
class ExamEntry:
    id: int
    title: str
    passing_score: int
    questions: tuple[QuestionEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class CourseEntry:
    id: int
    title: str
    course_type: CourseType
    content: object
    quick_test_questions: tuple[QuestionEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class PartEntry:
    id: int
    title: str
    formation_id: int
    exam_id: int
    course_ids: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class FormationEntry:
    id: int
    title: str
    description: str = ""
    part_ids: tuple[int, ...] = ()
    image_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ExamAttemptRecord:
    part_id: int
    attempts: int = 0
    last_score: Optional[int] = None
    passed: bool = False


@dataclass(frozen=True, slots=True)
class FormationProgressRecord:
    completed_course_ids: frozenset[int] = field(default_factory=frozenset)
    exam_attempts: tuple[ExamAttemptRecord, ...] = ()
    # Version de la ligne lue (0: jamais enregistrée). Ignorée par l'égalité.
    version: int = field(default=0, compare=False)

    def attempt_for(self, part_id: int) -> Optional[ExamAttemptRecord]:
        for attempt in self.exam_attempts:
            if attempt.part_id == part_id:
                return attempt
        return None

    def is_part_passed(self, part_id: int) -> bool:
        attempt = self.attempt_for(part_id)
        return bool(attempt and attempt.passed)

    def is_completed(self, course_id: int) -> bool:
        return course_id in self.completed_course_ids

    def with_completed_course(self, course_id: int) -> "FormationProgressRecord":
        if course_id in self.completed_course_ids:
            return self
        return replace(self, completed_course_ids=self.completed_course_ids | {course_id})

    def without_courses(self, course_ids: Iterable[int]) -> "FormationProgressRecord":
        return replace(self, completed_course_ids=self.completed_course_ids - frozenset(course_ids))

    def with_attempt(self, attempt: ExamAttemptRecord) -> "FormationProgressRecord":
        """Remplace l'entrée de la même partie et conserve toutes les autres."""
        others = tuple(a for a in self.exam_attempts if a.part_id != attempt.part_id)
        return replace(self, exam_attempts=others + (attempt,))


EMPTY_PROGRESS = FormationProgressRecord()
