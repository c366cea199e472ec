"""Collaborator interfaces the progression engine reads from and writes to.

``CatalogStore`` is read-only; ``ProgressStore`` is a key-value store keyed by
``(user_id, formation_id)`` with read-modify-write semantics: ``put`` refuses a
record whose ``version`` is not the one currently stored. SQL-backed
implementations live in :mod:`academy.crud`; the in-memory ones below back
scripts and unit tests.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Protocol

from academy.services.errors import ConcurrentProgressUpdate, ContentNotFound
from academy.services.progression.state import (
    CourseEntry,
    ExamEntry,
    FormationEntry,
    FormationProgressRecord,
    PartEntry,
    QuestionEntry,
)


class CatalogStore(Protocol):
    def get_formation(self, formation_id: int) -> FormationEntry: ...

    def get_part(self, part_id: int) -> PartEntry: ...

    def get_course(self, course_id: int) -> CourseEntry: ...

    def get_exam(self, exam_id: int) -> ExamEntry: ...

    def get_question(self, question_id: int) -> QuestionEntry: ...

    def list_formations(self) -> List[FormationEntry]: ...

    def find_part(self, part_id: int) -> PartEntry | None: ...


class ProgressStore(Protocol):
    def get(self, user_id: int) -> Dict[int, FormationProgressRecord]: ...

    def put(self, user_id: int, formation_id: int, progress: FormationProgressRecord) -> None: ...


def parts_of(catalog: CatalogStore, formation: FormationEntry) -> List[PartEntry]:
    """Parts of ``formation`` in gating order."""
    return [catalog.get_part(part_id) for part_id in formation.part_ids]


class InMemoryCatalogStore:
    def __init__(
        self,
        *,
        formations: Iterable[FormationEntry] = (),
        parts: Iterable[PartEntry] = (),
        courses: Iterable[CourseEntry] = (),
        exams: Iterable[ExamEntry] = (),
    ):
        self._formations = {f.id: f for f in formations}
        self._parts = {p.id: p for p in parts}
        self._courses = {c.id: c for c in courses}
        self._exams = {e.id: e for e in exams}
        self._questions: Dict[int, QuestionEntry] = {}
        for exam in self._exams.values():
            self._questions.update({q.id: q for q in exam.questions})
        for course in self._courses.values():
            self._questions.update({q.id: q for q in course.quick_test_questions})

    @staticmethod
    def _lookup(mapping: Mapping, key: int, code: str):
        try:
            return mapping[key]
        except KeyError:
            raise ContentNotFound(code) from None

    def get_formation(self, formation_id: int) -> FormationEntry:
        return self._lookup(self._formations, formation_id, "formation_not_found")

    def get_part(self, part_id: int) -> PartEntry:
        return self._lookup(self._parts, part_id, "part_not_found")

    def get_course(self, course_id: int) -> CourseEntry:
        return self._lookup(self._courses, course_id, "course_not_found")

    def get_exam(self, exam_id: int) -> ExamEntry:
        return self._lookup(self._exams, exam_id, "exam_not_found")

    def get_question(self, question_id: int) -> QuestionEntry:
        return self._lookup(self._questions, question_id, "question_not_found")

    def list_formations(self) -> List[FormationEntry]:
        return [self._formations[key] for key in sorted(self._formations)]

    def find_part(self, part_id: int) -> PartEntry | None:
        return self._parts.get(part_id)


class InMemoryProgressStore:
    def __init__(self) -> None:
        self._data: Dict[int, Dict[int, FormationProgressRecord]] = {}

    def get(self, user_id: int) -> Dict[int, FormationProgressRecord]:
        return dict(self._data.get(user_id, {}))

    def put(self, user_id: int, formation_id: int, progress: FormationProgressRecord) -> None:
        stored = self._data.setdefault(user_id, {})
        current = stored.get(formation_id)
        current_version = current.version if current is not None else 0
        if progress.version != current_version:
            raise ConcurrentProgressUpdate()
        stored[formation_id] = replace(progress, version=current_version + 1)
