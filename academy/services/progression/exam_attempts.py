"""Exam scoring and the attempt policy (sticky pass, three-strike content reset)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from academy.services.errors import ContentNotFound, InvalidSubmission, PolicyViolation
from academy.services.progression.gating import (
    MAX_EXAM_ATTEMPTS,
    exam_access,
    remaining_attempts,
    round_half_up_percentage,
)
from academy.services.progression.state import (
    EMPTY_PROGRESS,
    ExamAttemptRecord,
    ExamEntry,
    FormationProgressRecord,
    PartEntry,
)
from academy.services.progression.stores import CatalogStore, ProgressStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    attempt: ExamAttemptRecord
    progress: FormationProgressRecord
    score: int
    passing_score: int
    reset_applied: bool
    remaining_attempts: int


def score_exam(exam: ExamEntry, answers: Mapping[int, int]) -> int:
    """Pourcentage de bonnes réponses, arrondi à l'entier (demi vers le haut).

    Unanswered questions and out-of-range options count as wrong. An exam
    without questions cannot be scored and is rejected.
    """
    if not exam.questions:
        raise InvalidSubmission("exam_has_no_questions")

    known_ids = {question.id for question in exam.questions}
    if any(question_id not in known_ids for question_id in answers):
        raise InvalidSubmission("unknown_question")

    correct = sum(1 for question in exam.questions if question.is_correct(answers.get(question.id)))
    return round_half_up_percentage(correct, len(exam.questions))


def apply_exam_result(
    progress: FormationProgressRecord,
    part: PartEntry,
    exam: ExamEntry,
    score: int,
    max_attempts: int = MAX_EXAM_ATTEMPTS,
) -> AttemptOutcome:
    current = progress.attempt_for(part.id) or ExamAttemptRecord(part_id=part.id)
    attempts = current.attempts + 1
    passed = current.passed or score >= exam.passing_score

    reset_applied = False
    updated = progress
    if not passed and attempts >= max_attempts:
        # Toutes les tentatives sont épuisées: la partie doit être refaite en entier.
        updated = updated.without_courses(part.course_ids)
        attempts = 0
        reset_applied = True

    attempt = ExamAttemptRecord(part_id=part.id, attempts=attempts, last_score=score, passed=passed)
    return AttemptOutcome(
        attempt=attempt,
        progress=updated.with_attempt(attempt),
        score=score,
        passing_score=exam.passing_score,
        reset_applied=reset_applied,
        remaining_attempts=remaining_attempts(attempts, passed, max_attempts),
    )


class ExamAttemptProcessor:
    """Scores a learner's exam and records the attempt in the progress store."""

    def __init__(
        self,
        catalog: CatalogStore,
        progress_store: ProgressStore,
        *,
        max_attempts: int = MAX_EXAM_ATTEMPTS,
    ):
        self.catalog = catalog
        self.progress_store = progress_store
        self.max_attempts = max_attempts

    def submit(self, user_id: int, part_id: int, answers: Mapping[int, int]) -> AttemptOutcome:
        part = self.catalog.get_part(part_id)
        try:
            exam = self.catalog.get_exam(part.exam_id)
        except ContentNotFound:
            raise InvalidSubmission("part_without_exam") from None

        formation = self.catalog.get_formation(part.formation_id)
        progress = self.progress_store.get(user_id).get(formation.id, EMPTY_PROGRESS)

        access = exam_access(
            part,
            progress,
            self.max_attempts,
            previous_parts=self._previous_parts(formation.part_ids, part.id),
        )
        if not access.reachable:
            raise PolicyViolation("exam_locked")

        score = score_exam(exam, answers)
        outcome = apply_exam_result(progress, part, exam, score, self.max_attempts)
        self.progress_store.put(user_id, formation.id, outcome.progress)

        logger.info(
            "Examen %s (partie %s) soumis par l'utilisateur %s: score=%s%%, réussi=%s, tentatives=%s, reset=%s",
            exam.id,
            part.id,
            user_id,
            score,
            outcome.attempt.passed,
            outcome.attempt.attempts,
            outcome.reset_applied,
        )
        return outcome

    def _previous_parts(self, part_ids: Sequence[int], part_id: int) -> list[PartEntry]:
        if part_id not in part_ids:
            raise InvalidSubmission("part_not_in_formation")
        return [self.catalog.get_part(pid) for pid in part_ids[: list(part_ids).index(part_id)]]
