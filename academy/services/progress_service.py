# academy/services/progress_service.py

import logging
from datetime import date
from typing import Dict, List, Mapping, Tuple

from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.crud.catalog_crud import SqlCatalogStore
from academy.crud.progress_crud import SqlProgressStore
from academy.models.user.user_model import User, UserRole
from academy.schemas.catalog.course_schema import CourseRead, QuickTestResult
from academy.schemas.catalog.formation_schema import ExamPublic
from academy.schemas.catalog.question_schema import QuestionPublic
from academy.schemas.progress import progress_schema
from academy.services.errors import ContentNotFound, InvalidSubmission, PolicyViolation, ProgressionError
from academy.services.progression import (
    CourseStatus,
    ExamAttemptProcessor,
    certified_parts,
    course_status,
    exam_access,
    formation_progress_percentage,
    overall_progress,
    visible_formations,
)
from academy.services.progression.state import (
    EMPTY_PROGRESS,
    FormationEntry,
    FormationProgressRecord,
    PartEntry,
    QuestionEntry,
)
from academy.services.progression.stores import parts_of

logger = logging.getLogger(__name__)


def _public_questions(questions: Tuple[QuestionEntry, ...]) -> List[QuestionPublic]:
    return [QuestionPublic(id=q.id, text=q.text, options=list(q.options)) for q in questions]


class ProgressService:
    """
    Parcours d'un apprenant dans ses formations.
    Lit le catalogue et la progression, délègue les règles au moteur
    ``academy.services.progression`` et persiste les écritures.
    """

    def __init__(self, db: Session, user: User, *, max_attempts: int | None = None):
        self.db = db
        self.user = user
        self.catalog = SqlCatalogStore(db)
        self.store = SqlProgressStore(db)
        self.max_attempts = max_attempts or settings.EXAM_MAX_ATTEMPTS

    # --- Helpers ---

    @property
    def role(self) -> UserRole:
        return UserRole(self.user.role)

    def _visible_formation(self, formation_id: int) -> FormationEntry:
        formation = self.catalog.get_formation(formation_id)
        if not self.role.is_privileged and formation_id not in self.user.assigned_formation_ids:
            raise PolicyViolation("formation_not_assigned")
        return formation

    def _progress_for(self, formation_id: int) -> FormationProgressRecord:
        return self.store.get(self.user.id).get(formation_id, EMPTY_PROGRESS)

    def _locate_course(self, formation: FormationEntry, course_id: int) -> Tuple[PartEntry, int, List[PartEntry]]:
        parts = parts_of(self.catalog, formation)
        for index, part in enumerate(parts):
            if course_id in part.course_ids:
                return part, index, parts
        raise ContentNotFound("course_not_found")

    def _part_in_formation(self, formation: FormationEntry, part_id: int) -> Tuple[PartEntry, List[PartEntry]]:
        part = self.catalog.get_part(part_id)
        if part.id not in formation.part_ids:
            raise InvalidSubmission("part_not_in_formation")
        parts = parts_of(self.catalog, formation)
        return part, parts[: formation.part_ids.index(part.id)]

    def _persist(self, formation_id: int, progress: FormationProgressRecord) -> None:
        try:
            self.store.put(self.user.id, formation_id, progress)
            self.db.commit()
        except ProgressionError:
            self.db.rollback()
            raise

    def _exam_state(self, part: PartEntry, progress: FormationProgressRecord, previous: List[PartEntry]):
        exam = self.catalog.get_exam(part.exam_id)
        access = exam_access(part, progress, self.max_attempts, previous_parts=previous)
        return exam, access

    # --- Lecture ---

    def list_formations(self) -> List[progress_schema.FormationOverview]:
        progress_by_formation = self.store.get(self.user.id)
        overviews = []
        for formation in visible_formations(self.role, self.user.assigned_formation_ids, self.catalog):
            progress = progress_by_formation.get(formation.id, EMPTY_PROGRESS)
            overviews.append(
                progress_schema.FormationOverview(
                    id=formation.id,
                    title=formation.title,
                    description=formation.description,
                    image_url=formation.image_url,
                    progress_percentage=formation_progress_percentage(parts_of(self.catalog, formation), progress),
                )
            )
        return overviews

    def formation_detail(self, formation_id: int) -> progress_schema.FormationDetail:
        formation = self._visible_formation(formation_id)
        progress = self._progress_for(formation_id)
        parts = parts_of(self.catalog, formation)

        part_states = []
        for index, part in enumerate(parts):
            courses = []
            for course_id in part.course_ids:
                course = self.catalog.get_course(course_id)
                courses.append(
                    progress_schema.CourseState(
                        id=course.id,
                        title=course.title,
                        course_type=course.course_type.value,
                        status=course_status(course_id, part, index, parts, progress),
                    )
                )
            exam, access = self._exam_state(part, progress, parts[:index])
            part_states.append(
                progress_schema.PartState(
                    id=part.id,
                    title=part.title,
                    completed=access.passed,
                    courses=courses,
                    exam=progress_schema.ExamState(
                        exam_id=exam.id,
                        title=exam.title,
                        reachable=access.reachable,
                        attempts=access.attempts,
                        remaining_attempts=access.remaining_attempts,
                        last_score=access.last_score,
                        passed=access.passed,
                    ),
                )
            )

        return progress_schema.FormationDetail(
            id=formation.id,
            title=formation.title,
            description=formation.description,
            image_url=formation.image_url,
            progress_percentage=formation_progress_percentage(parts, progress),
            parts=part_states,
        )

    def get_course(self, formation_id: int, course_id: int) -> CourseRead:
        formation = self._visible_formation(formation_id)
        part, index, parts = self._locate_course(formation, course_id)
        status = course_status(course_id, part, index, parts, self._progress_for(formation_id))
        if status == CourseStatus.LOCKED:
            raise PolicyViolation("course_locked")

        course = self.catalog.get_course(course_id)
        return CourseRead(
            id=course.id,
            title=course.title,
            course_type=course.course_type,
            content=course.content,
            youtube_video_id=getattr(course.content, "youtube_video_id", None),
            quick_test_questions=_public_questions(course.quick_test_questions),
        )

    # --- Écritures ---

    def complete_course(self, formation_id: int, course_id: int) -> progress_schema.CourseCompletionResponse:
        """Marque un cours comme terminé. Rejouer l'appel ne change rien."""
        formation = self._visible_formation(formation_id)
        part, index, parts = self._locate_course(formation, course_id)
        progress = self._progress_for(formation_id)

        status = course_status(course_id, part, index, parts, progress)
        if status == CourseStatus.LOCKED:
            raise PolicyViolation("course_locked")

        already_completed = status == CourseStatus.COMPLETED
        if not already_completed:
            progress = progress.with_completed_course(course_id)
            self._persist(formation_id, progress)
            logger.info("Cours %s terminé par l'utilisateur %s", course_id, self.user.id)

        return progress_schema.CourseCompletionResponse(
            course_id=course_id,
            status=CourseStatus.COMPLETED,
            already_completed=already_completed,
            progress_percentage=formation_progress_percentage(parts, progress),
        )

    def check_quick_test(self, formation_id: int, course_id: int, answers: Mapping[int, int]) -> QuickTestResult:
        """Corrige le test rapide d'un cours. N'écrit rien: le test n'est pas bloquant."""
        formation = self._visible_formation(formation_id)
        part, index, parts = self._locate_course(formation, course_id)
        if course_status(course_id, part, index, parts, self._progress_for(formation_id)) == CourseStatus.LOCKED:
            raise PolicyViolation("course_locked")

        course = self.catalog.get_course(course_id)
        results: Dict[int, bool] = {q.id: q.is_correct(answers.get(q.id)) for q in course.quick_test_questions}
        return QuickTestResult(course_id=course_id, results=results, all_correct=all(results.values()))

    def get_exam(self, formation_id: int, part_id: int) -> ExamPublic:
        formation = self._visible_formation(formation_id)
        part, previous = self._part_in_formation(formation, part_id)
        exam, access = self._exam_state(part, self._progress_for(formation_id), previous)
        if not access.reachable:
            raise PolicyViolation("exam_locked")

        return ExamPublic(
            id=exam.id,
            part_id=part.id,
            title=exam.title,
            passing_score=exam.passing_score,
            questions=_public_questions(exam.questions),
            attempts=access.attempts,
            remaining_attempts=access.remaining_attempts,
            last_score=access.last_score,
            passed=access.passed,
        )

    def submit_exam(self, formation_id: int, part_id: int, answers: Mapping[int, int]) -> progress_schema.ExamSubmissionResult:
        formation = self._visible_formation(formation_id)
        self._part_in_formation(formation, part_id)

        processor = ExamAttemptProcessor(self.catalog, self.store, max_attempts=self.max_attempts)
        try:
            outcome = processor.submit(self.user.id, part_id, answers)
            self.db.commit()
        except ProgressionError:
            self.db.rollback()
            raise

        return progress_schema.ExamSubmissionResult(
            part_id=part_id,
            score=outcome.score,
            passing_score=outcome.passing_score,
            passed=outcome.attempt.passed,
            attempts=outcome.attempt.attempts,
            remaining_attempts=outcome.remaining_attempts,
            reset_applied=outcome.reset_applied,
            progress_percentage=formation_progress_percentage(parts_of(self.catalog, formation), outcome.progress),
        )

    # --- Tableau de bord et attestations ---

    def overview(self) -> progress_schema.OverallProgressResponse:
        formations = visible_formations(self.role, self.user.assigned_formation_ids, self.catalog)
        result = overall_progress(self.role, formations, self.catalog, self.store.get(self.user.id))
        return progress_schema.OverallProgressResponse(
            percentage=result.percentage,
            total_courses=result.total_courses,
            completed_courses=result.completed_courses,
        )

    def certificates(self) -> List[progress_schema.CertifiedPart]:
        certified = []
        for part in certified_parts(self.store.get(self.user.id), self.catalog):
            formation = self.catalog.get_formation(part.formation_id)
            certified.append(
                progress_schema.CertifiedPart(
                    part_id=part.id,
                    part_title=part.title,
                    formation_id=formation.id,
                    formation_title=formation.title,
                )
            )
        return certified

    def attestation(self, part_id: int) -> progress_schema.Attestation:
        progress_by_formation = self.store.get(self.user.id)
        for part in certified_parts(progress_by_formation, self.catalog):
            if part.id != part_id:
                continue
            formation = self.catalog.get_formation(part.formation_id)
            attempt = progress_by_formation.get(formation.id, EMPTY_PROGRESS).attempt_for(part.id)
            return progress_schema.Attestation(
                part_id=part.id,
                part_title=part.title,
                formation_id=formation.id,
                formation_title=formation.title,
                learner_name=self.user.full_name,
                score=attempt.last_score if attempt else None,
                issued_on=date.today(),
            )
        raise PolicyViolation("attestation_not_earned")
