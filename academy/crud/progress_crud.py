# Fichier: academy/crud/progress_crud.py
import logging
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from academy.models.progress.formation_progress_model import ExamAttempt, FormationProgress
from academy.services.errors import ConcurrentProgressUpdate
from academy.services.progression.state import ExamAttemptRecord, FormationProgressRecord

logger = logging.getLogger(__name__)


def to_record(row: FormationProgress) -> FormationProgressRecord:
    return FormationProgressRecord(
        completed_course_ids=frozenset(row.completed_course_ids or ()),
        exam_attempts=tuple(
            ExamAttemptRecord(
                part_id=attempt.part_id,
                attempts=attempt.attempts,
                last_score=attempt.last_score,
                passed=attempt.passed,
            )
            for attempt in row.exam_attempts
        ),
        version=row.version,
    )


class SqlProgressStore:
    """Progress persistence keyed by ``(user_id, formation_id)``.

    Records returned by ``get`` carry the row version. ``put`` locks the row
    (``SELECT ... FOR UPDATE`` where supported), refuses a record whose version
    is no longer the stored one, and the mapper's version counter catches a
    writer that slips in between the check and the flush. Either way the
    caller gets :class:`ConcurrentProgressUpdate` instead of a lost update.
    The caller owns the transaction (commit/rollback).
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Dict[int, FormationProgressRecord]:
        rows = (
            self.db.query(FormationProgress)
            .options(selectinload(FormationProgress.exam_attempts))
            .filter(FormationProgress.user_id == user_id)
            .all()
        )
        return {row.formation_id: to_record(row) for row in rows}

    def put(self, user_id: int, formation_id: int, progress: FormationProgressRecord) -> None:
        row = (
            self.db.query(FormationProgress)
            .options(selectinload(FormationProgress.exam_attempts))
            .filter_by(user_id=user_id, formation_id=formation_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        stored_version = row.version if row is not None else 0
        if progress.version != stored_version:
            logger.warning(
                "Progression périmée (utilisateur %s, formation %s): version %s lue, %s en base",
                user_id,
                formation_id,
                progress.version,
                stored_version,
            )
            raise ConcurrentProgressUpdate()

        if row is None:
            row = FormationProgress(user_id=user_id, formation_id=formation_id, completed_course_ids=[])
            self.db.add(row)

        row.completed_course_ids = sorted(progress.completed_course_ids)
        row.updated_at = datetime.now(timezone.utc)

        existing = {attempt.part_id: attempt for attempt in row.exam_attempts}
        wanted = {record.part_id: record for record in progress.exam_attempts}
        for part_id, attempt in existing.items():
            if part_id not in wanted:
                row.exam_attempts.remove(attempt)
        for part_id, record in wanted.items():
            attempt = existing.get(part_id)
            if attempt is None:
                attempt = ExamAttempt(part_id=part_id)
                row.exam_attempts.append(attempt)
            attempt.attempts = record.attempts
            attempt.last_score = record.last_score
            attempt.passed = record.passed

        try:
            self.db.flush()
        except (StaleDataError, IntegrityError) as exc:
            logger.warning(
                "Écriture concurrente de la progression (utilisateur %s, formation %s): %s",
                user_id,
                formation_id,
                exc,
            )
            raise ConcurrentProgressUpdate() from exc


def delete_progress_for_formation(db: Session, formation_id: int) -> int:
    """Supprime toutes les progressions liées à une formation. Retourne le nombre de lignes."""
    rows = db.query(FormationProgress).filter(FormationProgress.formation_id == formation_id).all()
    for row in rows:
        db.delete(row)
    return len(rows)
