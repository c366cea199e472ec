"""Moteur de progression: verrouillage des cours, examens et attestations.

Expose les fonctions publiques des sous-modules.
"""

from academy.services.progression.certification import certified_parts
from academy.services.progression.exam_attempts import (
    AttemptOutcome,
    ExamAttemptProcessor,
    apply_exam_result,
    score_exam,
)
from academy.services.progression.gating import (
    MAX_EXAM_ATTEMPTS,
    CourseStatus,
    ExamAccess,
    course_status,
    exam_access,
    formation_progress_percentage,
    round_half_up_percentage,
)
from academy.services.progression.overview import OverallProgress, overall_progress, visible_formations

__all__ = [
    # Verrouillage
    "CourseStatus",
    "ExamAccess",
    "MAX_EXAM_ATTEMPTS",
    "course_status",
    "exam_access",
    "formation_progress_percentage",
    "round_half_up_percentage",
    # Examens
    "AttemptOutcome",
    "ExamAttemptProcessor",
    "apply_exam_result",
    "score_exam",
    # Attestations et tableau de bord
    "certified_parts",
    "OverallProgress",
    "overall_progress",
    "visible_formations",
]
