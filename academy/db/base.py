"""Déclare l'ensemble des modèles SQLAlchemy pour la détection automatique des tables."""

from academy.db.base_class import Base

# Utilisateurs
from academy.models.user.user_model import User, user_formation_assignments

# Catalogue pédagogique
from academy.models.catalog.formation_model import Formation, Part
from academy.models.catalog.course_model import Course
from academy.models.catalog.exam_model import Exam, Question

# Progression
from academy.models.progress.formation_progress_model import ExamAttempt, FormationProgress

__all__ = (
    "Base",
    "User",
    "user_formation_assignments",
    "Formation",
    "Part",
    "Course",
    "Exam",
    "Question",
    "FormationProgress",
    "ExamAttempt",
)
