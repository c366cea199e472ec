"""Schémas Pydantic pour les endpoints de progression et de certification."""
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from academy.services.progression.gating import CourseStatus


class CourseState(BaseModel):
    id: int
    title: str
    course_type: str
    status: CourseStatus


class ExamState(BaseModel):
    exam_id: int
    title: str
    reachable: bool
    attempts: int = 0
    remaining_attempts: int
    last_score: Optional[int] = None
    passed: bool = False


class PartState(BaseModel):
    id: int
    title: str
    completed: bool
    courses: List[CourseState] = Field(default_factory=list)
    exam: ExamState


class FormationOverview(BaseModel):
    id: int
    title: str
    description: str
    image_url: Optional[str] = None
    progress_percentage: int


class FormationDetail(FormationOverview):
    parts: List[PartState] = Field(default_factory=list)


class CourseCompletionResponse(BaseModel):
    course_id: int
    status: CourseStatus
    already_completed: bool
    progress_percentage: int


class ExamSubmission(BaseModel):
    """Réponses d'un apprenant: identifiant de question -> index de l'option choisie."""

    answers: Dict[int, int] = Field(default_factory=dict)


class ExamSubmissionResult(BaseModel):
    part_id: int
    score: int
    passing_score: int
    passed: bool
    attempts: int
    remaining_attempts: int
    reset_applied: bool
    progress_percentage: int


class OverallProgressResponse(BaseModel):
    percentage: int
    total_courses: int
    completed_courses: int


class CertifiedPart(BaseModel):
    part_id: int
    part_title: str
    formation_id: int
    formation_title: str


class Attestation(CertifiedPart):
    learner_name: str
    score: Optional[int] = None
    issued_on: date
