"""Schémas Pydantic du catalogue: formations, parties et examens."""
from typing import List, Optional

from pydantic import BaseModel, Field

from academy.schemas.catalog.course_schema import CourseSummary
from academy.schemas.catalog.question_schema import QuestionIn, QuestionPublic


class FormationBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    image_url: Optional[str] = None


class FormationCreate(FormationBase):
    pass


class FormationUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None


class FormationRead(FormationBase):
    id: int
    part_ids: List[int] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PartCreate(BaseModel):
    title: str = "Nouvelle partie"


class PartUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)


class PartRead(BaseModel):
    id: int
    title: str
    formation_id: int
    exam_id: int
    course_ids: List[int] = Field(default_factory=list)
    courses: List[CourseSummary] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ExamUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    questions: Optional[List[QuestionIn]] = None


class ExamAdminRead(BaseModel):
    id: int
    title: str
    passing_score: int
    questions: List[QuestionIn] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ExamPublic(BaseModel):
    """Examen présenté à l'apprenant, sans les bonnes réponses."""

    id: int
    part_id: int
    title: str
    passing_score: int
    questions: List[QuestionPublic] = Field(default_factory=list)
    attempts: int = 0
    remaining_attempts: int
    last_score: Optional[int] = None
    passed: bool = False
