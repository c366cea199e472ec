from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class QuestionIn(BaseModel):
    """Question à choix multiple saisie par un administrateur."""

    id: Optional[int] = None
    text: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=1)
    correct_answer_index: int

    @model_validator(mode="after")
    def _correct_index_in_bounds(self) -> "QuestionIn":
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ValueError("correct_answer_index must point to an existing option")
        return self

    class Config:
        from_attributes = True


class QuestionPublic(BaseModel):
    """Question exposée à l'apprenant: jamais la bonne réponse."""

    id: int
    text: str
    options: List[str]

    class Config:
        from_attributes = True
