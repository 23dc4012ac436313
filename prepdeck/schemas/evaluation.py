from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EvaluationResult(BaseModel):
    """Scored review of one submission, as returned by the model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    problem_id: Optional[str] = None
    score: float = Field(ge=0, le=100)
    feedback: str = Field(min_length=1)
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
