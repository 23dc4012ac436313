"""Canonical Problem document.

A problem is an envelope (identity, ownership, provenance, timestamps) plus a
``kind``-tagged body whose ``content`` shape depends on the kind.
"""

import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter, field_validator

from prepdeck.schemas.base import DocumentModel, parse_with

SCHEMA_VERSION = "1.0.0"

ProblemKind = Literal["dsa", "machine_coding", "system_design", "theory"]
ProblemSource = Literal["simulation", "mock", "direct", "admin"]
Visibility = Literal["private", "admin", "public"]
Difficulty = Literal["easy", "medium", "hard"]

PROBLEM_KINDS = ("dsa", "machine_coding", "system_design", "theory")

DEFAULT_SCORING_DIMENSIONS = [
    "Requirements",
    "API design",
    "Data modeling",
    "Consistency/Availability",
    "Caching/Scaling",
    "Observability",
]


class CodeFile(DocumentModel):
    path: str
    language: str
    content: str


class TestCase(DocumentModel):
    id: str
    input: Optional[str] = None
    output: Optional[str] = None
    description: Optional[str] = None
    hidden: bool = False
    timeout_ms: int = Field(2000, gt=0)


class RubricItem(DocumentModel):
    criterion: str
    weight: float = Field(ge=0, le=1)
    notes: Optional[str] = None


class Evaluation(DocumentModel):
    rubric: list[RubricItem] = Field(default_factory=list)
    test_cases: list[TestCase] = Field(default_factory=list)
    manual_guidance: Optional[str] = None


class BaseContent(DocumentModel):
    prompt: str
    requirements: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    difficulty: Difficulty
    estimated_time_min: Optional[int] = Field(None, gt=0)
    starter_code: list[CodeFile] = Field(default_factory=list)
    solution: list[CodeFile] = Field(default_factory=list)
    evaluation: Evaluation = Field(default_factory=Evaluation)
    references: list[str] = Field(default_factory=list)


class DsaContent(BaseContent):
    input_format: str
    output_format: str


class MachineCodingContent(BaseContent):
    ui_specs: list[str] = Field(default_factory=list)
    api_specs: list[str] = Field(default_factory=list)


class SystemDesignContent(BaseContent):
    diagram_requirements: list[str] = Field(default_factory=list)
    scoring_dimensions: list[str] = Field(default_factory=lambda: list(DEFAULT_SCORING_DIMENSIONS))


class TheoryQuestion(DocumentModel):
    type: Literal["mcq", "short", "long"]
    question: str
    options: Optional[list[str]] = None
    answer: Optional[str] = None


class TheoryContent(BaseContent):
    questions: list[TheoryQuestion] = Field(default_factory=list)


class CompanyRef(DocumentModel):
    id: Optional[str] = None
    name: Optional[str] = None


class RoundRef(DocumentModel):
    index: Optional[int] = Field(None, ge=1)
    type: Optional[ProblemKind] = None


class ProblemEnvelope(DocumentModel):
    schema_version: Literal["1.0.0"]
    id: str
    title: str
    company: Optional[CompanyRef] = None
    role: Optional[str] = None
    round: Optional[RoundRef] = None
    source: ProblemSource
    visibility: Visibility = "private"
    owner_id: Optional[str]
    created_at: int
    updated_at: int

    @field_validator("id")
    @classmethod
    def _uuid(cls, value: str) -> str:
        uuid.UUID(value)
        return value


class DsaProblem(ProblemEnvelope):
    kind: Literal["dsa"]
    content: DsaContent


class MachineCodingProblem(ProblemEnvelope):
    kind: Literal["machine_coding"]
    content: MachineCodingContent


class SystemDesignProblem(ProblemEnvelope):
    kind: Literal["system_design"]
    content: SystemDesignContent


class TheoryProblem(ProblemEnvelope):
    kind: Literal["theory"]
    content: TheoryContent


Problem = Annotated[
    Union[DsaProblem, MachineCodingProblem, SystemDesignProblem, TheoryProblem],
    Field(discriminator="kind"),
]

problem_adapter = TypeAdapter(Problem)


def validate_problem(candidate: Any) -> ProblemEnvelope:
    """Validate a raw problem map; raises ``SchemaViolation``."""
    if isinstance(candidate, ProblemEnvelope):
        candidate = candidate.to_document()
    return parse_with(problem_adapter, candidate, "Problem")


def problem_to_document(problem: ProblemEnvelope) -> dict:
    return problem.to_document()
