"""Request bodies accepted by the HTTP handlers."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from prepdeck.schemas.problem import Difficulty, ProblemKind

ROADMAP_DURATIONS = (7, 15, 30, 90)


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth
class SessionCreateRequest(RequestModel):
    id_token: str = Field(min_length=1)


# Problems
class GenerateProblemRequest(RequestModel):
    designation: str = Field(min_length=1)
    companies: str = Field(min_length=1)
    round: str = Field(min_length=1)
    interview_type: str = Field(min_length=1)
    problem: Optional[dict[str, Any]] = None
    kind: ProblemKind = "dsa"
    difficulty: Optional[Difficulty] = None
    context: Optional[str] = None


class SaveInterviewProblemRequest(RequestModel):
    problem_data: dict[str, Any]
    simulation_id: Optional[str] = None


class MarkAttemptedRequest(RequestModel):
    problem_id: str = Field(min_length=1)
    attempt_data: Any = None
    problem_type: Optional[str] = None
    difficulty: Optional[Difficulty] = None


class MarkCompletedRequest(RequestModel):
    problem_id: str = Field(min_length=1)
    score: float
    time_spent: float = Field(ge=0)


class SaveFeedbackRequest(RequestModel):
    problem_id: str = Field(min_length=1)
    feedback_data: Any


class SaveSubmissionRequest(RequestModel):
    problem_id: str = Field(min_length=1)
    data: Any


# Evaluation
class EvaluateCodeRequest(RequestModel):
    designation: str = Field(min_length=1)
    code: Optional[str] = None
    drawing_image: Optional[str] = None
    problem_id: Optional[str] = None


class EvaluateMockSubmissionRequest(RequestModel):
    problem: dict[str, Any]
    submission: dict[str, Any]


# Interview simulation
class SimulationCreateRequest(RequestModel):
    company_name: str = Field(min_length=1)
    role_level: str = Field(min_length=1)
    company_id: Optional[str] = None


class AppendProblemsRequest(RequestModel):
    simulation_id: str = Field(min_length=1)
    problem_ids: list[str] = Field(min_length=1)


class CompleteSimulationRequest(RequestModel):
    simulation_id: str = Field(min_length=1)


class InterviewSessionCreateRequest(RequestModel):
    simulation_id: Optional[str] = None
    company_name: str = Field(min_length=1)
    role_level: str = Field(min_length=1)
    round_name: str = Field(min_length=1)
    current_round: int = Field(0, ge=0)
    rounds: list[dict[str, Any]] = Field(default_factory=list)


# User profile
class ProfileUpdateRequest(RequestModel):
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    preferences: Optional[dict[str, Any]] = None


class OnboardingRequest(RequestModel):
    onboarding_data: Optional[dict[str, Any]] = None


# Roadmap
class RoadmapGenerateRequest(RequestModel):
    companies: list[str] = Field(min_length=1)
    designation: str = Field(min_length=1)
    duration: int

    @field_validator("duration")
    @classmethod
    def _known_duration(cls, value: int) -> int:
        if value not in ROADMAP_DURATIONS:
            raise ValueError("Duration must be 7, 15, 30, or 90 days")
        return value


class RoadmapProgressRequest(RequestModel):
    roadmap_id: str = Field(min_length=1)
    completed_days: Optional[list[int]] = None
    completed_problems: Optional[list[str]] = None
    completed_problems_count: Optional[int] = Field(None, ge=0)


# Subscription
class SubscriptionActivateRequest(RequestModel):
    plan_id: str = Field(min_length=1)
    payment_id: str = Field(min_length=1)
    amount: float = Field(gt=0)


# Companies
class CompanyCreateRequest(RequestModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    logo: str
    description: str
    difficulty: Difficulty
    industry: Optional[str] = None
    founded: Optional[int] = None
    headquarters: Optional[str] = None
    website: Optional[str] = None
    designations: list[str] = Field(default_factory=list)


class DesignationAddRequest(RequestModel):
    company_id: str = Field(min_length=1)
    designations: list[str] = Field(min_length=1)


# Mock interviews
class MockInterviewCreateRequest(RequestModel):
    title: Optional[str] = None
    problem_ids: list[str] = Field(default_factory=list)
