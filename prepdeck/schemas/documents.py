from typing import Any, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from prepdeck.schemas.base import DocumentModel, http_url
from prepdeck.schemas.problem import Difficulty

RoadmapProblemType = Literal["dsa", "machine_coding", "system_design", "theory_and_debugging"]
SimulationStatus = Literal["active", "completed"]
SubscriptionStatus = Literal["free", "premium", "expired", "lifetime"]


class Company(DocumentModel):
    id: str
    name: str
    logo: str
    description: str
    difficulty: Difficulty
    industry: Optional[str] = None
    founded: Optional[int] = None
    headquarters: Optional[str] = None
    website: Optional[str] = None
    designations: list[str] = Field(default_factory=list)
    created_at: int
    updated_at: int

    _website = field_validator("website")(http_url)


class Simulation(DocumentModel):
    id: str
    owner_id: str
    company_name: str
    role_level: str
    company_id: Optional[str] = None
    problem_ids: list[str] = Field(default_factory=list)
    status: SimulationStatus = "active"
    created_at: int
    updated_at: int


class RoadmapOverview(DocumentModel):
    total_problems: int
    total_time: str
    focus_areas: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)


class RoadmapProblem(DocumentModel):
    title: str
    description: str
    type: RoadmapProblemType
    difficulty: Difficulty
    estimated_time: str
    focus_areas: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)


class RoadmapDay(DocumentModel):
    day: int = Field(ge=1)
    title: str
    description: str
    problems: list[RoadmapProblem] = Field(default_factory=list)
    total_time: str
    focus_areas: list[str] = Field(default_factory=list)


class Roadmap(DocumentModel):
    id: str
    owner_id: str
    title: str
    description: str
    duration: int
    companies: list[str] = Field(default_factory=list)
    designation: str
    overview: RoadmapOverview
    daily_plan: list[RoadmapDay] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    completed_days: list[int] = Field(default_factory=list)
    completed_problems: list[str] = Field(default_factory=list)
    completed_problems_count: int = 0
    created_at: int
    updated_at: int


class SubscriptionInfo(DocumentModel):
    plan_id: str
    payment_id: str
    amount: float
    activated_at: int


class UserProfile(DocumentModel):
    id: str
    uid: str
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    onboarding_completed: bool = False
    onboarding_data: Optional[dict[str, Any]] = None
    streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[int] = None
    preferences: Optional[dict[str, Any]] = None
    is_premium: bool = False
    subscription_status: SubscriptionStatus = "free"
    subscription_expires_at: Optional[int] = None
    subscription: Optional[SubscriptionInfo] = None
    created_at: int
    updated_at: int

    _photo_url = field_validator("photo_url")(http_url)


class Submission(DocumentModel):
    id: str
    user_id: str
    problem_id: str
    data: Any = None
    created_at: int
    updated_at: int


class Attempt(DocumentModel):
    id: str
    user_id: str
    problem_id: str
    status: Literal["attempted", "completed"]
    attempt_data: Any = None
    score: Optional[float] = None
    time_spent: Optional[float] = None
    problem_type: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    created_at: int
    updated_at: int


class Feedback(DocumentModel):
    id: str
    user_id: str
    problem_id: str
    feedback_data: Any = None
    created_at: int


class MockInterview(DocumentModel):
    id: str
    owner_id: str
    title: Optional[str] = None
    problem_ids: list[str] = Field(default_factory=list)
    created_at: int
    updated_at: int


class InterviewSession(DocumentModel):
    id: str
    user_id: str
    simulation_id: Optional[str] = None
    company_name: str
    role_level: str
    round_name: str
    current_round: int = 0
    rounds: list[dict[str, Any]] = Field(default_factory=list)
    status: Literal["in_progress", "completed"] = "in_progress"
    created_at: int
    updated_at: int
