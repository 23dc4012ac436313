from prepdeck.schemas.base import DocumentModel, parse_document
from prepdeck.schemas.problem import (
    Problem,
    ProblemEnvelope,
    problem_to_document,
    validate_problem,
)
from prepdeck.schemas.documents import (
    Attempt,
    Company,
    Feedback,
    InterviewSession,
    MockInterview,
    Roadmap,
    Simulation,
    Submission,
    UserProfile,
)

__all__ = [
    "DocumentModel",
    "parse_document",
    "Problem",
    "ProblemEnvelope",
    "problem_to_document",
    "validate_problem",
    "Attempt",
    "Company",
    "Feedback",
    "InterviewSession",
    "MockInterview",
    "Roadmap",
    "Simulation",
    "Submission",
    "UserProfile",
]
