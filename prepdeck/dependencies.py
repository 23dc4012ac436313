from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from prepdeck.errors import Unauthenticated
from prepdeck.repos import (
    CompanyRepo,
    DashboardRepo,
    InterviewSessionRepo,
    MockInterviewRepo,
    ProblemRepo,
    RoadmapRepo,
    SimulationRepo,
    SubmissionRepo,
    UserProfileRepo,
    UserProgressRepo,
)
from prepdeck.services.auth import AuthResolver, Identity, require_admin
from prepdeck.services.evaluator import SubmissionEvaluator
from prepdeck.services.identity import IdentityProvider
from prepdeck.services.problem_generator import ProblemGenerator
from prepdeck.store.base import DocumentStore

# Declared so the OpenAPI docs show the bearer scheme; AuthResolver reads the raw header
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_generator(request: Request) -> ProblemGenerator:
    return request.app.state.generator


def get_evaluator(request: Request) -> SubmissionEvaluator:
    return request.app.state.evaluator


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Resolve the caller or fail with 401."""
    resolver: AuthResolver = request.app.state.auth_resolver
    return await resolver.resolve(request)


async def get_current_identity_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    """Resolve the caller if authenticated, None otherwise."""
    try:
        return await get_current_identity(request, credentials)
    except Unauthenticated:
        return None


async def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    return require_admin(identity)


def get_problem_repo(store: DocumentStore = Depends(get_store)) -> ProblemRepo:
    return ProblemRepo(store)


def get_company_repo(store: DocumentStore = Depends(get_store)) -> CompanyRepo:
    return CompanyRepo(store)


def get_simulation_repo(store: DocumentStore = Depends(get_store)) -> SimulationRepo:
    return SimulationRepo(store)


def get_roadmap_repo(store: DocumentStore = Depends(get_store)) -> RoadmapRepo:
    return RoadmapRepo(store)


def get_submission_repo(store: DocumentStore = Depends(get_store)) -> SubmissionRepo:
    return SubmissionRepo(store)


def get_progress_repo(store: DocumentStore = Depends(get_store)) -> UserProgressRepo:
    return UserProgressRepo(store)


def get_profile_repo(store: DocumentStore = Depends(get_store)) -> UserProfileRepo:
    return UserProfileRepo(store)


def get_mock_interview_repo(store: DocumentStore = Depends(get_store)) -> MockInterviewRepo:
    return MockInterviewRepo(store)


def get_session_repo(store: DocumentStore = Depends(get_store)) -> InterviewSessionRepo:
    return InterviewSessionRepo(store)


def get_dashboard_repo(store: DocumentStore = Depends(get_store)) -> DashboardRepo:
    return DashboardRepo(store)
