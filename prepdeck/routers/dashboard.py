from fastapi import APIRouter, Depends, status

from prepdeck.dependencies import get_current_identity, get_dashboard_repo, get_mock_interview_repo
from prepdeck.repos import DashboardRepo, MockInterviewRepo
from prepdeck.schemas.requests import MockInterviewCreateRequest
from prepdeck.services.auth import Identity

router = APIRouter(tags=["dashboard"])


@router.get("/api/dashboard/user-stats")
def user_stats(
    identity: Identity = Depends(get_current_identity),
    dashboard: DashboardRepo = Depends(get_dashboard_repo),
):
    """Progress totals, weekly activity and streaks for the dashboard."""
    return dashboard.user_stats(identity.uid)


@router.get("/api/mock-interviews/stats")
def mock_interview_stats(
    identity: Identity = Depends(get_current_identity),
    dashboard: DashboardRepo = Depends(get_dashboard_repo),
):
    return dashboard.mock_interview_stats(identity.uid)


@router.get("/api/mock-interviews")
def list_mock_interviews(
    identity: Identity = Depends(get_current_identity),
    interviews: MockInterviewRepo = Depends(get_mock_interview_repo),
):
    return [m.to_document() for m in interviews.list_for_user(identity.uid)]


@router.post("/api/mock-interviews", status_code=status.HTTP_201_CREATED)
def create_mock_interview(
    request: MockInterviewCreateRequest,
    identity: Identity = Depends(get_current_identity),
    interviews: MockInterviewRepo = Depends(get_mock_interview_repo),
):
    interview = interviews.create(identity.uid, request.problem_ids, title=request.title)
    return interview.to_document()


@router.get("/api/mock-interviews/{interview_id}")
def get_mock_interview(
    interview_id: str,
    identity: Identity = Depends(get_current_identity),
    interviews: MockInterviewRepo = Depends(get_mock_interview_repo),
):
    return interviews.get_by_id(identity.uid, interview_id).to_document()
