from prepdeck.repos.companies import CompanyRepo
from prepdeck.repos.dashboard import DashboardRepo
from prepdeck.repos.interview_sessions import InterviewSessionRepo
from prepdeck.repos.mock_interviews import MockInterviewRepo
from prepdeck.repos.problems import ProblemRepo
from prepdeck.repos.roadmaps import RoadmapRepo
from prepdeck.repos.simulations import SimulationRepo
from prepdeck.repos.submissions import SubmissionRepo
from prepdeck.repos.user_profile import UserProfileRepo
from prepdeck.repos.user_progress import UserProgressRepo

__all__ = [
    "CompanyRepo",
    "DashboardRepo",
    "InterviewSessionRepo",
    "MockInterviewRepo",
    "ProblemRepo",
    "RoadmapRepo",
    "SimulationRepo",
    "SubmissionRepo",
    "UserProfileRepo",
    "UserProgressRepo",
]
