from typing import Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import MockInterview
from prepdeck.utils import create_id, now_ms


class MockInterviewRepo(Repository[MockInterview]):
    collection = "mock_interviews"
    model = MockInterview
    label = "Mock interview"

    def create(self, owner_id: str, problem_ids: list[str], title: Optional[str] = None) -> MockInterview:
        now = now_ms()
        return self._save(MockInterview(
            id=create_id(),
            owner_id=owner_id,
            title=title,
            problem_ids=list(problem_ids),
            created_at=now,
            updated_at=now,
        ))

    def get_by_id(self, requester_uid: Optional[str], interview_id: str) -> MockInterview:
        return self._check_owner(requester_uid, self._load(interview_id))

    def list_for_user(self, uid: str, limit: Optional[int] = None) -> list[MockInterview]:
        return self._query([("ownerId", "==", uid)], limit=limit)
