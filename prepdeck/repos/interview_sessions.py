from typing import Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import InterviewSession
from prepdeck.utils import create_id, now_ms


class InterviewSessionRepo(Repository[InterviewSession]):
    """Per-round interview sessions opened from a simulation."""

    collection = "interview_sessions"
    model = InterviewSession
    label = "Interview session"
    owner_field = "user_id"

    def create(self, user_id: str, data: dict) -> InterviewSession:
        now = now_ms()
        session = self._parse({
            **data,
            "id": create_id(),
            "userId": user_id,
            "status": "in_progress",
            "createdAt": now,
            "updatedAt": now,
        })
        return self._save(session)

    def get_by_id(self, requester_uid: Optional[str], session_id: str) -> InterviewSession:
        return self._check_owner(requester_uid, self._load(session_id))

    def find(self, uid: str, simulation_id: str, round_name: Optional[str] = None) -> Optional[InterviewSession]:
        """Newest session of ``uid`` for a simulation (and round, when given)."""
        filters = [("userId", "==", uid), ("simulationId", "==", simulation_id)]
        if round_name is not None:
            filters.append(("roundName", "==", round_name))
        sessions = self._query(filters, limit=1)
        return sessions[0] if sessions else None
