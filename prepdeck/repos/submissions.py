from typing import Any, Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import Submission
from prepdeck.utils import now_ms


def submission_id(uid: str, problem_id: str) -> str:
    return f"{uid}__{problem_id}"


class SubmissionRepo(Repository[Submission]):
    collection = "submissions"
    model = Submission
    label = "Submission"
    owner_field = "user_id"

    def save(self, uid: str, problem_id: str, data: Any) -> Submission:
        """Store the latest submission; resubmitting overwrites ``data`` only."""
        doc_id = submission_id(uid, problem_id)

        def mutate(current: Optional[dict]) -> dict:
            now = now_ms()
            created_at = current.get("createdAt", now) if current else now
            return self._parse({
                "id": doc_id,
                "userId": uid,
                "problemId": problem_id,
                "data": data,
                "createdAt": created_at,
                "updatedAt": now,
            }).to_document()

        return self._parse(self.store.transaction(self.collection, doc_id, mutate))

    def get(self, uid: str, problem_id: str) -> Optional[Submission]:
        return self._find(submission_id(uid, problem_id))

    def list_for_user(self, uid: str) -> list[Submission]:
        return self._query([("userId", "==", uid)], order_by="updatedAt")
