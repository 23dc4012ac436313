"""Per-problem attempt state and the feedback history behind it.

Attempts are keyed ``uid__problemId`` and merged in place; feedback entries
are keyed ``uid__problemId__timestamp`` and never overwritten.
"""

from typing import Any, Optional

from prepdeck.schemas.base import parse_document
from prepdeck.schemas.documents import Attempt, Feedback
from prepdeck.store.base import DocumentStore
from prepdeck.utils import now_ms

ATTEMPTS = "attempts"
FEEDBACK = "feedback"


class UserProgressRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _merge_attempt(self, uid: str, problem_id: str, fields: dict) -> Attempt:
        doc_id = f"{uid}__{problem_id}"

        def mutate(current: Optional[dict]) -> dict:
            now = now_ms()
            base = current or {"id": doc_id, "userId": uid, "problemId": problem_id, "createdAt": now}
            merged = {**base, **{k: v for k, v in fields.items() if v is not None}, "updatedAt": now}
            # A completed problem stays completed when it is opened again
            if base.get("status") == "completed":
                merged["status"] = "completed"
            return parse_document(Attempt, merged).to_document()

        return parse_document(Attempt, self.store.transaction(ATTEMPTS, doc_id, mutate))

    def mark_attempted(
        self,
        uid: str,
        problem_id: str,
        attempt_data: Any = None,
        problem_type: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> Attempt:
        return self._merge_attempt(uid, problem_id, {
            "status": "attempted",
            "attemptData": attempt_data,
            "problemType": problem_type,
            "difficulty": difficulty,
        })

    def mark_completed(self, uid: str, problem_id: str, score: float, time_spent: float) -> Attempt:
        return self._merge_attempt(uid, problem_id, {
            "status": "completed",
            "score": score,
            "timeSpent": time_spent,
        })

    def save_feedback(self, uid: str, problem_id: str, feedback_data: Any) -> Feedback:
        now = now_ms()
        feedback = parse_document(Feedback, {
            "id": f"{uid}__{problem_id}__{now}",
            "userId": uid,
            "problemId": problem_id,
            "feedbackData": feedback_data,
            "createdAt": now,
        })
        self.store.set(FEEDBACK, feedback.id, feedback.to_document())
        return feedback

    def list_attempts(self, uid: str) -> list[Attempt]:
        docs = self.store.query(ATTEMPTS, [("userId", "==", uid)], order_by="updatedAt", descending=True)
        return [parse_document(Attempt, raw) for raw in docs]

    def list_feedback(self, uid: str, problem_id: Optional[str] = None) -> list[Feedback]:
        filters = [("userId", "==", uid)]
        if problem_id is not None:
            filters.append(("problemId", "==", problem_id))
        docs = self.store.query(FEEDBACK, filters, order_by="createdAt", descending=True)
        return [parse_document(Feedback, raw) for raw in docs]
