import logging
from typing import Any, Optional

from prepdeck.errors import BadRequest, Conflict, Forbidden, NotFound
from prepdeck.schemas.problem import (
    PROBLEM_KINDS,
    ProblemEnvelope,
    problem_to_document,
    validate_problem,
)
from prepdeck.store.base import DocumentStore
from prepdeck.utils import now_ms

logger = logging.getLogger(__name__)

SHARED_VISIBILITIES = ("admin", "public")

# Fields a patch can never change
IMMUTABLE_FIELDS = ("id", "ownerId", "createdAt", "schemaVersion")


def can_read(problem: ProblemEnvelope, requester_uid: Optional[str]) -> bool:
    is_owner = problem.owner_id is not None and problem.owner_id == requester_uid
    return is_owner or problem.visibility in SHARED_VISIBILITIES


def can_write(problem: ProblemEnvelope, requester_uid: Optional[str], is_admin: bool) -> bool:
    is_owner = problem.owner_id is not None and problem.owner_id == requester_uid
    return is_owner or (is_admin and problem.visibility in SHARED_VISIBILITIES)


class ProblemRepo:
    collection = "problems"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _read(self, problem_id: str) -> ProblemEnvelope:
        raw = self.store.get(self.collection, problem_id)
        if raw is None:
            raise NotFound("Problem not found")
        return validate_problem(raw)

    def _list(self, filters, limit: int, cursor: Optional[str]) -> list[ProblemEnvelope]:
        docs = self.store.query(
            self.collection,
            filters,
            order_by="createdAt",
            descending=True,
            limit=limit,
            start_after=cursor,
        )
        return [validate_problem(raw) for raw in docs]

    def create(self, candidate: Any) -> ProblemEnvelope:
        """Insert a new problem; an existing document with the same id is never replaced."""
        problem = validate_problem(candidate)
        document = problem_to_document(problem)

        def insert(current: Optional[dict]) -> dict:
            if current is not None:
                raise Conflict(f"Problem {problem.id} already exists")
            return document

        self.store.transaction(self.collection, problem.id, insert)
        logger.debug("created problem %s (%s, %s)", problem.id, problem.kind, problem.visibility)
        return problem

    def get_by_id(self, requester_uid: Optional[str], problem_id: str) -> ProblemEnvelope:
        # Admin role does not open up other users' private problems
        problem = self._read(problem_id)
        if not can_read(problem, requester_uid):
            raise Forbidden("Not allowed to read this problem")
        return problem

    def get_many(self, requester_uid: Optional[str], problem_ids: list[str]) -> list[ProblemEnvelope]:
        """Readable problems among ``problem_ids``, in the given order; others are skipped."""
        problems = []
        for problem_id in problem_ids:
            raw = self.store.get(self.collection, problem_id)
            if raw is None:
                continue
            problem = validate_problem(raw)
            if can_read(problem, requester_uid):
                problems.append(problem)
        return problems

    def list_for_user(self, uid: str, limit: int = 20, cursor: Optional[str] = None) -> list[ProblemEnvelope]:
        return self._list([("ownerId", "==", uid)], limit, cursor)

    def list_admin_public(
        self, limit: int = 20, cursor: Optional[str] = None, visibility: Optional[str] = None
    ) -> list[ProblemEnvelope]:
        if visibility is None:
            filters = [("visibility", "in", list(SHARED_VISIBILITIES))]
        elif visibility in SHARED_VISIBILITIES:
            filters = [("visibility", "==", visibility)]
        else:
            raise BadRequest("visibility must be admin or public")
        return self._list(filters, limit, cursor)

    def update(self, requester_uid: str, problem_id: str, patch: dict, is_admin: bool = False) -> ProblemEnvelope:
        """Merge ``patch`` into the stored problem and re-validate the whole document."""
        changes = {k: v for k, v in patch.items() if k not in IMMUTABLE_FIELDS}

        def mutate(current: Optional[dict]) -> dict:
            if current is None:
                raise NotFound("Problem not found")
            existing = validate_problem(current)
            if not can_write(existing, requester_uid, is_admin):
                raise Forbidden("Only the owner can update this problem")
            merged = {**problem_to_document(existing), **changes, "updatedAt": now_ms()}
            return problem_to_document(validate_problem(merged))

        updated = self.store.transaction(self.collection, problem_id, mutate)
        logger.debug("updated problem %s", problem_id)
        return validate_problem(updated)

    def remove(self, requester_uid: str, problem_id: str, is_admin: bool = False) -> None:
        raw = self.store.get(self.collection, problem_id)
        if raw is None:
            return
        existing = validate_problem(raw)
        if not can_write(existing, requester_uid, is_admin):
            raise Forbidden("Only the owner can delete this problem")
        self.store.delete(self.collection, problem_id)
        logger.info("deleted problem %s", problem_id)

    def stats(self, limit: int = 200) -> dict:
        problems = self.list_admin_public(limit=limit)
        by_kind = {kind: 0 for kind in PROBLEM_KINDS}
        by_difficulty = {"easy": 0, "medium": 0, "hard": 0}
        for problem in problems:
            by_kind[problem.kind] += 1
            by_difficulty[problem.content.difficulty] += 1
        return {
            "total": len(problems),
            "dsa": by_kind["dsa"],
            "machineCoding": by_kind["machine_coding"],
            "systemDesign": by_kind["system_design"],
            "theory": by_kind["theory"],
            "byDifficulty": by_difficulty,
        }
