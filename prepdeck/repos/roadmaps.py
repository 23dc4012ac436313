from typing import Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import Roadmap
from prepdeck.utils import now_ms


class RoadmapRepo(Repository[Roadmap]):
    collection = "roadmaps"
    model = Roadmap
    label = "Roadmap"

    def create(self, owner_id: str, body: dict) -> Roadmap:
        now = now_ms()
        roadmap = self._parse({
            **body,
            "id": f"{owner_id}__{now}",
            "ownerId": owner_id,
            "createdAt": now,
            "updatedAt": now,
        })
        return self._save(roadmap)

    def get_by_id(self, requester_uid: Optional[str], roadmap_id: str) -> Roadmap:
        return self._check_owner(requester_uid, self._load(roadmap_id))

    def list_for_user(self, uid: str, limit: Optional[int] = None) -> list[Roadmap]:
        return self._query([("ownerId", "==", uid)], limit=limit)

    def update(self, requester_uid: str, roadmap_id: str, patch: dict) -> Roadmap:
        changes = {k: v for k, v in patch.items() if k not in ("id", "ownerId", "createdAt")}
        return self._mutate_owned(
            requester_uid, roadmap_id, lambda _: {**changes, "updatedAt": now_ms()}
        )

    def update_progress(
        self,
        requester_uid: str,
        roadmap_id: str,
        completed_days: Optional[list[int]] = None,
        completed_problems: Optional[list[str]] = None,
        completed_problems_count: Optional[int] = None,
    ) -> Roadmap:
        patch = {}
        if completed_days is not None:
            patch["completedDays"] = completed_days
        if completed_problems is not None:
            patch["completedProblems"] = completed_problems
        if completed_problems_count is not None:
            patch["completedProblemsCount"] = completed_problems_count
        return self.update(requester_uid, roadmap_id, patch)
