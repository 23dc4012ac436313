import logging
from typing import Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import Simulation
from prepdeck.utils import create_id, now_ms

logger = logging.getLogger(__name__)


class SimulationRepo(Repository[Simulation]):
    collection = "simulations"
    model = Simulation
    label = "Simulation"

    def create(
        self, owner_id: str, company_name: str, role_level: str, company_id: Optional[str] = None
    ) -> Simulation:
        now = now_ms()
        simulation = Simulation(
            id=create_id(),
            owner_id=owner_id,
            company_name=company_name,
            role_level=role_level,
            company_id=company_id,
            problem_ids=[],
            status="active",
            created_at=now,
            updated_at=now,
        )
        logger.info("creating simulation %s for %s", simulation.id, owner_id)
        return self._save(simulation)

    def get_by_id(self, requester_uid: Optional[str], simulation_id: str) -> Simulation:
        return self._check_owner(requester_uid, self._load(simulation_id))

    def append_problems(self, requester_uid: str, simulation_id: str, problem_ids: list[str]) -> Simulation:
        """Add ``problem_ids`` to the simulation in one read-modify-write.

        Ids already present are not duplicated; the list never shrinks.
        """

        def change(simulation: Simulation) -> dict:
            merged = list(simulation.problem_ids)
            for problem_id in problem_ids:
                if problem_id not in merged:
                    merged.append(problem_id)
            return {"problemIds": merged, "updatedAt": now_ms()}

        return self._mutate_owned(requester_uid, simulation_id, change)

    def set_status(self, requester_uid: str, simulation_id: str, status: str) -> Simulation:
        return self._mutate_owned(
            requester_uid, simulation_id, lambda _: {"status": status, "updatedAt": now_ms()}
        )

    def list_for_user(self, uid: str, limit: Optional[int] = None, status: Optional[str] = None) -> list[Simulation]:
        filters = [("ownerId", "==", uid)]
        if status is not None:
            filters.append(("status", "==", status))
        return self._query(filters, limit=limit)

    def get_active(self, uid: str) -> Optional[Simulation]:
        active = self.list_for_user(uid, limit=1, status="active")
        return active[0] if active else None
