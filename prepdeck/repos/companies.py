import logging
from typing import Optional

from prepdeck.errors import NotFound
from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import Company
from prepdeck.utils import create_id, now_ms

logger = logging.getLogger(__name__)

# Served for companies that have no designations of their own yet
DEFAULT_DESIGNATIONS = [
    "Frontend Engineer",
    "Frontend Developer",
    "React Developer",
    "JavaScript Developer",
    "UI Developer",
    "Web Developer",
    "Frontend Lead",
    "Senior Frontend Engineer",
    "Staff Frontend Engineer",
]


class CompanyRepo(Repository[Company]):
    collection = "companies"
    model = Company
    label = "Company"

    def create(self, data: dict) -> Company:
        now = now_ms()
        company = self._parse({
            **data,
            "id": data.get("id") or create_id(),
            "createdAt": data.get("createdAt", now),
            "updatedAt": now,
        })
        return self._save(company)

    def get_all(self) -> list[Company]:
        return [
            self._parse(raw)
            for raw in self.store.query(self.collection, order_by="name")
        ]

    def get_by_id(self, company_id: str) -> Company:
        return self._load(company_id)

    def search(self, query: str) -> list[Company]:
        term = query.strip().lower()
        return [
            company for company in self.get_all()
            if term in company.name.lower()
            or term in company.description.lower()
            or (company.industry is not None and term in company.industry.lower())
        ]

    def get_designations(self, company_id: str) -> list[str]:
        company = self._load(company_id)
        return list(company.designations) or list(DEFAULT_DESIGNATIONS)

    def add_designations(self, company_id: str, names: list[str]) -> list[str]:
        """Union ``names`` into the company's designations; existing entries are kept once."""

        def mutate(current: Optional[dict]) -> dict:
            if current is None:
                raise NotFound("Company not found")
            company = self._parse(current)
            designations = list(company.designations)
            for name in names:
                name = name.strip()
                if name and name not in designations:
                    designations.append(name)
            if designations == company.designations:
                return company.to_document()
            return self._parse({
                **company.to_document(),
                "designations": designations,
                "updatedAt": now_ms(),
            }).to_document()

        updated = self._parse(self.store.transaction(self.collection, company_id, mutate))
        logger.debug("company %s now has %d designations", company_id, len(updated.designations))
        return updated.designations
