"""Shared plumbing for the per-entity repositories."""

import logging
from typing import Callable, Generic, Optional, TypeVar

from prepdeck.errors import Forbidden, NotFound
from prepdeck.schemas.base import DocumentModel, parse_document
from prepdeck.store.base import DocumentStore, Filter

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=DocumentModel)


class Repository(Generic[M]):
    """One collection, one schema.

    Reads go through ``parse_document`` before anything else sees them, and
    writes are validated before they reach the store.
    """

    collection: str
    model: type[M]
    label: str = "Document"
    owner_field: str = "owner_id"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _parse(self, raw: dict) -> M:
        return parse_document(self.model, raw)

    def _find(self, doc_id: str) -> Optional[M]:
        raw = self.store.get(self.collection, doc_id)
        return self._parse(raw) if raw is not None else None

    def _load(self, doc_id: str) -> M:
        entity = self._find(doc_id)
        if entity is None:
            raise NotFound(f"{self.label} not found")
        return entity

    def _check_owner(self, requester_uid: Optional[str], entity: M) -> M:
        if requester_uid is None or getattr(entity, self.owner_field) != requester_uid:
            raise Forbidden("Not allowed")
        return entity

    def _save(self, entity: M) -> M:
        self.store.set(self.collection, entity.id, entity.to_document())
        logger.debug("saved %s/%s", self.collection, entity.id)
        return entity

    def _query(self, filters: list[Filter], order_by: Optional[str] = "createdAt", **kwargs) -> list[M]:
        return [
            self._parse(raw)
            for raw in self.store.query(
                self.collection, filters, order_by=order_by, descending=True, **kwargs
            )
        ]

    def _mutate_owned(
        self, requester_uid: str, doc_id: str, change: Callable[[M], dict]
    ) -> M:
        """Transactionally apply ``change`` to an owned document.

        ``change`` gets the parsed current document and returns the fields to
        merge into it; the merged document is re-validated before the write.
        """

        def mutate(current: Optional[dict]) -> dict:
            if current is None:
                raise NotFound(f"{self.label} not found")
            entity = self._check_owner(requester_uid, self._parse(current))
            merged = {**entity.to_document(), **change(entity)}
            return self._parse(merged).to_document()

        return self._parse(self.store.transaction(self.collection, doc_id, mutate))
