"""Document-store contract used by every repository.

Documents are plain JSON-compatible dicts. Stores never interpret them beyond
the fields named in query filters; validation belongs to the schema layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

Filter = tuple[str, str, Any]
Mutator = Callable[[Optional[dict]], dict]

SUPPORTED_OPERATORS = ("==", "in")

# Body fields copied into an indexed owner column by stores that support it
OWNER_FIELDS = ("ownerId", "userId")


def matches(document: dict, filters: Iterable[Filter]) -> bool:
    for field, op, value in filters:
        actual = document.get(field)
        if op == "==":
            if actual != value:
                return False
        elif op == "in":
            if actual not in value:
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return True


def owner_of(document: dict) -> Optional[str]:
    for field in OWNER_FIELDS:
        value = document.get(field)
        if isinstance(value, str):
            return value
    return None


class DocumentStore(ABC):
    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Return the stored document or None."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        """Write a document; ``merge`` shallow-merges into an existing one."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document, returning whether it existed."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Optional[list[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> list[dict]:
        """Return documents matching every filter.

        ``start_after`` is the id of a document from a previous page; results
        resume after it in the requested order.
        """

    @abstractmethod
    def transaction(self, collection: str, doc_id: str, mutate: Mutator) -> dict:
        """Atomically read a document, apply ``mutate`` and write the result.

        ``mutate`` receives the current document (or None) and returns the full
        replacement. It may run more than once when a concurrent writer wins the
        race, so it must not have side effects. Exceptions raised by ``mutate``
        abort the transaction and propagate unchanged.
        """
