import copy
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from prepdeck.errors import ConcurrentModification
from prepdeck.models.document import DocumentRecord
from prepdeck.store.base import DocumentStore, Filter, Mutator, OWNER_FIELDS, matches, owner_of
from prepdeck.utils import now_ms

logger = logging.getLogger(__name__)


def _sql_filter(field: str, op: str, value):
    """SQL clause for a filter, or None when it can only be checked in Python.

    Owner filters hit the indexed column; string equality and membership on
    other top-level fields compare the extracted JSON value.
    """
    if field in OWNER_FIELDS and op == "==":
        return DocumentRecord.owner_id == value
    extracted = DocumentRecord.data[field].as_string()
    if op == "==" and isinstance(value, str):
        return extracted == value
    if op == "in" and value and all(isinstance(v, str) for v in value):
        return extracted.in_(list(value))
    return None


def _sort_key(field: str):
    def key(document: dict):
        value = document.get(field)
        return (value is None, value if value is not None else "")
    return key


class SqlDocumentStore(DocumentStore):
    """Document store on a single SQLAlchemy table.

    Every write bumps ``version``; ``transaction`` is an optimistic
    compare-and-swap on it, retried when another writer got there first.
    """

    def __init__(self, session_factory: sessionmaker, max_attempts: int = 5):
        self._session_factory = session_factory
        self._max_attempts = max_attempts

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _find(db: Session, collection: str, doc_id: str) -> Optional[DocumentRecord]:
        return db.execute(
            select(DocumentRecord).where(
                DocumentRecord.collection == collection,
                DocumentRecord.doc_id == doc_id,
            )
        ).scalar_one_or_none()

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._session() as db:
            record = self._find(db, collection, doc_id)
            return copy.deepcopy(record.data) if record else None

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        now = now_ms()
        with self._session() as db:
            record = self._find(db, collection, doc_id)
            if record is None:
                db.add(
                    DocumentRecord(
                        collection=collection,
                        doc_id=doc_id,
                        owner_id=owner_of(data),
                        data=copy.deepcopy(data),
                        version=1,
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                body = {**record.data, **data} if merge else copy.deepcopy(data)
                record.data = body
                record.owner_id = owner_of(body)
                record.version = record.version + 1
                record.updated_at = now
            db.commit()
        logger.debug("set %s/%s (merge=%s)", collection, doc_id, merge)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._session() as db:
            record = self._find(db, collection, doc_id)
            if record is None:
                return False
            db.delete(record)
            db.commit()
        logger.debug("deleted %s/%s", collection, doc_id)
        return True

    def query(
        self,
        collection: str,
        filters: Optional[list[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> list[dict]:
        filters = list(filters or [])
        stmt = select(DocumentRecord).where(DocumentRecord.collection == collection)
        for field, op, value in filters:
            clause = _sql_filter(field, op, value)
            if clause is not None:
                stmt = stmt.where(clause)

        # Ordering and cursors stay in Python, after the filtered load
        with self._session() as db:
            documents = [copy.deepcopy(r.data) for r in db.execute(stmt).scalars()]

        documents = [d for d in documents if matches(d, filters)]
        if order_by:
            documents.sort(key=_sort_key(order_by), reverse=descending)
        if start_after:
            ids = [d.get("id") for d in documents]
            if start_after in ids:
                documents = documents[ids.index(start_after) + 1:]
        if limit is not None:
            documents = documents[:limit]
        return documents

    def transaction(self, collection: str, doc_id: str, mutate: Mutator) -> dict:
        for attempt in range(1, self._max_attempts + 1):
            with self._session() as db:
                record = self._find(db, collection, doc_id)
                current = copy.deepcopy(record.data) if record else None
                version = record.version if record else None

            updated = mutate(current)
            now = now_ms()

            with self._session() as db:
                if version is None:
                    db.add(
                        DocumentRecord(
                            collection=collection,
                            doc_id=doc_id,
                            owner_id=owner_of(updated),
                            data=copy.deepcopy(updated),
                            version=1,
                            created_at=now,
                            updated_at=now,
                        )
                    )
                    try:
                        db.commit()
                        return updated
                    except IntegrityError:
                        db.rollback()
                else:
                    result = db.execute(
                        update(DocumentRecord)
                        .where(
                            DocumentRecord.collection == collection,
                            DocumentRecord.doc_id == doc_id,
                            DocumentRecord.version == version,
                        )
                        .values(
                            data=copy.deepcopy(updated),
                            owner_id=owner_of(updated),
                            version=version + 1,
                            updated_at=now,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 1:
                        db.commit()
                        return updated
                    db.rollback()

            logger.info(
                "transaction on %s/%s lost a race (attempt %d/%d), retrying",
                collection, doc_id, attempt, self._max_attempts,
            )

        raise ConcurrentModification(
            f"Could not update {collection}/{doc_id}: too many concurrent writers"
        )
