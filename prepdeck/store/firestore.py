import logging
from typing import Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from prepdeck.store.base import DocumentStore, Filter, Mutator

logger = logging.getLogger(__name__)


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore through ``firebase_admin``."""

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_app(cls, app=None) -> "FirestoreDocumentStore":
        return cls(firestore.client(app))

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snap = self._client.collection(collection).document(doc_id).get()
        return snap.to_dict() if snap.exists else None

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        self._client.collection(collection).document(doc_id).set(data, merge=merge)
        logger.debug("set %s/%s (merge=%s)", collection, doc_id, merge)

    def delete(self, collection: str, doc_id: str) -> bool:
        ref = self._client.collection(collection).document(doc_id)
        if not ref.get().exists:
            return False
        ref.delete()
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
        col = self._client.collection(collection)
        q = col
        for field, op, value in filters or []:
            q = q.where(filter=FieldFilter(field, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)
        if start_after:
            cursor = col.document(start_after).get()
            if cursor.exists:
                q = q.start_after(cursor)
        if limit is not None:
            q = q.limit(limit)
        return [snap.to_dict() for snap in q.stream()]

    def transaction(self, collection: str, doc_id: str, mutate: Mutator) -> dict:
        ref = self._client.collection(collection).document(doc_id)

        @firestore.transactional
        def run(transaction):
            snap = ref.get(transaction=transaction)
            updated = mutate(snap.to_dict() if snap.exists else None)
            transaction.set(ref, updated)
            return updated

        return run(self._client.transaction())
