from prepdeck.store.base import DocumentStore
from prepdeck.store.sql import SqlDocumentStore

__all__ = ["DocumentStore", "SqlDocumentStore", "build_store"]


def build_store(kind: str, database_url: str, max_attempts: int = 5) -> DocumentStore:
    """Build the configured store; Firestore needs an initialized firebase app."""
    if kind == "firestore":
        from prepdeck.services.identity import init_firebase_app
        from prepdeck.store.firestore import FirestoreDocumentStore

        return FirestoreDocumentStore.from_app(init_firebase_app())

    from prepdeck.database import init_db, make_engine, make_session_factory

    engine = make_engine(database_url)
    init_db(engine)
    return SqlDocumentStore(make_session_factory(engine), max_attempts=max_attempts)
