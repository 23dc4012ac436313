import pytest
from fastapi.testclient import TestClient

from prepdeck.database import init_db, make_engine, make_session_factory
from prepdeck.main import create_app
from prepdeck.services.evaluator import SubmissionEvaluator
from prepdeck.services.identity import JwtIdentityProvider
from prepdeck.store.sql import SqlDocumentStore
from tests.factories import FakeClient, StubGenerator


@pytest.fixture
def store():
    engine = make_engine("sqlite://")
    init_db(engine)
    return SqlDocumentStore(make_session_factory(engine))


@pytest.fixture
def provider():
    return JwtIdentityProvider("test-secret")


@pytest.fixture
def generator():
    return StubGenerator()


@pytest.fixture
def gemini():
    """Fake Gemini client; tests queue replies on gemini.models.results."""
    return FakeClient()


@pytest.fixture
def evaluator(gemini):
    return SubmissionEvaluator(client=gemini)


@pytest.fixture
def app(store, provider, generator, evaluator):
    return create_app(
        store=store, identity_provider=provider, generator=generator, evaluator=evaluator, edge_auth_enabled=True
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(provider):
    def make(uid, role=None):
        return {"Authorization": f"Bearer {provider.create_id_token(uid, role=role)}"}
    return make
