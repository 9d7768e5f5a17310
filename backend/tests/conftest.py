# tests/conftest.py
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from prdify.main import app
from prdify.database import Base, get_db
from prdify.api.deps import get_completion_client
from prdify.models import Document, DocumentStatus, Question

# Create test database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

USER_ID = "7f1c2c7e-0000-4000-8000-000000000001"
OTHER_USER_ID = "7f1c2c7e-0000-4000-8000-000000000002"


class FakeCompletionClient:
    """Scripted stand-in for CompletionClient.

    Queue plain dicts (returned as the provider's parsed JSON) or exceptions
    (raised in order).
    """

    def __init__(self):
        self.responses = []
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def get_structured_response(self, options, response_model=None):
        self.calls.append(options)
        if not self.responses:
            raise AssertionError("No scripted completion response left")

        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if response_model is not None:
            return response_model.model_validate(response)
        return response


def questions_payload(count=2, prefix="Question"):
    return {
        "questions": [
            {"question": f"{prefix} {i}?", "recommendation": f"Recommendation {i}"}
            for i in range(1, count + 1)
        ]
    }


@pytest.fixture
def engine():
    """Create a fresh in-memory database engine per test"""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool  # Needed for SQLite in-memory database
    )
    return engine


@pytest.fixture
def tables(engine):
    """Create all tables in the test database"""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def session_factory(engine, tables):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Creates a new database session for a test"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


@pytest.fixture
def client(db_session, fake_completion):
    """Test client using the test database and a scripted completion client"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: fake_completion
    with TestClient(app, headers={"X-User-Id": USER_ID}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_document(db_session):
    """Create a document that is collecting answers"""
    document = Document(
        user_id=USER_ID,
        name="Test PRD",
        main_problem="Teams lose track of requirements",
        in_scope="Guided planning sessions",
        out_of_scope="Real-time collaboration",
        success_criteria="A complete PRD in under an hour",
        status=DocumentStatus.COLLECTING_ANSWERS
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


@pytest.fixture
def add_questions(db_session):
    """Insert a round of questions, answered with ``answers`` (None leaves them open)"""
    def _add(document, round_number, answers):
        rows = [
            Question(
                document_id=document.id,
                round_number=round_number,
                question=f"Round {round_number} question {i}?",
                answer=answer
            )
            for i, answer in enumerate(answers, start=1)
        ]
        db_session.add_all(rows)
        db_session.commit()
        for row in rows:
            db_session.refresh(row)
        return rows

    return _add


@pytest.fixture
def document_in_status(db_session, sample_document):
    """Force the sample document into a status with matching content"""
    def _set(status, summary=None, content=None):
        sample_document.status = status
        sample_document.summary = summary
        sample_document.content = content
        db_session.commit()
        db_session.refresh(sample_document)
        return sample_document

    return _set


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_files():
    """Clean up test files after all tests are done"""
    yield
    for file in ["test.db", "prdify.db"]:
        if os.path.exists(file):
            os.remove(file)


@pytest.fixture(name="questions_payload")
def questions_payload_fixture():
    return questions_payload


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID
