"""
Shared fixtures: in-memory database, stub analysis provider, API client.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.schemas.analysis import AnalysisResult, MindReflection
from app.services.analysis_service import JournalAnalysisService, get_analysis_service
from app.services.providers import AnalysisProvider


class StubProvider(AnalysisProvider):
    """Returns a fixed result or raises a fixed error.

    Set ``started`` and ``gate`` to asyncio.Event objects (inside the running
    loop) to hold the call open until the test releases it.
    """

    name = "stub"

    def __init__(self):
        self.result = AnalysisResult(
            primary_emotions=["grateful"],
            emotional_intensity=0.6,
            growth_indicators=["gratitude practice"],
            core_adjustments={"Optimism": 0.1},
            mind_reflection=MindReflection(summary="You are noticing the good in your day.")
        )
        self.error = None
        self.calls = []
        self.started = None
        self.gate = None

    async def analyze(self, entry):
        self.calls.append(entry.id)
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def analysis_service(provider):
    return JournalAnalysisService(provider)


@pytest.fixture
def client(session_factory, analysis_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analysis_service] = lambda: analysis_service
    yield TestClient(app)
    app.dependency_overrides.clear()
