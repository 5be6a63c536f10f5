# tests/conftest.py
import json
import os

# Configure before any careerlift import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""
os.environ["VERTEX_API_KEY"] = ""
os.environ["TEST_MODE"] = "false"
os.environ["LOG_TO_FILE"] = "false"

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import careerlift.models  # noqa: F401  (registers tables)
from careerlift.config import GeminiConfig, VertexConfig
from careerlift.database import Base
from careerlift.services.analysis_store import AnalysisStore
from careerlift.services.gateway import reset_gateway
from careerlift.services.gemini_client import GeminiClient
from careerlift.services.vertex_search import VertexCourseSearch
from careerlift.utils import metrics


def provider_payload(text=None, sources=None, chunks=None):
    """A generateContent response body."""
    candidate = {}
    if text is not None:
        candidate["content"] = {"parts": [{"text": text}]}
    metadata = {}
    if sources:
        metadata["groundingAttributions"] = [{"web": s} for s in sources]
    if chunks:
        metadata["groundingChunks"] = [{"web": c} for c in chunks]
    if metadata:
        candidate["groundingMetadata"] = metadata
    return {"candidates": [candidate]}


class FakeProvider:
    """httpx transport that replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": "no response queued"})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def body(self, index=-1) -> dict:
        return json.loads(self.requests[index].content)


ANALYSIS_BODY = {
    "resumeScore": 72,
    "missingSkills": ["SQL", "Statistics", "MLOps"],
    "recommendations": {"certifications": ["X"], "opportunities": ["Y"]},
    "summary": "Strong Python background. Limited SQL exposure. Needs deployment experience.",
}


@pytest.fixture(autouse=True)
def _reset_state():
    reset_gateway()
    metrics.reset()
    yield
    reset_gateway()


@pytest.fixture
def gemini_provider():
    return FakeProvider()


@pytest.fixture
def vertex_provider():
    return FakeProvider()


@pytest.fixture
def gemini_client(gemini_provider):
    return GeminiClient(
        GeminiConfig(api_key="test-gemini-key", model="gemini-test"),
        http_client=gemini_provider.client(),
    )


@pytest.fixture
def vertex_search(vertex_provider):
    return VertexCourseSearch(
        VertexConfig(api_key="test-vertex-key", model="vertex-test", project="demo-project", location="us-central1"),
        http_client=vertex_provider.client(),
    )


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "careerlift_test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def session_factory(db_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def analysis_store(session_factory):
    return AnalysisStore(session_factory, app_id="test-app")
