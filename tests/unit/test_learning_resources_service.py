"""Resolution order and fallback behavior of the learning-resources path."""
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from careerlift.errors import InvalidRequest
from careerlift.schemas.analysis import Source
from careerlift.services.gemini_client import GeminiClient
from careerlift.services.learning_resources_service import (
    FALLBACK_MESSAGE,
    LearningResourcesService,
    normalize_skills,
    sanitize_courses,
)
from careerlift.services.static_catalog import static_courses, static_opportunities
from careerlift.services.vertex_search import VertexCourseSearch
from tests.conftest import provider_payload

COURSERA = "https://www.coursera.org/learn/sql-for-data-science"


def discovery(text="- SQL for Data Science", chunks=None):
    return provider_payload(text, chunks=chunks)


def structured(*courses, opportunities=()):
    return provider_payload(json.dumps({"courses": list(courses), "opportunities": list(opportunities)}))


@pytest.fixture
def unconfigured_vertex():
    return VertexCourseSearch(None)


class TestWithoutVertex:

    @pytest.mark.asyncio
    async def test_empty_sanitized_courses_fall_back_to_catalog(self, gemini_client, gemini_provider, unconfigured_vertex):
        gemini_provider.queue(
            discovery(),
            structured({"title": "Shady", "provider": "Nobody", "link": "https://shady.example/c"}),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert result.courses == static_courses()
        assert result.opportunities == static_opportunities()
        assert result.fallback is True
        assert result.used_vertex is False

    @pytest.mark.asyncio
    async def test_untrusted_course_dropped(self, gemini_client, gemini_provider, unconfigured_vertex):
        gemini_provider.queue(
            discovery(),
            structured(
                {"title": "SQL for Data Science", "provider": "Coursera", "link": COURSERA},
                {"title": "Shady", "provider": "Nobody", "link": "https://shady.example/c"},
            ),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert [c.title for c in result.courses] == ["SQL for Data Science"]
        assert all("shady" not in (c.link or "") for c in result.courses)

    @pytest.mark.asyncio
    async def test_lookalike_domain_dropped(self, gemini_client, gemini_provider, unconfigured_vertex):
        gemini_provider.queue(
            discovery(),
            structured(
                {"title": "SQL for Data Science", "provider": "Coursera", "link": COURSERA},
                {"title": "SQL Mastery", "provider": "Coursera?", "link": "https://evilcoursera.org/sql"},
            ),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert [c.link for c in result.courses] == [COURSERA]

    @pytest.mark.asyncio
    async def test_malformed_link_does_not_discard_live_results(
        self, gemini_client, gemini_provider, unconfigured_vertex
    ):
        gemini_provider.queue(
            discovery(),
            structured(
                {"title": "SQL for Data Science", "provider": "Coursera", "link": COURSERA},
                {"title": "Broken", "provider": "Unknown", "link": {"href": "https://www.udemy.com"}},
            ),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert [c.title for c in result.courses] == ["SQL for Data Science"]
        assert result.message is None

    @pytest.mark.asyncio
    async def test_trusted_citation_substituted(self, gemini_client, gemini_provider, unconfigured_vertex):
        gemini_provider.queue(
            discovery(chunks=[{"uri": COURSERA, "title": "coursera.org"}]),
            structured({"title": "SQL for Data Science", "provider": "Coursera", "link": "https://bit.ly/x"}),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert result.courses[0].link == COURSERA
        assert [s.uri for s in result.sources] == [COURSERA]
        assert result.fallback is False
        # Discovery never supplies opportunities
        assert result.opportunities == static_opportunities()

    @pytest.mark.asyncio
    async def test_discovery_courses_without_citations_still_flag_fallback(
        self, gemini_client, gemini_provider, unconfigured_vertex
    ):
        gemini_provider.queue(
            discovery(),
            structured({"title": "SQL for Data Science", "provider": "Coursera", "link": COURSERA}),
        )
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", "SQL")

        assert result.courses[0].title == "SQL for Data Science"
        assert result.fallback is True

    @pytest.mark.asyncio
    async def test_provider_failure_serves_catalog(self, gemini_client, gemini_provider, unconfigured_vertex):
        gemini_provider.queue(httpx.Response(500, json={"error": "boom"}))
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        result = await service.resolve("Data Scientist", ["SQL", "Statistics"])

        assert result.courses == static_courses()
        assert result.sources == []
        assert result.fallback is True
        assert result.message == FALLBACK_MESSAGE
        assert result.skills == "SQL, Statistics"

    @pytest.mark.asyncio
    async def test_unconfigured_gemini_serves_catalog(self, unconfigured_vertex):
        service = LearningResourcesService(GeminiClient(None), unconfigured_vertex)

        result = await service.resolve("Data Scientist", [])

        assert result.courses == static_courses()
        assert result.fallback is True

    @pytest.mark.asyncio
    async def test_role_required(self, gemini_client, unconfigured_vertex):
        service = LearningResourcesService(gemini_client, unconfigured_vertex)

        with pytest.raises(InvalidRequest):
            await service.resolve("", ["SQL"])


class TestWithVertex:

    @pytest.mark.asyncio
    async def test_vertex_courses_and_opportunities_used(self, gemini_client, gemini_provider, vertex_search, vertex_provider):
        vertex_provider.queue(provider_payload(json.dumps({
            "courses": [{"title": "Vertex Course", "provider": "edX", "link": "https://www.edx.org/learn/sql"}],
            "opportunities": [{"name": "Vertex Hackathon", "link": "https://mlh.io/events"}],
        })))
        service = LearningResourcesService(gemini_client, vertex_search)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert result.used_vertex is True
        assert result.fallback is False
        assert [c.title for c in result.courses] == ["Vertex Course"]
        assert [o.name for o in result.opportunities] == ["Vertex Hackathon"]
        assert gemini_provider.requests == []

    @pytest.mark.asyncio
    async def test_vertex_without_opportunities_not_mixed_with_catalog(self, gemini_client, vertex_search, vertex_provider):
        vertex_provider.queue(provider_payload(json.dumps({
            "courses": [{"title": "Vertex Course", "provider": "edX", "link": "https://www.edx.org/learn/sql"}],
            "opportunities": [],
        })))
        service = LearningResourcesService(gemini_client, vertex_search)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert result.opportunities == []

    @pytest.mark.asyncio
    async def test_vertex_failure_falls_through_to_discovery(
        self, gemini_client, gemini_provider, vertex_search, vertex_provider
    ):
        vertex_provider.queue(httpx.ConnectTimeout("timed out"))
        gemini_provider.queue(
            discovery(chunks=[{"uri": COURSERA, "title": "coursera.org"}]),
            structured({"title": "SQL for Data Science", "provider": "Coursera", "link": COURSERA}),
        )
        service = LearningResourcesService(gemini_client, vertex_search)

        result = await service.resolve("Data Scientist", ["SQL"])

        assert result.used_vertex is False
        assert result.courses[0].link == COURSERA
        assert result.opportunities == static_opportunities()

    @pytest.mark.asyncio
    async def test_vertex_empty_courses_falls_through(self, gemini_client, vertex_search):
        vertex_search.search_courses = AsyncMock(return_value={"courses": [], "opportunities": [], "sources": []})
        gemini_client.discover_learning_resources = AsyncMock(return_value={"text": "- nothing", "sources": []})
        gemini_client.structure_learning_resources = AsyncMock(return_value={"courses": [], "opportunities": []})
        service = LearningResourcesService(gemini_client, vertex_search)

        result = await service.resolve("Data Scientist", ["SQL"])

        gemini_client.discover_learning_resources.assert_awaited_once_with("Data Scientist", "SQL")
        assert result.used_vertex is False
        assert result.courses == static_courses()
        assert result.fallback is True


def test_normalize_skills():
    assert normalize_skills(["SQL", "Statistics"]) == (["SQL", "Statistics"], "SQL, Statistics")
    assert normalize_skills("SQL") == (["SQL"], "SQL")
    assert normalize_skills(None) == ([""], "")


class TestSanitizeCourses:

    def test_non_string_link_falls_back_to_citation(self):
        sources = [Source(uri=COURSERA, title="coursera.org")]
        items = [{"title": "SQL", "provider": "Coursera", "link": 123}, "not-a-dict"]

        courses = sanitize_courses(items, sources)

        assert [c.link for c in courses] == [COURSERA]

    def test_lookalike_without_citation_dropped(self):
        items = [{"title": "SQL", "provider": "Nobody", "link": "https://notudemy.com/course"}]

        assert sanitize_courses(items, []) == []


@pytest.mark.asyncio
async def test_test_mode_resolves_without_network(gemini_provider, unconfigured_vertex):
    gemini = GeminiClient(None, http_client=gemini_provider.client(), test_mode=True)
    service = LearningResourcesService(gemini, unconfigured_vertex)

    result = await service.resolve("Data Scientist", ["SQL"])

    assert gemini_provider.requests == []
    assert result.fallback is False
    assert result.courses[0].link.startswith("https://www.coursera.org/")
