"""
Learning-resource resolution.

Order: Vertex course search, then Gemini discovery + structuring with link
sanitization, then the bundled catalog. Never raises for provider failures.
"""
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from careerlift.errors import InvalidRequest
from careerlift.schemas.analysis import Source
from careerlift.schemas.learning import LearningCourse, LearningOpportunity, LearningResourceSet
from careerlift.services.gemini_client import GeminiClient
from careerlift.services.static_catalog import static_courses, static_opportunities
from careerlift.services.vertex_search import VertexCourseSearch
from careerlift.utils.logger import get_logger
from careerlift.utils.metrics import inc
from careerlift.utils.url_validator import choose_link

logger = get_logger("courses")

FALLBACK_MESSAGE = "Live lookup failed; returning static catalog."


def normalize_skills(skills: Union[List[str], str, None]) -> Tuple[List[str], str]:
    """Return (skills as a list, skills joined for prompts and the response echo)."""
    if isinstance(skills, list):
        items = [str(s) for s in skills]
        return items, ", ".join(items)
    text = skills or ""
    return [text], text


def sanitize_courses(items: Iterable[dict], sources: List[Source]) -> List[LearningCourse]:
    """Keep courses with a trusted link, substituting a trusted citation where needed."""
    courses = []
    for item in items:
        if not isinstance(item, dict):
            continue
        # Non-string links count as missing
        candidate = item.get("link")
        link = choose_link(candidate if isinstance(candidate, str) else None, sources)
        if not link:
            continue
        try:
            courses.append(LearningCourse.model_validate({**item, "link": link}))
        except ValidationError:
            continue
    return courses


def _parse_items(model, items: Iterable[dict]) -> list:
    parsed = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            continue
    return parsed


class LearningResourcesService:
    """Resolves courses and opportunities for a role and its skill gaps"""

    def __init__(self, gemini: GeminiClient, vertex: VertexCourseSearch):
        self.gemini = gemini
        self.vertex = vertex

    async def resolve(self, role: Optional[str], skills: Union[List[str], str, None] = None) -> LearningResourceSet:
        """
        Raises:
            InvalidRequest: role is missing
        """
        if not role:
            raise InvalidRequest("role is required.")

        skills_list, skills_text = normalize_skills(skills)
        logger.info(f"[courses] role=\"{role}\" skills=\"{skills_text}\"", extra={"role": role})

        try:
            result = await self._resolve_live(role, skills_list, skills_text)
        except Exception as e:
            inc("courses.static_fallback")
            logger.error(
                f"[courses] error: {e}",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            result = LearningResourceSet(
                role=role,
                skills=skills_text,
                courses=static_courses(),
                opportunities=static_opportunities(),
                sources=[],
                used_vertex=False,
                fallback=True,
                message=FALLBACK_MESSAGE,
            )
            logger.info(
                f"[courses] fallback served courses={len(result.courses)} opportunities={len(result.opportunities)}"
            )
            return result

        logger.info(
            f"[courses] success role=\"{role}\" courses={len(result.courses)} "
            f"opportunities={len(result.opportunities)} usedVertex={result.used_vertex}",
            extra={
                "courses": len(result.courses),
                "opportunities": len(result.opportunities),
                "used_vertex": result.used_vertex,
            },
        )
        return result

    async def _resolve_live(self, role: str, skills_list: List[str], skills_text: str) -> LearningResourceSet:
        courses: List[LearningCourse] = []
        sources: List[Source] = []
        opportunities: List[LearningOpportunity] = []
        used_vertex = False

        if self.vertex.is_enabled():
            try:
                vertex_result = await self.vertex.search_courses(role, skills_list)
                courses = _parse_items(LearningCourse, vertex_result.get("courses", []))
                if courses:
                    used_vertex = True
                    sources = vertex_result.get("sources", [])
                    opportunities = _parse_items(LearningOpportunity, vertex_result.get("opportunities", []))
                    inc("courses.vertex")
                logger.info(f"[courses] vertex results={len(courses)}")
            except Exception as e:
                logger.warning(
                    f"[courses] vertex failed: {e}",
                    extra={"error": str(e), "error_type": type(e).__name__, "service": "vertex"},
                )

        if not courses:
            discovery = await self.gemini.discover_learning_resources(role, skills_text)
            structured = await self.gemini.structure_learning_resources(discovery["text"], discovery["sources"])
            sources = discovery["sources"]
            courses = sanitize_courses(structured.get("courses", []), sources)
            if courses:
                inc("courses.discovery")
            else:
                inc("courses.static_courses")
                courses = static_courses()

        # Discovery never supplies opportunities; only Vertex or the catalog do
        if not used_vertex:
            opportunities = static_opportunities()

        return LearningResourceSet(
            role=role,
            skills=skills_text,
            courses=courses,
            opportunities=opportunities,
            sources=sources,
            used_vertex=used_vertex,
            fallback=not used_vertex and not sources,
        )
