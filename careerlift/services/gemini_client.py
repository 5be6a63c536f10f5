"""
Gemini client for resume analysis, file text extraction, and learning-resource
discovery (search-grounded) plus structuring.
"""
import asyncio
import base64
import json
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from careerlift.config import GeminiConfig
from careerlift.errors import (
    EmptyExtraction,
    InvalidRequest,
    MalformedResponse,
    ProviderUnavailable,
    SchemaParseError,
)
from careerlift.schemas.analysis import ANALYSIS_SCHEMA, AnalysisResult, Source
from careerlift.schemas.learning import LEARNING_SCHEMA
from careerlift.services.gateway import get_gateway
from careerlift.utils.logger import get_logger

logger = get_logger("gemini")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

# Resume text beyond this offset is never sent to the provider
MAX_RESUME_CHARS = 5000

ANALYSIS_SYSTEM_PROMPT = (
    "You are a world-class AI Career Coach named CareerLift AI. Your task is to analyze a "
    "student's resume against their specified career goal. You must generate a score (out of 100), "
    "identify 3 crucial missing skills, and suggest 3 real-world opportunities and 3 certifications, "
    "all based on current industry standards and the user's career goal. Respond ONLY with a valid "
    "JSON object matching the provided schema."
)

STRUCTURE_PROMPT = (
    "You will receive a bullet list of courses and opportunities gathered from the web plus a list "
    "of source URLs. Convert it into a strict JSON object with two arrays: \"courses\" and "
    "\"opportunities\". Each course item must include title, provider, link (real URL), and "
    "optionally cost, duration, level. Each opportunity item must include name, link (real URL), "
    "and optionally description, difficulty. Prefer links provided in the source list; otherwise "
    "use the URL mentioned in the bullet text. Do not invent items; only structure what is "
    "provided. If a field is missing, omit it rather than guessing."
)


def parse_grounding_sources(result: Dict[str, Any]) -> List[Source]:
    """
    Citation pairs from a generateContent response.

    Reads groundingAttributions (older responses) and groundingChunks (search
    tool responses); keeps only entries with both uri and title.
    """
    candidates = result.get("candidates") or []
    if not candidates:
        return []
    metadata = candidates[0].get("groundingMetadata") or {}

    entries = []
    for attr in metadata.get("groundingAttributions") or []:
        entries.append(attr.get("web") or {})
    for chunk in metadata.get("groundingChunks") or []:
        entries.append(chunk.get("web") or chunk.get("retrievedContext") or {})

    sources = []
    seen = set()
    for web in entries:
        uri, title = web.get("uri"), web.get("title")
        if uri and title and uri not in seen:
            seen.add(uri)
            sources.append(Source(uri=uri, title=title))
    return sources


def first_text(result: Dict[str, Any]) -> Optional[str]:
    """Text of the first part of the first candidate, if any."""
    try:
        return result["candidates"][0]["content"]["parts"][0]["text"] or None
    except (KeyError, IndexError, TypeError):
        return None


def parse_json_text(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Failed to parse {what} JSON response.", details=str(e)) from e


class GeminiClient:
    """Client for the Gemini generateContent REST API (async)"""

    def __init__(
        self,
        config: Optional[GeminiConfig],
        http_client: Optional[httpx.AsyncClient] = None,
        test_mode: bool = False,
    ):
        self.config = config
        self.http_client = http_client
        self.test_mode = test_mode

    @property
    def api_url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.config.model}:generateContent"

    def is_configured(self) -> bool:
        return self.config is not None and bool(self.config.api_key)

    def _ensure_configured(self) -> None:
        if not self.is_configured():
            raise ProviderUnavailable(
                "GEMINI_API_KEY is not configured on the server. "
                "Set it in the environment, or set TEST_MODE=true to use mock data."
            )

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.config.api_key}

        async def send() -> httpx.Response:
            if self.http_client is not None:
                return await self.http_client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.config.timeout_seconds
                )
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                return await client.post(self.api_url, json=payload, headers=headers)

        try:
            response = await get_gateway().execute("gemini", send)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailable(
                f"Gemini returned HTTP {e.response.status_code}",
                details=_error_body(e.response),
            ) from e
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise ProviderUnavailable(f"Gemini request failed: {type(e).__name__}", details=str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse("Gemini response body was not JSON.") from e

    async def generate_structured_analysis(self, resume_text: str, career_goal: str) -> AnalysisResult:
        """
        Score a resume against a career goal.

        The resume is truncated to MAX_RESUME_CHARS before submission. Returns the
        validated result with grounding sources; timestamp and careerGoal are left
        for the caller to stamp.
        """
        if not resume_text or not career_goal:
            raise InvalidRequest("resumeText and careerGoal are required for analysis.")

        if self.test_mode:
            logger.info(f"[TEST MODE] Simulating Gemini analysis for '{career_goal}'")
            return _mock_analysis(career_goal)

        self._ensure_configured()

        truncated_resume = resume_text[:MAX_RESUME_CHARS]
        user_query = (
            f'Analyze the following resume content for the career goal: "{career_goal}". '
            f'Resume content: "{truncated_resume}".'
        )

        payload = {
            "contents": [{"parts": [{"text": user_query}]}],
            "systemInstruction": {"parts": [{"text": ANALYSIS_SYSTEM_PROMPT}]},
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": ANALYSIS_SCHEMA,
            },
        }

        result = await self._post(payload)
        text = first_text(result)
        if not text:
            raise MalformedResponse("Gemini response was empty or malformed.")

        data = parse_json_text(text, "Gemini analysis")
        if not isinstance(data, dict):
            raise SchemaParseError("Gemini analysis response was not a JSON object.")

        try:
            return AnalysisResult.model_validate({**data, "sources": parse_grounding_sources(result)})
        except ValidationError as e:
            raise SchemaParseError(
                "Gemini analysis did not match the response schema.",
                details=e.errors(include_url=False),
            ) from e

    async def extract_text_from_file(self, data: bytes, mime_type: str) -> str:
        """Extract plain text from an uploaded resume (PDF, plain text or image)."""
        if not data:
            raise InvalidRequest("No resume file uploaded.")

        if self.test_mode:
            return data.decode("utf-8", errors="ignore") or "[TEST MODE] extracted resume text"

        self._ensure_configured()

        payload = {
            "contents": [
                {
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": mime_type or "application/octet-stream",
                                "data": base64.b64encode(data).decode("ascii"),
                            }
                        }
                    ]
                }
            ]
        }

        result = await self._post(payload)
        text = first_text(result)
        if not text:
            raise EmptyExtraction("Failed to extract text from resume.")
        return text

    async def discover_learning_resources(self, role: str, skills_text: str = "") -> Dict[str, Any]:
        """
        Search-grounded, free-form discovery of courses and opportunities.

        Returns:
            {"text": str, "sources": List[Source]}
        """
        if not role:
            raise InvalidRequest("role is required to search for courses/opportunities.")

        if self.test_mode:
            logger.info(f"[TEST MODE] Simulating Gemini course discovery for '{role}'")
            return _mock_discovery(role, skills_text)

        self._ensure_configured()

        prompt = (
            "Find current, reputable courses/certifications (Coursera, Udemy, Google/Grow with Google, "
            "AWS Training, etc.) and hands-on opportunities (hackathons, competitions, open-source "
            f'programs, labs) for someone targeting the role "{role}". Prioritize the following skills '
            f"or gaps: {skills_text or 'general role requirements'}. Return a concise bullet list with "
            "title/provider/cost/duration/link for courses and name/description/link/difficulty for "
            "opportunities."
        )

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        }

        result = await self._post(payload)
        text = first_text(result)
        if not text:
            raise MalformedResponse("Gemini discovery response was empty or malformed.")

        return {"text": text, "sources": parse_grounding_sources(result)}

    async def structure_learning_resources(
        self, discovery_text: str, discovery_sources: List[Source] = None
    ) -> Dict[str, List[dict]]:
        """
        Coerce discovery text into {"courses": [...], "opportunities": [...]}.

        Items are returned as the provider structured them; link checks are
        the caller's job.
        """
        if not discovery_text:
            raise InvalidRequest("discoveryText is required to structure learning resources.")

        if self.test_mode:
            logger.info("[TEST MODE] Simulating Gemini structuring of discovery text")
            return _mock_structured_resources()

        self._ensure_configured()

        sources_json = json.dumps([s.model_dump() for s in (discovery_sources or [])])
        payload = {
            "contents": [
                {"parts": [{"text": f"{STRUCTURE_PROMPT}\n\nSources:\n{sources_json}\n\nContent:\n{discovery_text}"}]}
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": LEARNING_SCHEMA,
            },
        }

        result = await self._post(payload)
        text = first_text(result)
        if not text:
            raise MalformedResponse("Gemini structuring response was empty or malformed.")

        parsed = parse_json_text(text, "structured learning resources")
        if not isinstance(parsed, dict):
            raise SchemaParseError("Structured learning resources were not a JSON object.")

        return {
            "courses": [c for c in parsed.get("courses") or [] if isinstance(c, dict)],
            "opportunities": [o for o in parsed.get("opportunities") or [] if isinstance(o, dict)],
        }


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def _mock_analysis(career_goal: str) -> AnalysisResult:
    return AnalysisResult(
        resume_score=70,
        missing_skills=["SQL", "Statistics", "Cloud Deployment"],
        recommendations={
            "certifications": ["Google Data Analytics Professional Certificate"],
            "opportunities": ["Kaggle Competitions"],
        },
        summary=f"Mock analysis for {career_goal}. Solid fundamentals. Several gaps remain.",
    )


_MOCK_COURSE_LINK = "https://www.coursera.org/learn/sql-for-data-science"
_MOCK_OPPORTUNITY_LINK = "https://www.kaggle.com/competitions"


def _mock_discovery(role: str, skills_text: str) -> Dict[str, Any]:
    return {
        "text": (
            f"- SQL for Data Science (Coursera, free to audit, 4 weeks): {_MOCK_COURSE_LINK}\n"
            f"- Kaggle Competitions (Beginner to Advanced): {_MOCK_OPPORTUNITY_LINK}\n"
            f"[TEST MODE] Mock discovery for {role} ({skills_text or 'general role requirements'})"
        ),
        "sources": [Source(uri=_MOCK_COURSE_LINK, title="coursera.org")],
    }


def _mock_structured_resources() -> Dict[str, List[dict]]:
    return {
        "courses": [
            {
                "title": "SQL for Data Science",
                "provider": "Coursera",
                "link": _MOCK_COURSE_LINK,
                "cost": "Free to audit",
                "duration": "4 weeks",
                "level": "Beginner",
            }
        ],
        "opportunities": [
            {"name": "Kaggle Competitions", "link": _MOCK_OPPORTUNITY_LINK, "difficulty": "Beginner to Advanced"}
        ],
    }
