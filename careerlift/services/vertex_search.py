"""
Vertex AI course search.

Asks a Vertex-hosted Gemini model for courses/opportunities in the learning
schema directly (no discover + structure round trip). When a Vertex AI Search
data store is configured, answers are grounded on it.
"""
import asyncio
from typing import Any, Dict, List, Optional

import httpx

from careerlift.config import VertexConfig
from careerlift.errors import MalformedResponse, NotConfigured, ProviderUnavailable
from careerlift.schemas.learning import LEARNING_SCHEMA
from careerlift.services.gateway import get_gateway
from careerlift.services.gemini_client import first_text, parse_grounding_sources, parse_json_text

VERTEX_HOST = "https://aiplatform.googleapis.com/v1"


class VertexCourseSearch:
    """Client for Vertex AI generateContent (async)"""

    def __init__(self, config: Optional[VertexConfig], http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.http_client = http_client

    def is_enabled(self) -> bool:
        return self.config is not None and bool(self.config.api_key)

    @property
    def api_url(self) -> str:
        cfg = self.config
        if cfg.project:
            return (
                f"{VERTEX_HOST}/projects/{cfg.project}/locations/{cfg.location}"
                f"/publishers/google/models/{cfg.model}:generateContent"
            )
        return f"{VERTEX_HOST}/publishers/google/models/{cfg.model}:generateContent"

    def _data_store_path(self) -> Optional[str]:
        cfg = self.config
        if not cfg.data_store:
            return None
        if cfg.data_store.startswith("projects/"):
            return cfg.data_store
        if not cfg.project:
            return None
        return (
            f"projects/{cfg.project}/locations/global/collections/default_collection"
            f"/dataStores/{cfg.data_store}"
        )

    def build_payload(self, role: str, skills: List[str]) -> Dict[str, Any]:
        skills_list = ", ".join(s.strip() for s in (skills or []) if s and s.strip())
        prompt = (
            f'Find current, real courses and certifications for the role "{role}". Prioritize reputable '
            "providers (Coursera, Udemy, Google/Grow with Google, AWS, edX, LinkedIn Learning). Use only "
            "real URLs from those providers. Include 5-8 items. Return JSON only. Skills to emphasize: "
            f"{skills_list or 'general role requirements'}."
        )

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": LEARNING_SCHEMA,
            },
        }

        data_store = self._data_store_path()
        if data_store:
            payload["tools"] = [{"retrieval": {"vertexAiSearch": {"datastore": data_store}}}]
        return payload

    async def search_courses(self, role: str, skills: List[str] = None) -> Dict[str, Any]:
        """
        Returns:
            {"courses": [dict], "opportunities": [dict], "sources": [Source]}
        """
        if not self.is_enabled():
            raise NotConfigured("Vertex course search is not configured.")

        payload = self.build_payload(role, skills or [])
        params = {"key": self.config.api_key}
        timeout = self.config.timeout_seconds

        async def send() -> httpx.Response:
            if self.http_client is not None:
                return await self.http_client.post(self.api_url, json=payload, params=params, timeout=timeout)
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.post(self.api_url, json=payload, params=params)

        try:
            response = await get_gateway().execute("vertex", send)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailable(f"Vertex returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise ProviderUnavailable(f"Vertex request failed: {type(e).__name__}", details=str(e)) from e
        except ValueError as e:
            raise MalformedResponse("Vertex response body was not JSON.") from e

        text = first_text(result)
        if not text:
            raise MalformedResponse("Vertex response was empty or malformed.")

        parsed = parse_json_text(text, "Vertex")
        if not isinstance(parsed, dict):
            raise MalformedResponse("Vertex response was not a JSON object.")

        return {
            "courses": [c for c in parsed.get("courses") or [] if isinstance(c, dict)],
            "opportunities": [o for o in parsed.get("opportunities") or [] if isinstance(o, dict)],
            "sources": parse_grounding_sources(result),
        }
