"""
Async HTTP client for the CareerLift API.

analyze_resume wraps POST /api/analyze in a fixed exponential backoff: up to
MAX_ATTEMPTS sequential attempts, waiting 2**n seconds after failed attempt n.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

import httpx

from careerlift.errors import AnalysisExhausted, CareerLiftError
from careerlift.utils.logger import get_logger

logger = get_logger("client")

MAX_ATTEMPTS = 5
DEFAULT_TIMEOUT = 90.0


class CareerLiftClientError(CareerLiftError):
    """Non-success response from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class AnalysisSink(Protocol):
    """Local store the client writes successful analyses to."""

    async def save(self, user_id: str, analysis: Dict[str, Any]) -> Any: ...


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt `attempt` (0-indexed): 1, 2, 4, 8, 16."""
    return float(2 ** attempt)


class CareerLiftClient:
    """Client for the analysis, upload and learning-resource endpoints"""

    def __init__(
        self,
        base_url: str = "http://localhost:4000",
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._sleep = sleep

    async def __aenter__(self) -> "CareerLiftClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    async def analyze_resume(
        self,
        resume_text: str,
        career_goal: str,
        sink: Optional[AnalysisSink] = None,
        user_id: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """
        Analyze with retries, then persist to `sink` when both sink and user_id are given.

        Raises:
            AnalysisExhausted: every attempt failed
            asyncio.CancelledError: cancel_event was set
        """
        last_error: Optional[str] = None

        for attempt in range(MAX_ATTEMPTS):
            _check_cancelled(cancel_event)
            try:
                analysis = await self._post_analyze(resume_text, career_goal, user_id)
            except (httpx.HTTPError, CareerLiftClientError, ValueError) as e:
                last_error = str(e) or type(e).__name__
                wait = backoff_delay(attempt)
                logger.warning(
                    f"[client] analyze attempt {attempt + 1} failed: {last_error}",
                    extra={"attempt": attempt + 1, "error": last_error, "wait_seconds": wait},
                )
                await self._backoff(wait, cancel_event)
                continue

            if sink is not None and user_id:
                try:
                    await sink.save(user_id, analysis)
                except Exception as e:
                    logger.warning(f"[client] failed to persist analysis: {e}", extra={"error": str(e)})
            return analysis

        raise AnalysisExhausted(MAX_ATTEMPTS, last_error)

    async def _post_analyze(self, resume_text: str, career_goal: str, user_id: Optional[str]) -> Dict[str, Any]:
        headers = {"X-User-ID": user_id} if user_id else None
        response = await self.http.post(
            "/api/analyze",
            json={"resumeText": resume_text, "careerGoal": career_goal},
            headers=headers,
        )
        if not response.is_success:
            raise CareerLiftClientError(
                f"API call failed with status: {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def _backoff(self, delay: float, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await self._sleep(delay)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        done, pending = await asyncio.wait({sleeper, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        if cancelled in done:
            raise asyncio.CancelledError("analysis cancelled")

    async def upload_resume_file(
        self,
        filename: str,
        data: bytes,
        content_type: str = "application/pdf",
        career_goal: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload a resume for text extraction (and analysis when career_goal is set)."""
        form = {"careerGoal": career_goal} if career_goal else None
        response = await self.http.post(
            "/api/upload-resume",
            files={"file": (filename, data, content_type)},
            data=form,
        )
        if not response.is_success:
            raise CareerLiftClientError(
                f"Upload failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        result = response.json()
        if not result.get("extractedText"):
            raise CareerLiftClientError("Resume text was empty in the upload response.")
        return result

    async def fetch_learning_resources(self, role: str, skills: Union[List[str], str, None] = None) -> Dict[str, Any]:
        response = await self.http.post(
            "/api/courses/external",
            json={"role": role, "skills": skills if skills is not None else []},
        )
        if not response.is_success:
            raise CareerLiftClientError(
                f"Course lookup failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )
        return response.json()


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("analysis cancelled")
