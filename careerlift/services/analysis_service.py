"""
Analysis orchestration.

One provider call per request, then server-side stamping and best-effort
persistence. Retrying is left to the client.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from careerlift.errors import AnalysisFailed, CareerLiftError, InvalidRequest, describe
from careerlift.schemas.analysis import AnalysisResult
from careerlift.services.analysis_store import AnalysisStore
from careerlift.services.gemini_client import GeminiClient
from careerlift.utils.logger import get_logger
from careerlift.utils.metrics import inc

logger = get_logger("analysis")


class AnalysisState(str, Enum):
    IDLE = "idle"
    AWAITING_PROVIDER = "awaiting_provider"
    VALIDATED = "validated"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class AnalysisRun:
    state: AnalysisState = AnalysisState.IDLE
    result: Optional[AnalysisResult] = None
    analysis_id: Optional[str] = None


class AnalysisService:
    """Runs one resume analysis against Gemini and stores the result"""

    def __init__(self, gemini: GeminiClient, store: Optional[AnalysisStore] = None):
        self.gemini = gemini
        self.store = store

    async def analyze(self, resume_text: Optional[str], career_goal: Optional[str], user_id: Optional[str] = None) -> AnalysisRun:
        """
        Raises:
            InvalidRequest: resume_text or career_goal is empty (provider not called)
            AnalysisFailed: the provider call failed; cause attached
        """
        if not resume_text or not career_goal:
            raise InvalidRequest("resumeText and careerGoal are required.")

        run = AnalysisRun()
        run.state = AnalysisState.AWAITING_PROVIDER
        logger.info(
            f"[analyze] careerGoal=\"{career_goal}\" textLength={len(resume_text)}",
            extra={"career_goal": career_goal, "text_length": len(resume_text)},
        )

        try:
            provider_result = await self.gemini.generate_structured_analysis(resume_text, career_goal)
        except Exception as e:
            run.state = AnalysisState.FAILED
            inc("analysis.failed")
            logger.error(
                f"[analyze] provider failure: {e}",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=not isinstance(e, CareerLiftError),
            )
            raise AnalysisFailed("Failed to analyze resume with Gemini.", details=describe(e)) from e

        # Server clock and request goal win over anything the provider echoed back
        run.result = provider_result.model_copy(
            update={
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "career_goal": career_goal,
            }
        )
        run.state = AnalysisState.VALIDATED
        inc("analysis.success")
        logger.info(f"[analyze] success careerGoal=\"{career_goal}\" score={run.result.resume_score}")

        if user_id and self.store is not None:
            try:
                run.analysis_id = await self.store.save(user_id, run.result)
                run.state = AnalysisState.PERSISTED
                logger.info("analysis.persisted", extra={"analysis_id": run.analysis_id, "user_id": user_id})
            except Exception as e:
                # The caller still gets the analysis
                inc("analysis.persist_failed")
                logger.warning(
                    f"[analyze] persistence failed: {e}",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )

        return run
