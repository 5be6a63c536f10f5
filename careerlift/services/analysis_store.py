"""
Per-user analysis records.

Insert-only: each analysis becomes a new row, nothing is updated in place.
"""
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careerlift.models.career_analysis import CareerAnalysis
from careerlift.schemas.analysis import AnalysisResult
from careerlift.utils.logger import get_logger

logger = get_logger("store")


class AnalysisStore:
    """Reads and writes CareerAnalysis rows through a session factory"""

    def __init__(self, session_factory: Callable[[], AsyncSession], app_id: str):
        self.session_factory = session_factory
        self.app_id = app_id

    async def save(self, user_id: str, analysis: AnalysisResult) -> str:
        """Insert a new record and return its id."""
        payload = analysis.to_response()
        record = CareerAnalysis(
            app_id=self.app_id,
            user_id=user_id,
            career_goal=analysis.career_goal or "",
            resume_score=analysis.resume_score,
            payload=payload,
            timestamp=_parse_timestamp(analysis.timestamp),
        )
        async with self.session_factory() as session:
            session.add(record)
            await session.commit()
            logger.info(f"Saved analysis {record.id} to {record.collection_path}", extra={"analysis_id": record.id})
            return record.id

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[dict]:
        """Newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(CareerAnalysis)
                .where(CareerAnalysis.app_id == self.app_id, CareerAnalysis.user_id == user_id)
                .order_by(CareerAnalysis.timestamp.desc())
                .limit(limit)
            )
            return [{"id": r.id, **r.payload} for r in result.scalars().all()]

    async def latest_for_user(self, user_id: str) -> Optional[dict]:
        rows = await self.list_for_user(user_id, limit=1)
        return rows[0] if rows else None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
