from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime, timezone
import uuid
from careerlift.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class CareerAnalysis(Base):
    """
    One stored analysis result.
    Rows are insert-only: a new analysis always creates a new row.
    """
    __tablename__ = "career_analyses"

    id = Column(String(32), primary_key=True, default=_new_id)
    app_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    career_goal = Column(String, nullable=False)
    resume_score = Column(Integer)

    # Full AnalysisResult body as returned to the client
    payload = Column(JSON, nullable=False)

    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    @property
    def collection_path(self) -> str:
        return f"/artifacts/{self.app_id}/users/{self.user_id}/career_analyses"
