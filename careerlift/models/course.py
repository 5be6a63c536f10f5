from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from careerlift.database import Base


class Course(Base):
    """User-curated course catalog entry"""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    level = Column(String, nullable=False)
    description = Column(Text)
    url = Column(String)
    created_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "level": self.level,
            "description": self.description,
            "url": self.url,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
