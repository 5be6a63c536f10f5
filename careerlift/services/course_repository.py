"""
Course catalog repository.

Routes depend on the CourseRepository protocol; the SQLAlchemy implementation
is the one wired in by default. Concurrent writers are last-writer-wins.
"""
from typing import List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careerlift.models.course import Course

UPDATABLE_FIELDS = ("title", "category", "level", "description", "url")


class CourseRepository(Protocol):
    async def create(self, data: dict) -> dict: ...

    async def list(self) -> List[dict]: ...

    async def update(self, course_id: int, changes: dict) -> Optional[dict]: ...

    async def delete(self, course_id: int) -> bool: ...


class SqlCourseRepository:
    """CourseRepository backed by the application database"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: dict) -> dict:
        course = Course(
            title=data["title"],
            category=data["category"],
            level=data["level"],
            description=data.get("description"),
            url=data.get("url"),
            created_by=data.get("created_by"),
        )
        self.db.add(course)
        await self.db.commit()
        await self.db.refresh(course)
        return course.to_dict()

    async def list(self) -> List[dict]:
        result = await self.db.execute(select(Course).order_by(Course.id))
        return [c.to_dict() for c in result.scalars().all()]

    async def update(self, course_id: int, changes: dict) -> Optional[dict]:
        """Apply non-empty values only; falsy values leave the field unchanged."""
        course = await self.db.get(Course, course_id)
        if course is None:
            return None
        for field in UPDATABLE_FIELDS:
            value = changes.get(field)
            if value:
                setattr(course, field, value)
        await self.db.commit()
        await self.db.refresh(course)
        return course.to_dict()

    async def delete(self, course_id: int) -> bool:
        course = await self.db.get(Course, course_id)
        if course is None:
            return False
        await self.db.delete(course)
        await self.db.commit()
        return True
