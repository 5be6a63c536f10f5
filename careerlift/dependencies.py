"""FastAPI dependency providers for provider clients, stores and services."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from careerlift.config import get_settings
from careerlift.database import AsyncSessionLocal, get_db
from careerlift.services.analysis_service import AnalysisService
from careerlift.services.analysis_store import AnalysisStore
from careerlift.services.course_repository import CourseRepository, SqlCourseRepository
from careerlift.services.gemini_client import GeminiClient
from careerlift.services.learning_resources_service import LearningResourcesService
from careerlift.services.vertex_search import VertexCourseSearch


@lru_cache()
def get_gemini_client() -> GeminiClient:
    settings = get_settings()
    return GeminiClient(settings.gemini_config(), test_mode=settings.test_mode)


@lru_cache()
def get_vertex_search() -> VertexCourseSearch:
    settings = get_settings()
    # TEST_MODE keeps the learning-resources path off the network entirely
    return VertexCourseSearch(None if settings.test_mode else settings.vertex_config())


@lru_cache()
def get_analysis_store() -> AnalysisStore:
    return AnalysisStore(AsyncSessionLocal, app_id=get_settings().app_id)


def get_analysis_service(
    gemini: GeminiClient = Depends(get_gemini_client),
    store: AnalysisStore = Depends(get_analysis_store),
) -> AnalysisService:
    return AnalysisService(gemini, store)


def get_learning_service(
    gemini: GeminiClient = Depends(get_gemini_client),
    vertex: VertexCourseSearch = Depends(get_vertex_search),
) -> LearningResourcesService:
    return LearningResourcesService(gemini, vertex)


def get_course_repository(db: AsyncSession = Depends(get_db)) -> CourseRepository:
    return SqlCourseRepository(db)
