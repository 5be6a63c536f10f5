"""Learning-resource routes: live course lookup and the bundled catalog."""
from typing import Optional

from fastapi import APIRouter, Depends

from careerlift.dependencies import get_learning_service
from careerlift.errors import InvalidRequest
from careerlift.schemas.learning import ExternalCoursesRequest
from careerlift.services.learning_resources_service import LearningResourcesService
from careerlift.services.static_catalog import RECOMMENDATIONS_DB

router = APIRouter()


@router.post("/courses/external")
async def external_courses(
    body: ExternalCoursesRequest,
    service: LearningResourcesService = Depends(get_learning_service),
):
    """
    Courses and opportunities for a role and its skill gaps.

    Always 200 once role is present; provider failures degrade to the static catalog.
    """
    result = await service.resolve(body.role, body.skills)
    return result.to_response()


@router.get("/recommendations/details")
async def recommendation_details(type: Optional[str] = None):
    if not type or type not in RECOMMENDATIONS_DB:
        raise InvalidRequest("Invalid type parameter.")
    return {"type": type, "items": RECOMMENDATIONS_DB[type]}
