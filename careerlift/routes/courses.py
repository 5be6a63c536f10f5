"""Course catalog CRUD"""
from fastapi import APIRouter, Depends, HTTPException

from careerlift.dependencies import get_course_repository
from careerlift.errors import InvalidRequest
from careerlift.schemas.course import CourseCreate, CourseUpdate
from careerlift.services.course_repository import CourseRepository
from careerlift.utils.logger import get_logger

router = APIRouter()
logger = get_logger("routes.courses")


@router.post("/courses")
async def create_course(
    body: CourseCreate,
    repo: CourseRepository = Depends(get_course_repository),
):
    if not body.title or not body.category or not body.level:
        raise InvalidRequest("Missing required fields")

    course = await repo.create(body.model_dump())
    logger.info(f"Course created: {course['id']}")
    return {"message": "Course created successfully", "course": course}


@router.get("/courses")
async def list_courses(repo: CourseRepository = Depends(get_course_repository)):
    return await repo.list()


@router.put("/courses/{course_id}")
async def update_course(
    course_id: int,
    body: CourseUpdate,
    repo: CourseRepository = Depends(get_course_repository),
):
    course = await repo.update(course_id, body.model_dump())
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"message": "Course updated successfully", "course": course}


@router.delete("/courses/{course_id}")
async def delete_course(
    course_id: int,
    repo: CourseRepository = Depends(get_course_repository),
):
    if not await repo.delete(course_id):
        raise HTTPException(status_code=404, detail="Course not found")
    return {"message": "Course deleted successfully", "id": course_id}
