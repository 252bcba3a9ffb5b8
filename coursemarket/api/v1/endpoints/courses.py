import logging

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Iterable, List, Optional

from coursemarket.api.dependencies import get_current_identity, get_storage, require_role
from coursemarket.core.exceptions import CourseNotFound, InvalidPayload
from coursemarket.models.course import Course
from coursemarket.models.user import UserRole
from coursemarket.schemas.content import ContentResponse
from coursemarket.schemas.course import (
    CourseCreate,
    CourseFilters,
    CourseResponse,
    CourseUpdate,
    EnrollmentResponse,
)
from coursemarket.schemas.user import Identity
from coursemarket.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(course: Course, enrolled_ids: Iterable[int]) -> CourseResponse:
    course_dict = CourseResponse.model_validate(course)
    course_dict.enrolled = course.id in enrolled_ids
    return course_dict


@router.get("", response_model=List[CourseResponse])
def read_courses(
    title: Optional[str] = None,
    min_price: Optional[int] = Query(None, alias="minPrice"),
    max_price: Optional[int] = Query(None, alias="maxPrice"),
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    """List courses, optionally filtered by title and price range"""
    filters = CourseFilters(title=title or None, min_price=min_price, max_price=max_price)
    courses = storage.list_courses(filters)
    enrolled_ids = storage.enrolled_course_ids(identity.id)
    return [_to_response(course, enrolled_ids) for course in courses]


@router.get("/{course_id}", response_model=CourseResponse)
def read_course(
    course_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    course = storage.get_course(course_id)
    if not course:
        raise CourseNotFound()
    return _to_response(course, storage.enrolled_course_ids(identity.id))


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    course: CourseCreate,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_role(UserRole.INSTRUCTOR))
):
    """Create a course (instructors only). The caller owns it unless another instructor is named."""
    data = course.model_dump()
    if data["instructor_id"] is None:
        data["instructor_id"] = identity.id
    elif not storage.get_user(data["instructor_id"]):
        raise InvalidPayload("Invalid course data")

    db_course = storage.create_course(data)
    logger.info(f"Course {db_course.id} created by user {identity.id}")
    return _to_response(db_course, ())


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    course_update: CourseUpdate,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_role(UserRole.INSTRUCTOR))
):
    changes = course_update.model_dump(exclude_unset=True)

    # Only instructor_id and price may be cleared
    required = ("title", "description", "image_url", "duration", "difficulty")
    if any(field in changes and changes[field] is None for field in required):
        raise InvalidPayload("Invalid course data")

    updated_course = storage.update_course(course_id, changes)
    return _to_response(updated_course, storage.enrolled_course_ids(identity.id))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_role(UserRole.INSTRUCTOR))
):
    storage.delete_course(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{course_id}/enroll", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    course_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    """Enroll the caller in a course (path form used by the web client)"""
    enrollment = storage.enroll_user(identity.id, course_id)
    logger.info(f"User {identity.id} enrolled in course {course_id}")
    return enrollment


@router.get("/{course_id}/content", response_model=List[ContentResponse])
def read_course_content(
    course_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    return storage.list_course_content(course_id)
