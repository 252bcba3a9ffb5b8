import logging

from fastapi import APIRouter, Depends, status
from typing import List

from coursemarket.api.dependencies import get_current_identity, get_storage
from coursemarket.core.exceptions import InvalidPayload
from coursemarket.schemas.course import CourseResponse, EnrollmentCreate, EnrollmentResponse
from coursemarket.schemas.user import Identity
from coursemarket.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/my-courses", response_model=List[CourseResponse])
def read_my_courses(
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    """Courses the caller is enrolled in"""
    courses = storage.list_enrolled_courses(identity.id)
    response_courses = []
    for course in courses:
        course_dict = CourseResponse.model_validate(course)
        course_dict.enrolled = True
        response_courses.append(course_dict)
    return response_courses


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll(
    payload: EnrollmentCreate,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    if not payload.course_id:
        raise InvalidPayload("Course ID is required")

    enrollment = storage.enroll_user(identity.id, payload.course_id)
    logger.info(f"User {identity.id} enrolled in course {payload.course_id}")
    return enrollment
