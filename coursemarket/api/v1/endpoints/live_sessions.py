from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from coursemarket.api.dependencies import get_current_identity, get_storage, require_role
from coursemarket.core.exceptions import CourseNotFound, InvalidPayload, LiveSessionNotFound
from coursemarket.models.user import UserRole
from coursemarket.schemas.live_session import LiveSessionCreate, LiveSessionResponse
from coursemarket.schemas.user import Identity
from coursemarket.storage import Storage

router = APIRouter()


@router.post("", response_model=LiveSessionResponse, status_code=status.HTTP_201_CREATED)
def create_live_session(
    live_session: LiveSessionCreate,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_role(UserRole.INSTRUCTOR))
):
    """Schedule a live session for an existing course"""
    if not storage.get_course(live_session.course_id):
        raise CourseNotFound()

    return storage.create_live_session(**live_session.model_dump())


@router.get("/{session_id}", response_model=LiveSessionResponse)
def read_live_session(
    session_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    session = storage.get_live_session(session_id)
    if not session:
        raise LiveSessionNotFound()
    return session


@router.get("", response_model=List[LiveSessionResponse])
def read_live_sessions(
    course_id: Optional[int] = Query(None, alias="courseId"),
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(get_current_identity)
):
    """Sessions of one course, earliest first"""
    if not course_id:
        raise InvalidPayload("Course ID is required")

    if not storage.get_course(course_id):
        raise CourseNotFound()

    return storage.list_live_sessions(course_id)
