from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from typing import Optional

from coursemarket.api.dependencies import get_storage, require_role
from coursemarket.core.exceptions import CourseNotFound, InvalidPayload
from coursemarket.models.user import UserRole
from coursemarket.schemas.content import ContentResponse
from coursemarket.schemas.user import Identity
from coursemarket.services.file_service import ObjectStorage, get_object_storage, store_course_file
from coursemarket.storage import Storage

router = APIRouter()


@router.post("/{course_id}", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def upload_course_file(
    course_id: int,
    file: Optional[UploadFile] = File(None),
    storage: Storage = Depends(get_storage),
    object_storage: ObjectStorage = Depends(get_object_storage),
    identity: Identity = Depends(require_role(UserRole.INSTRUCTOR))
):
    """Upload a PDF, video or image to a course and record it as content"""
    if file is None:
        raise InvalidPayload("No file uploaded")

    # Storage is synchronous, keep it off the event loop
    if not await run_in_threadpool(storage.get_course, course_id):
        raise CourseNotFound()

    file_url = await store_course_file(object_storage, file, course_id)

    return await run_in_threadpool(
        storage.add_content, course_id=course_id, type=file.content_type, url=file_url
    )
