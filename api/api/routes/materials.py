"""API routes for course materials (blob upload/delete, removal, summaries)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from api.core.auth import (
    IdentityGateway,
    bearer_token,
    get_current_user,
    get_identity_gateway,
    require_auth,
    require_role,
)
from api.core.database import get_db
from api.core.errors import WorkflowError
from api.models.user import User, UserRole
from api.schemas.course import CourseFileResponse
from api.schemas.material import BlobDeleteResponse, FileSummaryResponse, SummarizeRequest, SummaryResponse
from api.services import course_registry, enrollment_service, summarizer
from api.services.document_extractor import PDF_MIME_TYPE, extract_text_from_pdf, is_pdf
from api.services.s3_service import ALREADY_ABSENT, get_s3_service

logger = logging.getLogger(__name__)
router = APIRouter()


class BlobDeleteRequest(BaseModel):
    url: Optional[str] = None


def _storage_or_503():
    s3_service = get_s3_service()
    if not s3_service.is_enabled():
        raise HTTPException(status_code=503, detail="File storage service is not configured")
    return s3_service


@router.post("/materials/upload", response_model=CourseFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_material(
    request: Request,
    filename: Optional[str] = Query(None),
    course_id: Optional[int] = Query(None),
    name: Optional[str] = Query(None, description="Display name, defaults to the filename"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    gateway: IdentityGateway = Depends(get_identity_gateway),
    db: Session = Depends(get_db),
):
    """
    Upload a PDF as the raw request body.

    - Stored at courses/{course_id}/materials/{uuid}_{filename}
    - Only the course's lecturer (or an admin) may upload
    - The blob is removed again if the file cannot be registered
    """
    if not filename or course_id is None:
        raise HTTPException(status_code=400, detail="Missing filename or courseId query parameter.")

    content = await request.body()
    if not content:
        raise HTTPException(status_code=400, detail="No file to upload.")

    user = get_current_user(gateway.verify(bearer_token(authorization)), db)
    logger.info(f"User {user.id} authenticated for file upload to course {course_id}")

    if "/" in filename or "\\" in filename or filename in (".", ".."):
        raise HTTPException(status_code=400, detail="Invalid filename")

    content_type = request.headers.get("content-type", "").split(";")[0].strip()
    if not is_pdf(filename, content_type, content):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    course = course_registry.get_course(db, course_id)
    course_registry.ensure_owner(course, user)

    s3_service = _storage_or_503()
    if len(content) > s3_service.max_file_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {s3_service.max_file_size_mb}MB"
        )

    if course_registry.find_file(db, course_id, filename):
        raise HTTPException(status_code=409, detail=f"A file named {filename} already exists for this course")

    s3_key = s3_service.generate_s3_key(course_id, filename)
    success, error = s3_service.upload_bytes(content, s3_key, PDF_MIME_TYPE, filename)
    if not success:
        raise HTTPException(status_code=500, detail=f"Failed to upload file: {error}")

    stored = course_registry.StoredFile(
        file_key=filename,
        name=name or filename,
        url=s3_service.public_url(s3_key),
        storage_key=s3_key,
        size=len(content),
        content_type=PDF_MIME_TYPE,
    )
    try:
        course_file = course_registry.add_file(db, course_id, stored, user)
    except WorkflowError:
        # Only this request's blob; keys are unique per upload
        s3_service.delete_file(s3_key)
        raise

    logger.info(f"Material uploaded: {course_file.file_key} for course {course_id}")
    return course_file


@router.delete("/materials/blob", response_model=BlobDeleteResponse)
def delete_blob(
    payload: BlobDeleteRequest,
    user: User = Depends(require_role(UserRole.lecturer, UserRole.admin)),
    db: Session = Depends(get_db),
):
    """Delete a stored blob by URL. A blob that is already gone is a success."""
    if not payload.url or not payload.url.strip():
        raise HTTPException(status_code=400, detail="Missing or invalid 'url' in request body.")

    s3_service = _storage_or_503()
    try:
        s3_key = s3_service.key_from_url(payload.url.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="Missing or invalid 'url' in request body.")

    # Keys look like courses/{course_id}/materials/{uuid}_{filename}
    parts = s3_key.split("/")
    if len(parts) >= 4 and parts[0] == "courses" and parts[1].isdigit():
        course = course_registry.get_course(db, int(parts[1]))
        course_registry.ensure_owner(course, user)
    elif user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="You can only manage your own courses")

    success, message = s3_service.delete_file(s3_key)
    if not success:
        raise HTTPException(status_code=500, detail="Failed to delete file.")

    if message == ALREADY_ABSENT:
        logger.warning(f"Blob not found during deletion, but proceeding: {s3_key}")
    return BlobDeleteResponse(success=True, message=message)


@router.delete("/courses/{course_id}/files/{file_key}", response_model=BlobDeleteResponse)
def remove_course_file(
    course_id: int,
    file_key: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Remove a material from a course.

    - Deletes the blob first, then the metadata
    - If the blob cannot be deleted the file stays listed
    """
    _, message = course_registry.remove_file(db, course_id, file_key, user, get_s3_service())
    return BlobDeleteResponse(success=True, message=message)


@router.post("/materials/summarize", response_model=SummaryResponse)
def summarize(payload: SummarizeRequest, subject: str = Depends(require_auth)):
    """Summarize arbitrary educational text."""
    if not payload.text or not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required for summarization.")
    return SummaryResponse(summary=summarizer.summarize_text(payload.text))


@router.post("/courses/{course_id}/files/{file_key}/summary", response_model=FileSummaryResponse)
def summarize_course_file(
    course_id: int,
    file_key: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Extract a stored PDF's text and summarize it."""
    course = course_registry.get_course(db, course_id)
    enrollment_service.ensure_course_access(db, course, user)
    course_file = course_registry.get_file(db, course_id, file_key)

    content, error = _storage_or_503().download_file(course_file.storage_key)
    if content is None:
        if error == ALREADY_ABSENT:
            raise HTTPException(status_code=404, detail="File content not found in storage")
        raise HTTPException(status_code=500, detail=f"Failed to download file: {error}")

    try:
        text = extract_text_from_pdf(content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from this file")

    summary = summarizer.summarize_text(text)
    return FileSummaryResponse(file_key=file_key, text=text, summary=summary)
