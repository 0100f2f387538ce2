"""
Subject content routes.

Students:
- GET    /api/subjects/{subject_id}/content (paywalled)
Teachers and admins:
- POST   /api/content/upload-path
- POST   /api/content
- PATCH  /api/content/{content_id}
- DELETE /api/content/{content_id}
"""

import logging

from fastapi import APIRouter, Depends

from azhari_platform.api.dependencies.auth import get_current_session, require_roles
from azhari_platform.api.schemas.content import (
    ContentListResponse,
    ContentResponse,
    CreateContentRequest,
    EditContentRequest,
    RemoveContentResponse,
    UploadPathRequest,
    UploadPathResponse,
)
from azhari_platform.content.upsert import (
    ContentService,
    CreateContent,
    EditContent,
    bucket_for_type,
    build_object_path,
)
from azhari_platform.database.session import get_db_session
from azhari_platform.entitlements.service import EntitlementService
from azhari_platform.platform.session import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])

require_uploader = require_roles("teacher", "admin")


@router.get("/api/subjects/{subject_id}/content", response_model=ContentListResponse)
async def list_subject_content(
    subject_id: str,
    session: Session = Depends(get_current_session),
    db_session=Depends(get_db_session),
):
    EntitlementService(db_session).check_access(session, subject_id)
    rows = ContentService(db_session).list_for_subject(subject_id)
    return ContentListResponse(content=[ContentResponse.model_validate(r) for r in rows])


@router.post("/api/content/upload-path", response_model=UploadPathResponse)
async def get_upload_path(
    body: UploadPathRequest,
    session: Session = Depends(require_uploader),
):
    return UploadPathResponse(
        bucket=bucket_for_type(body.type),
        path=build_object_path(body.subject_id, body.filename),
    )


@router.post("/api/content", response_model=ContentResponse, status_code=201)
async def create_content(
    body: CreateContentRequest,
    session: Session = Depends(require_uploader),
    db_session=Depends(get_db_session),
):
    content = ContentService(db_session).upsert(
        CreateContent(
            subject_id=body.subject_id,
            type=body.type,
            title=body.title,
            file_url=body.file_url,
            description=body.description,
            uploaded_by=session.user_id,
        )
    )
    return ContentResponse.model_validate(content)


@router.patch("/api/content/{content_id}", response_model=ContentResponse)
async def edit_content(
    content_id: str,
    body: EditContentRequest,
    session: Session = Depends(require_uploader),
    db_session=Depends(get_db_session),
):
    content = ContentService(db_session).upsert(
        EditContent(content_id=content_id, title=body.title, description=body.description)
    )
    return ContentResponse.model_validate(content)


@router.delete("/api/content/{content_id}", response_model=RemoveContentResponse)
async def remove_content(
    content_id: str,
    session: Session = Depends(require_uploader),
    db_session=Depends(get_db_session),
):
    _, location = ContentService(db_session).deactivate(content_id)
    storage = UploadPathResponse(bucket=location[0], path=location[1]) if location else None
    return RemoveContentResponse(success=True, storage=storage)
