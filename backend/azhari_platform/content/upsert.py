"""
Content create/edit.

A request is one of two variants: CreateContent (a new row for an uploaded
file) or EditContent (title/description of an existing row). The uploaded
bytes themselves go straight to object storage; only the public URL is
stored here.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.content import Content, ContentType
from azhari_platform.platform.errors import NotFoundError, UpstreamUnavailableError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_OBJECT_MARKER = "/storage/v1/object/public/"


@dataclass(frozen=True)
class CreateContent:
    subject_id: str
    type: str
    title: str
    file_url: str
    description: Optional[str] = None
    uploaded_by: Optional[str] = None


@dataclass(frozen=True)
class EditContent:
    content_id: str
    title: str
    description: Optional[str] = None


ContentUpsert = Union[CreateContent, EditContent]


def bucket_for_type(content_type: str) -> str:
    if content_type == ContentType.VIDEO.value:
        return "videos"
    if content_type == ContentType.EXAM.value:
        return "exams"
    return "books"


def build_object_path(subject_id: str, filename: str, timestamp_ms: Optional[int] = None, token: Optional[str] = None) -> str:
    """<subject_id>/<ms>_<token>_<sanitised filename>"""
    safe_base = re.sub(r"\s+", "_", filename or "")
    safe_base = re.sub(r"[^a-zA-Z0-9_\-.]", "", safe_base)
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    token = token or uuid.uuid4().hex[:6]
    return f"{subject_id}/{stamp}_{token}_{safe_base}"


def storage_path_from_public_url(file_url: str) -> Optional[Tuple[str, str]]:
    """(bucket, object path) from a public storage URL, or None."""
    idx = (file_url or "").find(PUBLIC_OBJECT_MARKER)
    if idx == -1:
        return None
    bucket, _, path = file_url[idx + len(PUBLIC_OBJECT_MARKER):].partition("/")
    if not bucket or not path:
        return None
    return bucket, path


class ContentService:
    def __init__(self, db_session: Session):
        self.db = db_session

    def upsert(self, request: ContentUpsert) -> Content:
        if not (request.title or "").strip():
            raise ValidationError("Title is required", field_errors={"title": "يرجى إدخال عنوان"})

        if isinstance(request, CreateContent):
            return self._create(request)
        if isinstance(request, EditContent):
            return self._edit(request)
        raise TypeError(f"Unsupported content request: {type(request).__name__}")

    def _create(self, request: CreateContent) -> Content:
        errors = {}
        if request.type not in {t.value for t in ContentType}:
            errors["type"] = "نوع المحتوى غير معروف"
        if not (request.file_url or "").strip():
            errors["file"] = "يرجى اختيار ملف"
        if errors:
            raise ValidationError("Invalid content", field_errors=errors)

        content = Content(
            subject_id=request.subject_id,
            type=request.type,
            title=request.title.strip(),
            file_url=request.file_url,
            description=(request.description or "").strip() or None,
            uploaded_by=request.uploaded_by,
        )
        self.db.add(content)
        self._commit()
        logger.info(
            "Content created",
            extra={"content_id": content.id, "subject_id": request.subject_id, "type": request.type},
        )
        return content

    def _edit(self, request: EditContent) -> Content:
        try:
            content = self.db.query(Content).filter(Content.id == request.content_id).first()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load content", upstream="database") from e
        if content is None:
            raise NotFoundError("Content", request.content_id)

        content.title = request.title.strip()
        content.description = (request.description or "").strip() or None
        self._commit()
        logger.info("Content edited", extra={"content_id": content.id})
        return content

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Content write failed", extra={"error": str(e)})
            raise UpstreamUnavailableError("Could not save content", upstream="database") from e

    def list_for_subject(self, subject_id: str) -> List[Content]:
        try:
            return (
                self.db.query(Content)
                .filter(Content.subject_id == subject_id, Content.is_active.is_(True))
                .order_by(Content.created_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load content", upstream="database") from e

    def deactivate(self, content_id: str) -> Tuple[Content, Optional[Tuple[str, str]]]:
        """Hide the row; returns it with the (bucket, path) of its stored object, if any."""
        try:
            content = self.db.query(Content).filter(Content.id == content_id).first()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load content", upstream="database") from e
        if content is None:
            raise NotFoundError("Content", content_id)

        content.is_active = False
        self._commit()
        logger.info("Content removed", extra={"content_id": content_id})
        return content, storage_path_from_public_url(content.file_url)
