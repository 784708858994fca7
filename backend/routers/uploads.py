import asyncio
import logging
from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from errors import NotFound, ValidationError
from models.pdf_uploads import PdfUpload
from schemas.uploads import GenerateUploadUrlRequest, SaveFileRequest
from services.credential_issuer import issue_credentials
from services.object_store import get_object_store
from services.rate_limiter import enforce_rate_limit
from services.upload_repository import UploadRepository, get_upload_repository
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["uploads"],
    dependencies=[Depends(enforce_rate_limit)],
)

_RECORD_FIELDS = (
    "id",
    "user_id",
    "category",
    "original_filename",
    "stored_filename",
    "cloudinary_url",
    "cloudinary_public_id",
    "file_size",
    "mime_type",
    "upload_status",
    "created_at",
    "updated_at",
)


def _json_safe(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _serialize_record(record: PdfUpload) -> dict:
    return {name: _json_safe(getattr(record, name)) for name in _RECORD_FIELDS}


@router.post("/generate-upload-url")
async def generate_upload_url(
    payload: GenerateUploadUrlRequest,
    repo: UploadRepository = Depends(get_upload_repository),
    store=Depends(get_object_store),
    settings: Settings = Depends(get_settings),
):
    bundle = await issue_credentials(
        repo,
        store,
        settings,
        filename=payload.filename,
        category=payload.category,
        user_id=payload.userId,
        user_email=payload.userEmail,
        action=payload.action,
    )
    return {
        "success": True,
        "message": "Signed upload URL generated successfully",
        "data": bundle.to_response(),
    }


@router.post("/save-file", status_code=201)
def save_file(
    payload: SaveFileRequest,
    repo: UploadRepository = Depends(get_upload_repository),
):
    record = repo.create(
        user_id=payload.userId,
        category=payload.category,
        original_filename=payload.original_filename,
        cloudinary_url=payload.cloudinary_url,
        cloudinary_public_id=payload.cloudinary_public_id,
        file_size=payload.file_size or 0,
    )
    logger.info("SAVE: user=%s category=%s public_id=%s", record.user_id, record.category, record.stored_filename)

    return {
        "success": True,
        "message": "File record saved successfully",
        "data": {
            "id": record.id,
            "stored_filename": record.stored_filename,
            "cloudinary_url": record.cloudinary_url,
            "category": record.category,
            "upload_status": record.upload_status,
            "created_at": _json_safe(record.created_at),
        },
    }


@router.get("/files")
def get_files(
    userId: str | None = Query(None),
    status: str | None = Query(None),
    category: str | None = Query(None),
    repo: UploadRepository = Depends(get_upload_repository),
):
    if not userId:
        raise ValidationError("User ID is required")

    records = repo.list_for_user(userId, status=status, category=category)
    return {
        "success": True,
        "message": "Files retrieved successfully",
        "data": [_serialize_record(r) for r in records],
    }


@router.delete("/files/{file_id}")
async def delete_file(
    file_id: str,
    repo: UploadRepository = Depends(get_upload_repository),
    store=Depends(get_object_store),
):
    record = await asyncio.to_thread(repo.get, file_id)
    if record is None:
        raise NotFound("File not found")

    await asyncio.to_thread(store.destroy, record.cloudinary_public_id)
    await asyncio.to_thread(repo.delete, file_id)

    logger.info("DELETE: id=%s public_id=%s", file_id, record.cloudinary_public_id)
    return {"success": True, "message": "File deleted successfully"}
