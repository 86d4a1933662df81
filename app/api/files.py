"""Image upload URLs for cover and in-content images."""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.core.aws import S3Service, resolve_image_url
from app.core.dependencies import get_current_user

router = APIRouter(prefix="/files", tags=["Files"])

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class UploadUrlRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=200)
    content_type: str = "image/jpeg"
    purpose: Literal["cover", "content"] = "cover"


class UploadUrlResponse(BaseModel):
    upload_url: str
    file_key: str
    view_url: Optional[str] = None
    expires_in: int = 300


def build_file_key(user_id: str, purpose: str, filename: str) -> str:
    """uploads/{purpose}/{user_id}/{timestamp}_{short uuid}_{filename}"""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    clean_filename = filename.replace(" ", "_").replace("/", "_")
    return f"uploads/{purpose}/{user_id}/{timestamp}_{str(uuid.uuid4())[:8]}_{clean_filename}"


@router.post("/upload-url", response_model=UploadUrlResponse)
async def get_upload_url(
    request: UploadUrlRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Get a presigned URL to upload an image directly to S3 (PUT).

    Store the returned `file_key` as the article's `cover_image_id`, or
    use `view_url` inside an image block.
    """
    if request.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {request.content_type}")

    file_key = build_file_key(current_user["id"], request.purpose, request.filename)
    try:
        url = S3Service().generate_presigned_put_url(
            object_name=file_key,
            file_type=request.content_type
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Image upload failed: {e}. Check storage configuration.")

    return UploadUrlResponse(
        upload_url=url,
        file_key=file_key,
        view_url=resolve_image_url(file_key),
    )
