"""
NextShop Catalog — Uploaded Image Route
=========================================

What:  GET /uploads/{filename} serves product images stored by FileService.
How:   Resolves the name under the uploads directory and streams the file.

The resolved path must stay inside the uploads directory; anything that
escapes it (../ sequences, absolute paths) is rejected with 400.
"""

import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from nextshop.exceptions import NotFoundError, ValidationError
from nextshop.schemas.product import ErrorResponse
from nextshop.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{file_path:path}",
    responses={
        200: {"description": "Raw image bytes"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded product image",
)
async def serve_upload(file_path: str) -> FileResponse:
    storage_root = file_service.storage_root
    full_path = (storage_root / file_path).resolve()

    if full_path != storage_root and storage_root not in full_path.parents:
        raise ValidationError(message="Invalid file path", context={"path": file_path})

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=Path(file_path).name)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
