"""
NextShop Catalog — Image Upload Storage
=========================================

What:  Validates uploaded product images and writes them to the uploads directory.
How:   Extension and size checks, then an async write under a generated name.
Who:   Called by ProductService when the deployment runs in `upload` image mode.
When:  After name/price validation, before the product document is inserted.

Naming scheme:
    <epoch milliseconds>-<8 hex chars><original extension>
    e.g. 1718035200123-9f1c2b7a.png

    The timestamp keeps names roughly chronological; the random token keeps
    two uploads within the same millisecond distinct. No part of the client's
    filename other than its extension reaches the file system.

The stored filename is what the product document records; the file is
served back at GET /uploads/<filename>.
"""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from nextshop.config import settings
from nextshop.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Manages upload validation, storage, and cleanup.

    Lifecycle of an uploaded image:
        1. validate_extension() rejects non-image names
        2. validate_size() rejects empty or oversized files
        3. store_file() writes the bytes under a generated name
        4. cleanup_file() removes it again if the insert fails
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default uploads directory (used in tests).
                          If None, uses settings.uploads_dir.
        """
        self.storage_root = Path(storage_root or settings.uploads_dir).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Check the extension against ALLOWED_EXTENSIONS.

        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Image type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against settings.max_file_size.

        The reported size (from the multipart part) is checked first, then the
        actual byte count, since clients can misreport either.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="Uploaded image is empty.",
                field="image",
            )

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"Image size exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"Image size ({actual_size / (1024 * 1024):.1f}MB) is too large; maximum is {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Returns: Tuple of (absolute_path, filename).
        """
        filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"
        return self.storage_root / filename, filename

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, filename).
        Raises:  FileStorageError if the directory or the file cannot be written.
        """
        absolute_path, filename = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", filename, len(content))
            return str(absolute_path), filename

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file after a failed insert. Best-effort: a missing
        file is ignored and OS errors are only logged.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete validation and storage pipeline.

        Returns: Tuple of (absolute_path, stored_filename).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)


file_service = FileService()
