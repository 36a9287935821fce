"""
Storage utilities.

Supabase Storage operations for durable copies of generated assets.
"""

import asyncio
import mimetypes
from typing import Optional, Dict, Any, Callable
from supabase import create_client
from shared.config import settings
from shared.errors import RetryableError, ConfigError, StorageError, ValidationError
from shared.retry import retry_with_backoff
from shared.logging import get_logger

logger = get_logger("storage")

# Default file size limits per asset kind (in bytes)
DEFAULT_SIZE_LIMITS: Dict[str, int] = {
    "video": 200 * 1024 * 1024,  # 200MB
    "audio": 20 * 1024 * 1024,  # 20MB
    "image": 10 * 1024 * 1024,  # 10MB
}


class StorageClient:
    """Supabase Storage client for file operations."""

    def __init__(self, bucket: Optional[str] = None, size_limits: Optional[Dict[str, int]] = None):
        """
        Initialize storage client.

        Args:
            bucket: Bucket holding generated assets (defaults to settings)
            size_limits: Optional dict of asset kind to max file size in bytes
        """
        if not settings.supabase_enabled:
            raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required for durable storage")
        try:
            self.client = create_client(
                settings.supabase_url,
                settings.supabase_service_key
            )
            self.storage = self.client.storage
        except Exception as e:
            raise ConfigError(f"Failed to initialize storage client: {str(e)}") from e
        self.bucket = bucket or settings.storage_bucket
        self.size_limits = size_limits or DEFAULT_SIZE_LIMITS.copy()

    async def _execute_sync(self, func: Callable[[], Any]) -> Any:
        """Execute a synchronous Supabase storage operation in an async context."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    @staticmethod
    def _detect_content_type(path: str, default: Optional[str] = None) -> str:
        content_type, _ = mimetypes.guess_type(path)
        if content_type:
            return content_type
        return default or "application/octet-stream"

    async def upload_file(
        self,
        path: str,
        file_data: bytes,
        kind: str = "video",
        content_type: Optional[str] = None
    ) -> str:
        """
        Upload a file to Supabase Storage, overwriting any previous copy.

        Args:
            path: File path in bucket
            file_data: File data as bytes
            kind: Asset kind ("video", "audio", "image") for size validation
            content_type: Content type (auto-detected if not provided)

        Returns:
            Public URL of uploaded file

        Raises:
            StorageError: If upload still fails after retries
            ValidationError: If file size exceeds limit
        """
        max_size = self.size_limits.get(kind, 10 * 1024 * 1024)
        if len(file_data) > max_size:
            raise ValidationError(
                f"File size ({len(file_data) / (1024 * 1024):.2f} MB) exceeds maximum of "
                f"{max_size / (1024 * 1024):.2f} MB for {kind} assets"
            )
        content_type = content_type or self._detect_content_type(path)

        try:
            file_url = await self._put(path, file_data, content_type)
        except RetryableError as e:
            raise StorageError(f"Upload to {self.bucket}/{path} failed after retries: {e}") from e

        logger.info(
            f"Uploaded file to {self.bucket}/{path}",
            extra={"bucket": self.bucket, "path": path, "size": len(file_data)}
        )
        return file_url

    @retry_with_backoff(max_attempts=3, base_delay=2)
    async def _put(self, path: str, file_data: bytes, content_type: str) -> str:
        try:
            def _upload():
                return self.storage.from_(self.bucket).upload(
                    path=path,
                    file=file_data,
                    file_options={"content-type": content_type, "upsert": "true"}
                )

            await self._execute_sync(_upload)
            file_url = await self._execute_sync(
                lambda: self.storage.from_(self.bucket).get_public_url(path)
            )
        except Exception as e:
            logger.error(
                f"Failed to upload file to {self.bucket}/{path}: {str(e)}",
                extra={"bucket": self.bucket, "path": path, "error": str(e)}
            )
            raise RetryableError(f"Failed to upload file: {str(e)}") from e
        return file_url
