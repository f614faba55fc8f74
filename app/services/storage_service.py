"""Storage service for handling Supabase storage operations."""

import asyncio
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import StorageError
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Service for managing evidence objects in Supabase storage."""

    def __init__(
        self,
        url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.url = (url if url is not None else settings.supabase_url).rstrip("/")
        self.service_role_key = (
            service_role_key if service_role_key is not None else settings.supabase_service_role_key
        )
        self.timeout = timeout or settings.http_timeout
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    async def upload_file(
        self,
        file: Any,
        bucket: str,
        path: str,
        content_type: str = "application/octet-stream",
    ) -> Dict[str, Any]:
        """Upload a file to Supabase storage.

        Args:
            file: Raw bytes or a file-like object (sync or async ``read``)
            bucket: Target bucket name.
            path: Target path within the bucket.
            content_type: MIME type sent with the object

        Returns:
            Dict containing the upload result.

        Raises:
            StorageError: If the upload fails.
        """
        upload_url = f"{self.base_api_url}/object/{bucket}/{path}"

        if hasattr(file, "read"):
            content = file.read()
            if asyncio.iscoroutine(content):
                content = await content
        else:
            content = file

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    upload_url,
                    headers={**self.headers, "Content-Type": content_type},
                    content=content,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise StorageError(f"Upload failed: {response.text}")

        return response.json()

    async def download_file(self, bucket: str, path: str) -> bytes:
        """Download an object's raw bytes.

        Args:
            bucket: Bucket name.
            path: Object path.

        Returns:
            The object content.

        Raises:
            StorageError: If the object cannot be read.
        """
        download_url = f"{self.base_api_url}/object/{bucket}/{path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    download_url,
                    headers=self.headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error downloading file from Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage download error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                "Failed to download file from Supabase",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise StorageError(f"Download failed with status {response.status_code}")

        return response.content

    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of an object in a public bucket."""
        return f"{self.base_api_url}/object/public/{bucket}/{path}"
