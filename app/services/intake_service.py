import re
import time
from typing import Optional
from uuid import UUID

from app.core.exceptions import ValidationError
from app.database.models import EvidenceUpload
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.services.base_service import BaseService
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.\-]")


def safe_file_name(file_name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9.-]`` with ``_``."""
    return _UNSAFE_CHARS.sub("_", file_name)


def build_storage_path(file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Object path ``{timestamp}_{safe_name}`` inside the evidence bucket."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{timestamp_ms}_{safe_file_name(file_name)}"


class DocumentIntakeService(BaseService):
    """Stores submitted evidence bytes and records the upload row.

    The object is written first; the metadata row only exists once the bytes
    are in storage.
    """

    def __init__(
        self,
        storage: StorageService,
        uploads: EvidenceUploadRepository,
        bucket: str = "evidence",
    ):
        super().__init__(repository=uploads)
        self.storage = storage
        self.uploads = uploads
        self.bucket = bucket

    def validate(self, file_name: str, content: bytes, **kwargs) -> None:
        if not file_name or not file_name.strip():
            raise ValidationError("File name is required")
        if not content:
            raise ValidationError("File is empty")

    async def run(
        self,
        file_name: str,
        content: bytes,
        content_type: Optional[str] = None,
        case_id: Optional[UUID] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> EvidenceUpload:
        storage_path = build_storage_path(file_name)
        file_type = content_type or "application/octet-stream"

        await self.storage.upload_file(content, self.bucket, storage_path, content_type=file_type)
        LOGGER.info(
            "Evidence stored",
            extra={"storage_path": storage_path, "size": len(content), "case_id": str(case_id) if case_id else None},
        )

        return await self.uploads.create_upload(
            file_name=file_name,
            file_type=file_type,
            file_size=len(content),
            storage_path=storage_path,
            public_url=self.storage.public_url(self.bucket, storage_path),
            case_id=case_id,
            category=category,
            description=description,
        )

    async def store_text(
        self,
        text: str,
        file_name: str = "pasted-text.txt",
        case_id: Optional[UUID] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> EvidenceUpload:
        """Store pasted text as a ``.txt`` object."""
        if not file_name.lower().endswith(".txt"):
            file_name = f"{file_name}.txt"
        return await self.execute(
            file_name,
            text.encode("utf-8"),
            content_type="text/plain",
            case_id=case_id,
            category=category,
            description=description,
        )
