from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import EvidenceUpload
from app.repositories.base_repository import BaseRepository
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class EvidenceUploadRepository(BaseRepository[EvidenceUpload]):
    """Repository for evidence upload metadata rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EvidenceUpload)

    async def create_upload(
        self,
        file_name: str,
        file_type: str,
        file_size: int,
        storage_path: str,
        public_url: str,
        case_id: Optional[UUID] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> EvidenceUpload:
        """Record a stored object.

        Args:
            file_name: Original file name as submitted
            file_type: MIME type reported at upload
            file_size: Size in bytes
            storage_path: Object path inside the evidence bucket
            public_url: Public URL of the object
            case_id: Optional owning case
            category: Optional evidence category
            description: Optional free-text description

        Returns:
            Created EvidenceUpload record
        """
        upload = await self.create(
            file_name=file_name,
            file_type=file_type,
            file_size=file_size,
            storage_path=storage_path,
            public_url=public_url,
            case_id=case_id,
            category=category,
            description=description,
        )
        LOGGER.info(
            "Evidence upload recorded",
            extra={"upload_id": str(upload.id), "storage_path": storage_path},
        )
        return upload

    async def list_for_case(self, case_id: Optional[UUID] = None, limit: int = 500) -> List[EvidenceUpload]:
        """List uploads oldest first, optionally restricted to one case."""
        filters = {"case_id": case_id} if case_id else None
        return await self.get_all(
            limit=limit, filters=filters, order_by=EvidenceUpload.created_at.asc()
        )
