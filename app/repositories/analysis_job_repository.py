from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError
from app.database.models import AnalysisJob
from app.repositories.base_repository import BaseRepository
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

# Category name -> AnalysisJob count column
COUNT_COLUMNS = {
    "events": "events_extracted",
    "entities": "entities_extracted",
    "discrepancies": "discrepancies_extracted",
    "claims": "claims_extracted",
    "compliance_violations": "compliance_violations_extracted",
    "financial_harm": "financial_harm_extracted",
}


class AnalysisJobRepository(BaseRepository[AnalysisJob]):
    """Job ledger: one row per extraction attempt.

    A job is created in ``processing`` and moved to a terminal state at most
    once. The terminal UPDATE only matches rows still in ``processing``, so a
    second completion or failure is a no-op.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, AnalysisJob)

    async def start_job(self, upload_id: Optional[UUID] = None) -> AnalysisJob:
        """Create a ledger row in ``processing`` state."""
        job = await self.create(
            upload_id=upload_id,
            status=STATUS_PROCESSING,
            started_at=datetime.now(timezone.utc),
        )
        LOGGER.info(
            "Analysis job started",
            extra={"job_id": str(job.id), "upload_id": str(upload_id) if upload_id else None},
        )
        return job

    async def complete_job(
        self,
        job_id: UUID,
        counts: Dict[str, int],
        error_message: Optional[str] = None,
    ) -> bool:
        """Mark a job completed with its per-category counts.

        Args:
            job_id: Job to finish
            counts: Category name -> number of rows inserted
            error_message: Summary of categories that failed, if any

        Returns:
            True if the job transitioned, False if it was already terminal
        """
        values = {
            column: counts.get(category, 0) for category, column in COUNT_COLUMNS.items()
        }
        return await self._finish(
            job_id, STATUS_COMPLETED, error_message=error_message, **values
        )

    async def fail_job(self, job_id: UUID, error_message: str) -> bool:
        """Mark a job failed.

        Returns:
            True if the job transitioned, False if it was already terminal
        """
        return await self._finish(job_id, STATUS_FAILED, error_message=error_message)

    async def _finish(self, job_id: UUID, status: str, **values) -> bool:
        stmt = (
            update(AnalysisJob)
            .where(AnalysisJob.id == job_id, AnalysisJob.status == STATUS_PROCESSING)
            .values(status=status, completed_at=datetime.now(timezone.utc), **values)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            LOGGER.error(
                f"Error finishing analysis job {job_id}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError("Failed to update analysis job", original_error=e)

        transitioned = result.rowcount == 1
        if transitioned:
            LOGGER.info(f"Analysis job {status}", extra={"job_id": str(job_id)})
        else:
            LOGGER.warning(
                "Analysis job already terminal, update ignored",
                extra={"job_id": str(job_id), "requested_status": status},
            )
        return transitioned

    async def list_jobs(self, limit: int = 100) -> List[AnalysisJob]:
        """List jobs newest first."""
        return await self.get_all(limit=limit, order_by=AnalysisJob.created_at.desc())
