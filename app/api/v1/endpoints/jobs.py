"""Job ledger read endpoints."""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_async_session as get_session
from app.core.exceptions import NotFoundError
from app.repositories.analysis_job_repository import AnalysisJobRepository
from app.schemas.analysis import AnalysisJobOut

router = APIRouter()


async def get_job_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> AnalysisJobRepository:
    return AnalysisJobRepository(db_session)


@router.get(
    "",
    response_model=List[AnalysisJobOut],
    summary="List analysis jobs, newest first",
    operation_id="list_analysis_jobs",
)
async def list_jobs(
    jobs: Annotated[AnalysisJobRepository, Depends(get_job_repository)],
    limit: int = Query(100, ge=1, le=500),
) -> List[AnalysisJobOut]:
    return [AnalysisJobOut.model_validate(job) for job in await jobs.list_jobs(limit=limit)]


@router.get(
    "/{job_id}",
    response_model=AnalysisJobOut,
    summary="Get one analysis job",
    operation_id="get_analysis_job",
)
async def get_job(
    job_id: UUID,
    jobs: Annotated[AnalysisJobRepository, Depends(get_job_repository)],
) -> AnalysisJobOut:
    job = await jobs.get_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Analysis job {job_id} not found")
    return AnalysisJobOut.model_validate(job)
