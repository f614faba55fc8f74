"""Case-level operations."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.analysis import get_analysis_pipeline
from app.core.config import settings
from app.core.database import get_async_session as get_session
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.schemas.analysis import ReanalyzeResponse
from app.services.analysis_pipeline import AnalysisPipeline
from app.services.reanalysis_service import CaseReanalysisService

router = APIRouter()


async def get_reanalysis_service(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    pipeline: Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)],
) -> CaseReanalysisService:
    return CaseReanalysisService(
        uploads=EvidenceUploadRepository(db_session),
        pipeline=pipeline,
        delay_seconds=settings.extraction.reanalyze_delay_seconds,
    )


@router.post(
    "/{case_id}/reanalyze",
    response_model=ReanalyzeResponse,
    summary="Re-run extraction over every upload of a case",
    operation_id="reanalyze_case",
)
async def reanalyze_case(
    case_id: UUID,
    service: Annotated[CaseReanalysisService, Depends(get_reanalysis_service)],
) -> ReanalyzeResponse:
    return await service.execute(case_id)
