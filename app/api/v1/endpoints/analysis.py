"""Document analysis endpoint."""

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import ExtractionConfig, settings
from app.core.database import get_async_session as get_session
from app.schemas.analysis import AnalyzeDocumentRequest, AnalyzeDocumentResponse
from app.services.analysis_pipeline import AnalysisPipeline
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


@lru_cache
def get_extraction_config() -> ExtractionConfig:
    return ExtractionConfig.from_settings(settings)


async def get_storage_service() -> StorageService:
    return StorageService()


async def get_analysis_pipeline(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    config: Annotated[ExtractionConfig, Depends(get_extraction_config)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> AnalysisPipeline:
    return AnalysisPipeline.build(config, db_session, storage=storage)


@router.post(
    "/analyze-document",
    response_model=AnalyzeDocumentResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Extract case intelligence from one document",
    operation_id="analyze_document",
)
async def analyze_document(
    body: AnalyzeDocumentRequest,
    pipeline: Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)],
) -> AnalyzeDocumentResponse:
    """Run content resolution, AI extraction and fan-out for one document.

    Errors are rendered as ``{"error": message}``: 400 when ``uploadId`` is
    missing, 429 / 402 when the AI gateway is out of capacity, 500 otherwise.
    """
    outcome = await pipeline.execute(body)
    return outcome.to_response()
