"""Evidence intake endpoints."""

from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.analysis import get_extraction_config, get_storage_service
from app.core.config import ExtractionConfig
from app.core.database import get_async_session as get_session
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.schemas.analysis import EvidenceUploadOut, PastedTextUpload
from app.services.intake_service import DocumentIntakeService
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_upload_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> EvidenceUploadRepository:
    return EvidenceUploadRepository(db_session)


async def get_intake_service(
    uploads: Annotated[EvidenceUploadRepository, Depends(get_upload_repository)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
    config: Annotated[ExtractionConfig, Depends(get_extraction_config)],
) -> DocumentIntakeService:
    return DocumentIntakeService(storage, uploads, bucket=config.storage_bucket)


@router.post(
    "",
    response_model=EvidenceUploadOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an evidence file",
    operation_id="upload_evidence",
)
async def upload_evidence(
    intake: Annotated[DocumentIntakeService, Depends(get_intake_service)],
    file: UploadFile = File(..., description="Evidence file"),
    case_id: Optional[UUID] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
) -> EvidenceUploadOut:
    content = await file.read()
    upload = await intake.execute(
        file.filename or "upload",
        content,
        content_type=file.content_type,
        case_id=case_id,
        category=category,
        description=description,
    )
    return EvidenceUploadOut.model_validate(upload)


@router.post(
    "/text",
    response_model=EvidenceUploadOut,
    status_code=status.HTTP_201_CREATED,
    summary="Store pasted text as evidence",
    operation_id="upload_pasted_text",
)
async def upload_pasted_text(
    body: PastedTextUpload,
    intake: Annotated[DocumentIntakeService, Depends(get_intake_service)],
) -> EvidenceUploadOut:
    upload = await intake.store_text(
        body.content,
        file_name=body.file_name,
        case_id=body.case_id,
        category=body.category,
        description=body.description,
    )
    return EvidenceUploadOut.model_validate(upload)


@router.get(
    "",
    response_model=List[EvidenceUploadOut],
    summary="List evidence uploads",
    operation_id="list_evidence_uploads",
)
async def list_uploads(
    uploads: Annotated[EvidenceUploadRepository, Depends(get_upload_repository)],
    case_id: Optional[UUID] = Query(None),
) -> List[EvidenceUploadOut]:
    records = await uploads.list_for_case(case_id)
    return [EvidenceUploadOut.model_validate(record) for record in records]
