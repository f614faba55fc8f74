"""Document analysis pipeline.

One call runs Content Resolver -> Extraction Invoker -> Result Fan-Out in
order, bracketed by a Job Ledger row. Everything is awaited sequentially
inside the calling request; nothing is retried.
"""

import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import ExtractionConfig
from app.core.exceptions import AppError, DatabaseError, ValidationError
from app.core.llm_client import AIGatewayClient
from app.repositories.analysis_job_repository import AnalysisJobRepository
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.repositories.extraction_repository import ResultRepositories
from app.schemas.analysis import AnalyzeDocumentRequest, AnalyzeDocumentResponse
from app.schemas.extraction import ExtractionResult
from app.services.base_service import BaseService
from app.services.content_resolver import ContentResolver, NoContent
from app.services.extraction_invoker import ExtractionInvoker
from app.services.fan_out import CATEGORIES, FanOutOutcome, ResultFanOut
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

PASTED_UPLOAD_ID = "pasted"
UPLOAD_ID_REQUIRED = "uploadId is required"
NO_CONTENT_NOTE = "No extractable content was available for this document; nothing was analyzed."


def parse_uuid(value: Optional[str], field_name: str) -> Optional[uuid.UUID]:
    """Parse an optional UUID string, None (with a warning) when malformed."""
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        LOGGER.warning(f"Ignoring malformed {field_name}: {value!r}")
        return None


@dataclass
class AnalysisOutcome:
    """What one pipeline run produced.

    Response counts are the number of items the model returned per category;
    rows actually inserted are recorded on the job and in ``fan_out``.
    """

    job_id: Optional[uuid.UUID]
    result: ExtractionResult
    fan_out: Optional[FanOutOutcome] = None
    note: Optional[str] = None

    @property
    def counts(self) -> Dict[str, int]:
        return self.result.counts()

    def to_response(self) -> AnalyzeDocumentResponse:
        counts = self.counts

        def dump(items) -> list:
            return [item.model_dump(by_alias=True) for item in items]

        return AnalyzeDocumentResponse(
            success=True,
            job_id=self.job_id,
            events_extracted=counts["events"],
            entities_extracted=counts["entities"],
            discrepancies_extracted=counts["discrepancies"],
            claims_extracted=counts["claims"],
            compliance_violations_extracted=counts["compliance_violations"],
            financial_harm_extracted=counts["financial_harm"],
            events=dump(self.result.events),
            entities=dump(self.result.entities),
            discrepancies=dump(self.result.discrepancies),
            claims=dump(self.result.claims),
            compliance_violations=dump(self.result.compliance_violations),
            financial_harm=dump(self.result.financial_harm),
            note=self.note,
        )


class AnalysisPipeline(BaseService):
    """Runs one extraction attempt for one submitted document.

    All collaborators are injected; :meth:`build` wires the production ones
    from an :class:`ExtractionConfig` and a database session.
    """

    def __init__(
        self,
        config: ExtractionConfig,
        jobs: AnalysisJobRepository,
        uploads: EvidenceUploadRepository,
        resolver: ContentResolver,
        invoker: ExtractionInvoker,
        fan_out: ResultFanOut,
    ):
        super().__init__(repository=jobs)
        self.config = config
        self.jobs = jobs
        self.uploads = uploads
        self.resolver = resolver
        self.invoker = invoker
        self.fan_out = fan_out

    @classmethod
    def build(
        cls,
        config: ExtractionConfig,
        session: AsyncSession,
        storage: Optional[StorageService] = None,
    ) -> "AnalysisPipeline":
        client = AIGatewayClient(
            api_key=config.gateway_api_key,
            url=config.gateway_url,
            timeout=config.gateway_timeout,
        )
        return cls(
            config=config,
            jobs=AnalysisJobRepository(session),
            uploads=EvidenceUploadRepository(session),
            resolver=ContentResolver(storage or StorageService(), bucket=config.storage_bucket),
            invoker=ExtractionInvoker(client, config.model, config.max_document_chars),
            fan_out=ResultFanOut(ResultRepositories.from_session(session)),
        )

    def validate(self, request: AnalyzeDocumentRequest) -> None:
        if not request.upload_id or not request.upload_id.strip():
            raise ValidationError(UPLOAD_ID_REQUIRED)

    async def run(self, request: AnalyzeDocumentRequest) -> AnalysisOutcome:
        upload_id = await self._resolve_upload_id(request.upload_id)
        case_id = parse_uuid(request.case_id, "caseId")
        job_id = await self._start_job(upload_id)

        LOGGER.info(
            "Analysis started",
            extra={
                "job_id": str(job_id) if job_id else None,
                "upload_id": request.upload_id,
                "file_name": request.file_name,
            },
        )

        try:
            content = await self.resolver.resolve(
                request.file_name, request.document_content, request.storage_path
            )

            if isinstance(content, NoContent):
                await self._complete_job(job_id, {category: 0 for category in CATEGORIES})
                return AnalysisOutcome(
                    job_id=job_id,
                    result=ExtractionResult(),
                    note=f"{NO_CONTENT_NOTE} ({content.reason})",
                )

            result = await self.invoker.extract(content, request.document_type, request.file_name)
            fan_out = await self.fan_out.persist(result, case_id=case_id, upload_id=upload_id)
            await self._complete_job(job_id, fan_out.inserted_counts(), fan_out.error_summary())

            return AnalysisOutcome(job_id=job_id, result=result, fan_out=fan_out)

        except AppError as e:
            await self._fail_job(job_id, e.message)
            raise
        except Exception as e:
            await self._fail_job(job_id, str(e) or e.__class__.__name__)
            raise

    async def _resolve_upload_id(self, raw_upload_id: Optional[str]) -> Optional[uuid.UUID]:
        """Upload row id to link the job to, None for pasted or unknown uploads."""
        if raw_upload_id == PASTED_UPLOAD_ID:
            return None
        upload_id = parse_uuid(raw_upload_id, "uploadId")
        if upload_id is None:
            return None
        try:
            upload = await self.uploads.get_by_id(upload_id)
        except DatabaseError as e:
            LOGGER.error(f"Upload lookup failed: {e.message}", extra={"upload_id": str(upload_id)})
            return None
        if upload is None:
            LOGGER.warning("Upload not found, job will not be linked", extra={"upload_id": str(upload_id)})
            return None
        return upload_id

    async def _start_job(self, upload_id: Optional[uuid.UUID]) -> Optional[uuid.UUID]:
        # A missing ledger row must not block the extraction itself
        try:
            job = await self.jobs.start_job(upload_id)
            return job.id
        except DatabaseError as e:
            LOGGER.error(f"Job creation error: {e.message}")
            return None

    async def _complete_job(
        self, job_id: Optional[uuid.UUID], counts: Dict[str, int], error_message: Optional[str] = None
    ) -> None:
        if job_id is None:
            return
        try:
            await self.jobs.complete_job(job_id, counts, error_message=error_message)
        except DatabaseError as e:
            LOGGER.error(f"Failed to complete job: {e.message}", extra={"job_id": str(job_id)})

    async def _fail_job(self, job_id: Optional[uuid.UUID], message: str) -> None:
        if job_id is None:
            return
        try:
            await self.jobs.fail_job(job_id, message)
        except DatabaseError as e:
            LOGGER.error(f"Failed to mark job failed: {e.message}", extra={"job_id": str(job_id)})
