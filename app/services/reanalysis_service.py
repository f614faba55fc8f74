import asyncio
from uuid import UUID

from app.core.exceptions import AppError
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.schemas.analysis import AnalyzeDocumentRequest, ReanalyzeFileResult, ReanalyzeResponse
from app.services.analysis_pipeline import AnalysisPipeline
from app.services.base_service import BaseService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DOCUMENT_TYPE = "general"


class CaseReanalysisService(BaseService):
    """Re-runs the analysis pipeline over every upload of a case.

    Files are processed one at a time with a pause between them to stay under
    the gateway's rate limit. A failing file is reported and the batch goes on.
    """

    def __init__(
        self,
        uploads: EvidenceUploadRepository,
        pipeline: AnalysisPipeline,
        delay_seconds: float = 3.0,
    ):
        super().__init__(repository=uploads)
        self.uploads = uploads
        self.pipeline = pipeline
        self.delay_seconds = delay_seconds

    async def run(self, case_id: UUID) -> ReanalyzeResponse:
        case_files = await self.uploads.list_for_case(case_id)
        LOGGER.info(f"Re-analyzing {len(case_files)} files", extra={"case_id": str(case_id)})

        results = []
        for index, upload in enumerate(case_files):
            request = AnalyzeDocumentRequest(
                upload_id=str(upload.id),
                document_content="",
                file_name=upload.file_name,
                document_type=upload.category or DEFAULT_DOCUMENT_TYPE,
                case_id=str(case_id),
                storage_path=upload.storage_path,
            )
            try:
                outcome = await self.pipeline.execute(request)
                counts = outcome.counts
                results.append(
                    ReanalyzeFileResult(
                        upload_id=upload.id,
                        file_name=upload.file_name,
                        status="success",
                        events_extracted=counts["events"],
                        entities_extracted=counts["entities"],
                        discrepancies_extracted=counts["discrepancies"],
                    )
                )
            except AppError as e:
                LOGGER.error(
                    f"Re-analysis failed for {upload.file_name}: {e.message}",
                    extra={"upload_id": str(upload.id)},
                )
                results.append(
                    ReanalyzeFileResult(
                        upload_id=upload.id,
                        file_name=upload.file_name,
                        status="error",
                        error=e.message,
                    )
                )

            if index < len(case_files) - 1 and self.delay_seconds > 0:
                await asyncio.sleep(self.delay_seconds)

        succeeded = sum(1 for result in results if result.status == "success")
        return ReanalyzeResponse(
            case_id=case_id,
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )
