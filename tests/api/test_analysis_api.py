"""Tests for the document analysis and case endpoints."""

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.analysis import get_analysis_pipeline
from app.api.v1.endpoints.cases import get_reanalysis_service
from app.core.exceptions import (
    AIGatewayError,
    CreditsExhaustedError,
    DatabaseError,
    RateLimitExceededError,
)
from app.main import app
from app.schemas.analysis import ReanalyzeFileResult, ReanalyzeResponse
from app.schemas.extraction import ExtractionResult
from app.services.analysis_pipeline import AnalysisOutcome, AnalysisPipeline
from app.services.content_resolver import ContentResolver
from app.services.fan_out import ResultFanOut

ANALYZE_URL = "/api/v1/analyze-document"


@pytest.fixture
def invoker(sample_extraction_arguments) -> AsyncMock:
    invoker = AsyncMock()
    invoker.extract.return_value = ExtractionResult.model_validate(sample_extraction_arguments)
    return invoker


@pytest.fixture
def pipeline(extraction_config, job_repository, invoker, result_repositories) -> AnalysisPipeline:
    """Real pipeline over mocked storage, gateway and repositories."""
    uploads = AsyncMock()
    uploads.get_by_id.return_value = None
    pipeline = AnalysisPipeline(
        config=extraction_config,
        jobs=job_repository,
        uploads=uploads,
        resolver=ContentResolver(AsyncMock(), bucket="evidence"),
        invoker=invoker,
        fan_out=ResultFanOut(result_repositories),
    )
    app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline
    return pipeline


class TestAnalyzeDocumentEndpoint:
    """Request/response behavior of ``POST /analyze-document``."""

    def test_success_response_shape(self, test_client: TestClient, pipeline, job_repository) -> None:
        """Counts, camelCase arrays and the job id are returned on success.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
            job_repository: In-memory job ledger
        """
        response = test_client.post(
            ANALYZE_URL,
            json={
                "uploadId": "pasted",
                "documentContent": "FIR registered on 2024-03-15 under PECA 2016",
                "fileName": "pasted",
                "documentType": "FIR",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["eventsExtracted"] == 1
        assert data["entitiesExtracted"] == 1
        assert data["discrepanciesExtracted"] == 1
        assert data["claimsExtracted"] == 1
        assert data["complianceViolationsExtracted"] == 1
        assert data["financialHarmExtracted"] == 1
        assert data["events"][0]["legalAction"] == "FIR No. 12/2024"
        assert data["financialHarm"][0]["lossCategory"] == "lost_revenue"
        assert "note" not in data

        job = next(iter(job_repository.jobs.values()))
        assert data["jobId"] == str(job.id)
        assert job.status == "completed"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"documentContent": "FIR text", "fileName": "fir.txt"},
            {"uploadId": "", "documentContent": "FIR text"},
        ],
    )
    def test_missing_upload_id_is_400(self, test_client: TestClient, pipeline, job_repository, body) -> None:
        """A missing uploadId is rejected before any job is created.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
            job_repository: In-memory job ledger
            body: Request body without a usable uploadId
        """
        response = test_client.post(ANALYZE_URL, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "uploadId is required"}
        assert job_repository.jobs == {}

    def test_non_object_body_is_400(self, test_client: TestClient, pipeline) -> None:
        """A body that is not a JSON object gets the same 400 message.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
        """
        response = test_client.post(ANALYZE_URL, json=["uploadId"])

        assert response.status_code == 400
        assert response.json() == {"error": "uploadId is required"}

    def test_wrong_field_type_with_upload_id_is_generic_400(self, test_client: TestClient, pipeline) -> None:
        """Other malformed fields are reported generically once uploadId is present.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
        """
        response = test_client.post(ANALYZE_URL, json={"uploadId": "pasted", "documentContent": {"a": 1}})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (RateLimitExceededError("Rate limit exceeded. Please try again later.", gateway_status=429), 429),
            (CreditsExhaustedError("AI credits exhausted. Please add credits to continue.", gateway_status=402), 402),
            (AIGatewayError("AI gateway error: 500", gateway_status=500), 500),
        ],
    )
    def test_gateway_errors_mapped(
        self, test_client: TestClient, pipeline, invoker, job_repository, error, status_code
    ) -> None:
        """Gateway capacity errors keep their status; the job is marked failed.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
            invoker: Mocked extraction invoker
            job_repository: In-memory job ledger
            error: Error raised by the invoker
            status_code: Expected HTTP status
        """
        invoker.extract.side_effect = error

        response = test_client.post(ANALYZE_URL, json={"uploadId": "pasted", "documentContent": "FIR text"})

        assert response.status_code == status_code
        assert response.json() == {"error": error.message}
        job = next(iter(job_repository.jobs.values()))
        assert job.status == "failed"
        assert job.error_message == error.message

    def test_unexpected_error_is_500(self, test_client: TestClient, pipeline, invoker) -> None:
        """Unexpected failures still answer with an error body.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
            invoker: Mocked extraction invoker
        """
        invoker.extract.side_effect = ValueError("unexpected payload")

        response = test_client.post(ANALYZE_URL, json={"uploadId": "pasted", "documentContent": "FIR text"})

        assert response.status_code == 500
        assert "unexpected payload" in response.json()["error"]

    def test_no_content_returns_note(self, test_client: TestClient, pipeline, invoker) -> None:
        """Documents with nothing to analyze succeed with zero counts and a note.

        Args:
            test_client: FastAPI test client fixture
            pipeline: Pipeline wired into the app
            invoker: Mocked extraction invoker
        """
        response = test_client.post(
            ANALYZE_URL,
            json={"uploadId": "pasted", "documentContent": "[Video file: raid.mp4]", "fileName": "raid.mp4"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["eventsExtracted"] == 0
        assert data["events"] == []
        assert data["note"]
        invoker.extract.assert_not_called()

    def test_mocked_pipeline_outcome_rendered(self, test_client: TestClient) -> None:
        """The endpoint renders whatever outcome the pipeline returns.

        Args:
            test_client: FastAPI test client fixture
        """
        job_id = uuid.uuid4()
        mock_pipeline = AsyncMock()
        mock_pipeline.execute.return_value = AnalysisOutcome(job_id=job_id, result=ExtractionResult())
        app.dependency_overrides[get_analysis_pipeline] = lambda: mock_pipeline

        response = test_client.post(ANALYZE_URL, json={"uploadId": str(uuid.uuid4())})

        assert response.status_code == 200
        assert response.json()["jobId"] == str(job_id)


class TestReanalyzeEndpoint:

    def test_reanalyze_case(self, test_client: TestClient) -> None:
        case_id = uuid.uuid4()
        upload_id = uuid.uuid4()
        service = AsyncMock()
        service.execute.return_value = ReanalyzeResponse(
            case_id=case_id,
            total=1,
            succeeded=0,
            failed=1,
            results=[
                ReanalyzeFileResult(
                    upload_id=upload_id, file_name="fir.pdf", status="error", error="AI gateway error: 503"
                )
            ],
        )
        app.dependency_overrides[get_reanalysis_service] = lambda: service

        response = test_client.post(f"/api/v1/cases/{case_id}/reanalyze")

        assert response.status_code == 200
        data = response.json()
        assert data["caseId"] == str(case_id)
        assert data["results"][0]["uploadId"] == str(upload_id)
        assert data["results"][0]["error"] == "AI gateway error: 503"
        service.execute.assert_awaited_once_with(case_id)

    def test_reanalyze_database_error_is_500(self, test_client: TestClient) -> None:
        service = AsyncMock()
        service.execute.side_effect = DatabaseError("Failed to list EvidenceUpload")
        app.dependency_overrides[get_reanalysis_service] = lambda: service

        response = test_client.post(f"/api/v1/cases/{uuid.uuid4()}/reanalyze")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to list EvidenceUpload"}
