"""Tests for the upload, job ledger and review endpoints."""

import uuid
from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.api.v1.endpoints.jobs import get_job_repository
from app.api.v1.endpoints.review import (
    get_discrepancy_repository,
    get_entity_repository,
    get_event_repository,
)
from app.api.v1.endpoints.uploads import get_intake_service, get_upload_repository
from app.core.exceptions import StorageError
from app.main import app


def _upload(**overrides) -> SimpleNamespace:
    values = dict(
        id=uuid.uuid4(),
        case_id=None,
        file_name="fir.pdf",
        file_type="application/pdf",
        file_size=1024,
        storage_path="1710460800000_fir.pdf",
        public_url="https://test.supabase.co/storage/v1/object/public/evidence/1710460800000_fir.pdf",
        category="FIR",
        description=None,
        created_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _job(**overrides) -> SimpleNamespace:
    values = dict(
        id=uuid.uuid4(),
        upload_id=None,
        status="completed",
        events_extracted=4,
        entities_extracted=2,
        discrepancies_extracted=0,
        claims_extracted=1,
        compliance_violations_extracted=0,
        financial_harm_extracted=0,
        error_message=None,
        started_at=datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc),
        completed_at=datetime(2024, 3, 15, 10, 1, tzinfo=timezone.utc),
        created_at=datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _event(**overrides) -> SimpleNamespace:
    values = dict(
        id=uuid.uuid4(),
        case_id=None,
        source_upload_id=None,
        date=date(2024, 3, 15),
        category="Legal Proceeding",
        description="FIR registered",
        individuals="",
        legal_action="",
        outcome="",
        evidence_discrepancy="",
        sources="",
        confidence_score=0.9,
        is_approved=True,
        is_hidden=False,
        extraction_method="ai_analysis",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestUploadEndpoints:

    def test_upload_file(self, test_client: TestClient, sample_pdf_content: bytes) -> None:
        intake = AsyncMock()
        intake.execute.return_value = _upload()
        app.dependency_overrides[get_intake_service] = lambda: intake
        case_id = uuid.uuid4()

        response = test_client.post(
            "/api/v1/uploads",
            files={"file": ("fir.pdf", sample_pdf_content, "application/pdf")},
            data={"case_id": str(case_id), "category": "FIR"},
        )

        assert response.status_code == 201
        assert response.json()["storagePath"] == "1710460800000_fir.pdf"
        args, kwargs = intake.execute.call_args
        assert args == ("fir.pdf", sample_pdf_content)
        assert kwargs["case_id"] == case_id
        assert kwargs["content_type"] == "application/pdf"

    def test_upload_storage_failure(self, test_client: TestClient) -> None:
        intake = AsyncMock()
        intake.execute.side_effect = StorageError("Upload failed with status 400")
        app.dependency_overrides[get_intake_service] = lambda: intake

        response = test_client.post("/api/v1/uploads", files={"file": ("fir.pdf", b"%PDF", "application/pdf")})

        assert response.status_code == 500
        assert response.json() == {"error": "Upload failed with status 400"}

    def test_upload_pasted_text(self, test_client: TestClient) -> None:
        intake = AsyncMock()
        intake.store_text.return_value = _upload(file_name="pasted-text.txt", file_type="text/plain")
        app.dependency_overrides[get_intake_service] = lambda: intake

        response = test_client.post("/api/v1/uploads/text", json={"content": "Statement of the accused"})

        assert response.status_code == 201
        assert response.json()["fileType"] == "text/plain"
        assert intake.store_text.call_args.args[0] == "Statement of the accused"

    def test_list_uploads_for_case(self, test_client: TestClient) -> None:
        case_id = uuid.uuid4()
        uploads = AsyncMock()
        uploads.list_for_case.return_value = [_upload(case_id=case_id), _upload(case_id=case_id)]
        app.dependency_overrides[get_upload_repository] = lambda: uploads

        response = test_client.get("/api/v1/uploads", params={"case_id": str(case_id)})

        assert response.status_code == 200
        assert len(response.json()) == 2
        uploads.list_for_case.assert_awaited_once_with(case_id)


class TestJobEndpoints:

    def test_get_job(self, test_client: TestClient) -> None:
        job = _job(status="failed", error_message="Rate limit exceeded. Please try again later.")
        jobs = AsyncMock()
        jobs.get_by_id.return_value = job
        app.dependency_overrides[get_job_repository] = lambda: jobs

        response = test_client.get(f"/api/v1/analysis-jobs/{job.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["errorMessage"] == "Rate limit exceeded. Please try again later."

    def test_get_missing_job_is_404(self, test_client: TestClient) -> None:
        jobs = AsyncMock()
        jobs.get_by_id.return_value = None
        app.dependency_overrides[get_job_repository] = lambda: jobs

        response = test_client.get(f"/api/v1/analysis-jobs/{uuid.uuid4()}")

        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_list_jobs(self, test_client: TestClient) -> None:
        jobs = AsyncMock()
        jobs.list_jobs.return_value = [_job(), _job(status="processing", completed_at=None)]
        app.dependency_overrides[get_job_repository] = lambda: jobs

        response = test_client.get("/api/v1/analysis-jobs", params={"limit": 10})

        assert response.status_code == 200
        assert [job["status"] for job in response.json()] == ["completed", "processing"]
        jobs.list_jobs.assert_awaited_once_with(limit=10)


class TestReviewEndpoints:

    def test_list_events(self, test_client: TestClient) -> None:
        events = AsyncMock()
        events.list_for_case.return_value = [_event()]
        app.dependency_overrides[get_event_repository] = lambda: events

        response = test_client.get("/api/v1/events")

        assert response.status_code == 200
        data = response.json()
        assert data[0]["date"] == "2024-03-15"
        assert data[0]["extractionMethod"] == "ai_analysis"
        events.list_for_case.assert_awaited_once_with(None, include_hidden=False)

    def test_set_event_approval(self, test_client: TestClient) -> None:
        event = _event(is_approved=False)
        events = AsyncMock()
        events.set_approval.return_value = event
        app.dependency_overrides[get_event_repository] = lambda: events

        response = test_client.patch(f"/api/v1/events/{event.id}/approval", json={"isApproved": False})

        assert response.status_code == 200
        assert response.json()["isApproved"] is False
        events.set_approval.assert_awaited_once_with(event.id, False)

    def test_delete_missing_event_is_404(self, test_client: TestClient) -> None:
        events = AsyncMock()
        events.delete.return_value = False
        app.dependency_overrides[get_event_repository] = lambda: events

        response = test_client.delete(f"/api/v1/events/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_delete_event(self, test_client: TestClient) -> None:
        events = AsyncMock()
        events.delete.return_value = True
        app.dependency_overrides[get_event_repository] = lambda: events

        response = test_client.delete(f"/api/v1/events/{uuid.uuid4()}")

        assert response.status_code == 204

    def test_list_entities(self, test_client: TestClient) -> None:
        entities = AsyncMock()
        entities.list_for_case.return_value = [
            SimpleNamespace(
                id=uuid.uuid4(),
                case_id=None,
                source_upload_id=None,
                name="Federal Investigation Agency",
                entity_type="Official Body",
                role="Investigator",
                description=None,
            )
        ]
        app.dependency_overrides[get_entity_repository] = lambda: entities

        response = test_client.get("/api/v1/entities")

        assert response.status_code == 200
        assert response.json()[0]["entityType"] == "Official Body"

    def test_list_discrepancies(self, test_client: TestClient) -> None:
        case_id = uuid.uuid4()
        discrepancies = AsyncMock()
        discrepancies.list_for_case.return_value = [
            SimpleNamespace(
                id=uuid.uuid4(),
                case_id=case_id,
                source_upload_id=None,
                discrepancy_type="Chain of Custody",
                title="Unsealed devices",
                description="Devices were not sealed at seizure",
                severity="high",
                legal_reference="CrPC s.103",
                related_dates=["2024-03-15"],
            )
        ]
        app.dependency_overrides[get_discrepancy_repository] = lambda: discrepancies

        response = test_client.get("/api/v1/discrepancies", params={"case_id": str(case_id)})

        assert response.status_code == 200
        data = response.json()
        assert data[0]["discrepancyType"] == "Chain of Custody"
        assert data[0]["relatedDates"] == ["2024-03-15"]
        discrepancies.list_for_case.assert_awaited_once_with(case_id)
