"""Request and response bodies for the analysis endpoints."""

from datetime import date as calendar_date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeDocumentRequest(CamelModel):
    """Body of ``POST /analyze-document``.

    ``uploadId`` is required but typed optional so that a missing value is
    answered with the documented message instead of a generic validation error.
    ``"pasted"`` marks ad-hoc text with no backing upload row.
    """

    upload_id: Optional[str] = None
    document_content: Optional[str] = None
    file_name: Optional[str] = None
    document_type: Optional[str] = None
    case_id: Optional[str] = None
    storage_path: Optional[str] = None


class AnalyzeDocumentResponse(CamelModel):
    success: bool = True
    job_id: Optional[UUID] = None
    events_extracted: int = 0
    entities_extracted: int = 0
    discrepancies_extracted: int = 0
    claims_extracted: int = 0
    compliance_violations_extracted: int = 0
    financial_harm_extracted: int = 0
    events: List[Dict[str, Any]] = Field(default_factory=list)
    entities: List[Dict[str, Any]] = Field(default_factory=list)
    discrepancies: List[Dict[str, Any]] = Field(default_factory=list)
    claims: List[Dict[str, Any]] = Field(default_factory=list)
    compliance_violations: List[Dict[str, Any]] = Field(default_factory=list)
    financial_harm: List[Dict[str, Any]] = Field(default_factory=list)
    note: Optional[str] = None


class ReanalyzeFileResult(CamelModel):
    upload_id: UUID
    file_name: str
    status: str  # success | error
    events_extracted: int = 0
    entities_extracted: int = 0
    discrepancies_extracted: int = 0
    error: Optional[str] = None


class ReanalyzeResponse(CamelModel):
    case_id: UUID
    total: int
    succeeded: int
    failed: int
    results: List[ReanalyzeFileResult] = Field(default_factory=list)


class AnalysisJobOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    upload_id: Optional[UUID] = None
    status: str
    events_extracted: Optional[int] = None
    entities_extracted: Optional[int] = None
    discrepancies_extracted: Optional[int] = None
    claims_extracted: Optional[int] = None
    compliance_violations_extracted: Optional[int] = None
    financial_harm_extracted: Optional[int] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class EvidenceUploadOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    case_id: Optional[UUID] = None
    file_name: str
    file_type: str
    file_size: int
    storage_path: str
    public_url: str
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class PastedTextUpload(CamelModel):
    content: str = Field(..., min_length=1)
    file_name: str = "pasted-text.txt"
    case_id: Optional[UUID] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ExtractedEventOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    case_id: Optional[UUID] = None
    source_upload_id: Optional[UUID] = None
    date: calendar_date
    category: str
    description: str
    individuals: str = ""
    legal_action: str = ""
    outcome: str = ""
    evidence_discrepancy: str = ""
    sources: str = ""
    confidence_score: Optional[float] = None
    is_approved: Optional[bool] = None
    is_hidden: Optional[bool] = None
    extraction_method: Optional[str] = None


class EventApprovalUpdate(CamelModel):
    is_approved: bool


class ExtractedEntityOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    case_id: Optional[UUID] = None
    source_upload_id: Optional[UUID] = None
    name: str
    entity_type: str
    role: Optional[str] = None
    description: Optional[str] = None


class ExtractedDiscrepancyOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    case_id: Optional[UUID] = None
    source_upload_id: Optional[UUID] = None
    discrepancy_type: str
    title: str
    description: str
    severity: str
    legal_reference: Optional[str] = None
    related_dates: Optional[List[str]] = None
