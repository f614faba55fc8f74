"""SQLAlchemy models for all database tables."""

import uuid
from datetime import date as calendar_date, datetime
from decimal import Decimal

from sqlalchemy import (
    ARRAY,
    Boolean,
    Date,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class EvidenceUpload(Base):
    """One submitted file or pasted text blob."""

    __tablename__ = "evidence_uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_type: Mapped[str] = mapped_column(String, nullable=False, default="text/plain")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    storage_path: Mapped[str] = mapped_column(String, nullable=False)
    public_url: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    related_event_ids: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    analysis_jobs: Mapped[list["AnalysisJob"]] = relationship(
        "AnalysisJob", back_populates="upload"
    )


class AnalysisJob(Base):
    """Ledger row for one extraction attempt.

    Status moves once from ``processing`` to ``completed`` or ``failed``.
    """

    __tablename__ = "document_analysis_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    upload_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("evidence_uploads.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="processing"
    )  # processing | completed | failed
    events_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    entities_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discrepancies_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    claims_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    compliance_violations_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    financial_harm_extracted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    upload: Mapped["EvidenceUpload | None"] = relationship(
        "EvidenceUpload", back_populates="analysis_jobs"
    )


class ExtractedEvent(Base):
    """Timeline occurrence extracted from a document."""

    __tablename__ = "extracted_events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    source_upload_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    individuals: Mapped[str] = mapped_column(Text, nullable=False, default="")
    legal_action: Mapped[str] = mapped_column(Text, nullable=False, default="")
    outcome: Mapped[str] = mapped_column(Text, nullable=False, default="")
    evidence_discrepancy: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sources: Mapped[str] = mapped_column(Text, nullable=False, default="")
    confidence_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    is_hidden: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    extraction_method: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=datetime.utcnow
    )


class ExtractedEntity(Base):
    """Named person, organization or body.

    No deduplication: repeated extractions add near-duplicate rows.
    """

    __tablename__ = "extracted_entities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    source_upload_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class ExtractedDiscrepancy(Base):
    """Procedural or evidentiary inconsistency."""

    __tablename__ = "extracted_discrepancies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    source_upload_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    discrepancy_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String, nullable=False)
    legal_reference: Mapped[str | None] = mapped_column(Text, nullable=True)
    related_dates: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class LegalClaim(Base):
    """Allegation extracted from a document, awaiting evidence correlation."""

    __tablename__ = "legal_claims"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    source_upload_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    allegation_text: Mapped[str] = mapped_column(Text, nullable=False)
    claim_type: Mapped[str] = mapped_column(String, nullable=False)
    legal_framework: Mapped[str] = mapped_column(String, nullable=False)
    legal_section: Mapped[str] = mapped_column(String, nullable=False)
    alleged_by: Mapped[str | None] = mapped_column(String, nullable=True)
    alleged_against: Mapped[str | None] = mapped_column(String, nullable=True)
    date_alleged: Mapped[calendar_date | None] = mapped_column(Date, nullable=True)
    source_document: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True, default="unverified")
    support_score: Mapped[float | None] = mapped_column(Float, nullable=True, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=datetime.utcnow
    )


class ComplianceViolation(Base):
    """Flagged procedural or constitutional breach."""

    __tablename__ = "compliance_violations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    violation_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String, nullable=False)
    legal_consequence: Mapped[str | None] = mapped_column(Text, nullable=True)
    remediation_possible: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    resolved: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    flagged_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class RegulatoryHarmIncident(Base):
    """Financial or regulatory harm event; parent of its quantified losses."""

    __tablename__ = "regulatory_harm_incidents"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    incident_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    incident_date: Mapped[calendar_date | None] = mapped_column(Date, nullable=True)
    institution_name: Mapped[str | None] = mapped_column(String, nullable=True)
    institution_type: Mapped[str | None] = mapped_column(String, nullable=True)
    severity: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=datetime.utcnow
    )

    losses: Mapped[list["FinancialLoss"]] = relationship(
        "FinancialLoss", back_populates="incident", cascade="all, delete-orphan"
    )


class FinancialLoss(Base):
    """Quantified loss attached to exactly one harm incident."""

    __tablename__ = "financial_losses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    incident_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("regulatory_harm_incidents.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=0)
    currency: Mapped[str | None] = mapped_column(String, nullable=True, default="PKR")
    loss_category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_documented: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    is_estimated: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    incident: Mapped["RegulatoryHarmIncident"] = relationship(
        "RegulatoryHarmIncident", back_populates="losses"
    )
