"""Database models."""

from app.database.models import (
    AnalysisJob,
    ComplianceViolation,
    EvidenceUpload,
    ExtractedDiscrepancy,
    ExtractedEntity,
    ExtractedEvent,
    FinancialLoss,
    LegalClaim,
    RegulatoryHarmIncident,
)

__all__ = [
    "AnalysisJob",
    "ComplianceViolation",
    "EvidenceUpload",
    "ExtractedDiscrepancy",
    "ExtractedEntity",
    "ExtractedEvent",
    "FinancialLoss",
    "LegalClaim",
    "RegulatoryHarmIncident",
]
