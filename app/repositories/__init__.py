"""Repository layer modules."""

from app.repositories.analysis_job_repository import AnalysisJobRepository
from app.repositories.evidence_repository import EvidenceUploadRepository
from app.repositories.extraction_repository import (
    ExtractedDiscrepancyRepository,
    ExtractedEntityRepository,
    ExtractedEventRepository,
    ResultRepositories,
)

__all__ = [
    "AnalysisJobRepository",
    "EvidenceUploadRepository",
    "ExtractedDiscrepancyRepository",
    "ExtractedEntityRepository",
    "ExtractedEventRepository",
    "ResultRepositories",
]
