"""Repositories for the six extraction result tables."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError
from app.database.models import (
    ComplianceViolation,
    ExtractedDiscrepancy,
    ExtractedEntity,
    ExtractedEvent,
    FinancialLoss,
    LegalClaim,
    RegulatoryHarmIncident,
)
from app.repositories.base_repository import BaseRepository
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ExtractedEventRepository(BaseRepository[ExtractedEvent]):
    """Timeline events, including the review operations used by investigators."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ExtractedEvent)

    async def list_for_case(
        self,
        case_id: Optional[UUID] = None,
        include_hidden: bool = False,
        limit: int = 1000,
    ) -> List[ExtractedEvent]:
        """List events in chronological order."""
        filters = {"case_id": case_id} if case_id else {}
        if not include_hidden:
            filters["is_hidden"] = False
        return await self.get_all(
            limit=limit, filters=filters or None, order_by=ExtractedEvent.date.asc()
        )

    async def set_approval(self, event_id: UUID, is_approved: bool) -> Optional[ExtractedEvent]:
        """Approve or un-approve an event.

        Returns:
            The updated event, or None if it does not exist
        """
        event = await self.get_by_id(event_id)
        if event is None:
            return None
        try:
            event.is_approved = is_approved
            event.updated_at = datetime.now(timezone.utc)
            await self.session.flush()
            await self.session.commit()
            return event
        except SQLAlchemyError as e:
            await self.session.rollback()
            LOGGER.error(f"Error updating approval for event {event_id}: {str(e)}", exc_info=True)
            raise DatabaseError("Failed to update event approval", original_error=e)


class ExtractedEntityRepository(BaseRepository[ExtractedEntity]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ExtractedEntity)

    async def list_for_case(self, case_id: Optional[UUID] = None, limit: int = 1000) -> List[ExtractedEntity]:
        filters = {"case_id": case_id} if case_id else None
        return await self.get_all(limit=limit, filters=filters, order_by=ExtractedEntity.name.asc())


class ExtractedDiscrepancyRepository(BaseRepository[ExtractedDiscrepancy]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ExtractedDiscrepancy)

    async def list_for_case(
        self, case_id: Optional[UUID] = None, limit: int = 1000
    ) -> List[ExtractedDiscrepancy]:
        filters = {"case_id": case_id} if case_id else None
        return await self.get_all(
            limit=limit, filters=filters, order_by=ExtractedDiscrepancy.created_at.desc()
        )


class LegalClaimRepository(BaseRepository[LegalClaim]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, LegalClaim)


class ComplianceViolationRepository(BaseRepository[ComplianceViolation]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ComplianceViolation)


class HarmIncidentRepository(BaseRepository[RegulatoryHarmIncident]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, RegulatoryHarmIncident)


class FinancialLossRepository(BaseRepository[FinancialLoss]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, FinancialLoss)


@dataclass
class ResultRepositories:
    """The seven repositories one fan-out writes through."""

    events: ExtractedEventRepository
    entities: ExtractedEntityRepository
    discrepancies: ExtractedDiscrepancyRepository
    claims: LegalClaimRepository
    compliance_violations: ComplianceViolationRepository
    harm_incidents: HarmIncidentRepository
    financial_losses: FinancialLossRepository

    @classmethod
    def from_session(cls, session: AsyncSession) -> "ResultRepositories":
        return cls(
            events=ExtractedEventRepository(session),
            entities=ExtractedEntityRepository(session),
            discrepancies=ExtractedDiscrepancyRepository(session),
            claims=LegalClaimRepository(session),
            compliance_violations=ComplianceViolationRepository(session),
            harm_incidents=HarmIncidentRepository(session),
            financial_losses=FinancialLossRepository(session),
        )
