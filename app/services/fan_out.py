"""Fan one extraction result out into the six result tables.

Each category is written by its own batch insert and commits on its own.
There is no surrounding transaction: a failing category is recorded in its
:class:`CategoryOutcome` and the remaining categories still run.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.exceptions import AppError
from app.repositories.extraction_repository import ResultRepositories
from app.schemas.extraction import (
    ClaimItem,
    ComplianceViolationItem,
    DiscrepancyItem,
    EntityItem,
    EventItem,
    ExtractionResult,
    FinancialHarmItem,
)
from app.utils.dates import normalize_date
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

EXTRACTION_METHOD = "ai_analysis"
DEFAULT_CURRENCY = "PKR"

CATEGORIES = (
    "events",
    "entities",
    "discrepancies",
    "claims",
    "compliance_violations",
    "financial_harm",
)


@dataclass
class CategoryOutcome:
    """Result of writing one category.

    ``skipped`` counts items dropped before the insert (invalid dates,
    losses whose incident was not stored).
    """

    category: str
    extracted: int = 0
    inserted: int = 0
    skipped: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FanOutOutcome:
    categories: Dict[str, CategoryOutcome] = field(default_factory=dict)
    losses: CategoryOutcome = field(default_factory=lambda: CategoryOutcome("financial_losses"))

    def inserted_counts(self) -> Dict[str, int]:
        return {name: outcome.inserted for name, outcome in self.categories.items()}

    @property
    def failures(self) -> List[CategoryOutcome]:
        outcomes = list(self.categories.values()) + [self.losses]
        return [outcome for outcome in outcomes if not outcome.ok]

    def error_summary(self) -> Optional[str]:
        """One line naming every failed category, or None if all succeeded."""
        if not self.failures:
            return None
        return "; ".join(f"{outcome.category}: {outcome.error}" for outcome in self.failures)


def to_calendar_date(value: Any) -> Optional[date]:
    """Normalize and parse a date, None when it is not a real calendar day."""
    normalized = normalize_date(value)
    if normalized is None:
        return None
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        # Normalization accepts day 31 for every month
        LOGGER.warning(f'Date is not a calendar day, skipping: "{normalized}"')
        return None


def to_amount(value: Optional[float]) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return Decimal("0")


class ResultFanOut:
    """Writes an :class:`ExtractionResult` through the result repositories."""

    def __init__(self, repositories: ResultRepositories):
        self.repositories = repositories

    async def persist(
        self,
        result: ExtractionResult,
        case_id: Optional[uuid.UUID] = None,
        upload_id: Optional[uuid.UUID] = None,
    ) -> FanOutOutcome:
        outcome = FanOutOutcome()
        context = {"case_id": case_id, "source_upload_id": upload_id}

        outcome.categories["events"] = await self._write_events(result.events, context)
        outcome.categories["entities"] = await self._write(
            "entities",
            self.repositories.entities.bulk_create,
            [self._entity_row(item, context) for item in result.entities],
        )
        outcome.categories["discrepancies"] = await self._write(
            "discrepancies",
            self.repositories.discrepancies.bulk_create,
            [self._discrepancy_row(item, context) for item in result.discrepancies],
        )
        outcome.categories["claims"] = await self._write(
            "claims",
            self.repositories.claims.bulk_create,
            [self._claim_row(item, context) for item in result.claims],
        )
        outcome.categories["compliance_violations"] = await self._write(
            "compliance_violations",
            self.repositories.compliance_violations.bulk_create,
            [self._violation_row(item, case_id) for item in result.compliance_violations],
        )
        harm, losses = await self._write_financial_harm(result.financial_harm, case_id)
        outcome.categories["financial_harm"] = harm
        outcome.losses = losses

        LOGGER.info(
            "Fan-out finished",
            extra={
                "inserted": outcome.inserted_counts(),
                "losses_inserted": outcome.losses.inserted,
                "failed_categories": [failure.category for failure in outcome.failures],
            },
        )
        return outcome

    async def _write(
        self,
        category: str,
        insert: Callable[[List[Dict[str, Any]]], Awaitable[List[uuid.UUID]]],
        rows: List[Dict[str, Any]],
        extracted: Optional[int] = None,
    ) -> CategoryOutcome:
        outcome = CategoryOutcome(
            category=category,
            extracted=len(rows) if extracted is None else extracted,
        )
        outcome.skipped = outcome.extracted - len(rows)
        if not rows:
            return outcome

        try:
            ids = await insert(rows)
            outcome.inserted = len(ids)
        except AppError as e:
            outcome.error = e.message
            LOGGER.error(f"Failed to insert {category}: {e.message}", extra={"rows": len(rows)})
        except Exception as e:
            outcome.error = str(e)
            LOGGER.error(f"Failed to insert {category}: {e}", exc_info=True, extra={"rows": len(rows)})
        return outcome

    async def _write_events(self, events: List[EventItem], context: Dict[str, Any]) -> CategoryOutcome:
        rows = []
        for item in events:
            event_date = to_calendar_date(item.date)
            if event_date is None:
                LOGGER.warning(
                    "Dropping event with invalid date",
                    extra={"date": item.date, "description": item.description[:80]},
                )
                continue
            rows.append(self._event_row(item, event_date, context))

        return await self._write(
            "events", self.repositories.events.bulk_create, rows, extracted=len(events)
        )

    async def _write_financial_harm(
        self, items: List[FinancialHarmItem], case_id: Optional[uuid.UUID]
    ) -> Tuple[CategoryOutcome, CategoryOutcome]:
        # Correlation id doubles as the incident primary key
        correlated = [(uuid.uuid4(), item) for item in items]
        incident_rows = [self._incident_row(cid, item, case_id) for cid, item in correlated]

        stored_ids: List[uuid.UUID] = []

        async def insert_incidents(rows: List[Dict[str, Any]]) -> List[uuid.UUID]:
            ids = await self.repositories.harm_incidents.bulk_create(rows)
            stored_ids.extend(ids)
            return ids

        harm = await self._write("financial_harm", insert_incidents, incident_rows)
        losses = CategoryOutcome(category="financial_losses", extracted=len(items))

        if not harm.ok:
            losses.skipped = len(items)
            LOGGER.warning("Incident insert failed, no losses attempted")
            return harm, losses

        stored = set(stored_ids)
        loss_rows = [
            self._loss_row(cid, item, case_id) for cid, item in correlated if cid in stored
        ]
        if len(loss_rows) < len(items):
            LOGGER.warning(
                "Some incidents were not stored, their losses are dropped",
                extra={"incidents": len(items), "stored": len(stored)},
            )

        losses = await self._write(
            "financial_losses",
            self.repositories.financial_losses.bulk_create,
            loss_rows,
            extracted=len(items),
        )
        return harm, losses

    @staticmethod
    def _event_row(item: EventItem, event_date: date, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **context,
            "date": event_date,
            "category": item.category,
            "description": item.description,
            "individuals": item.individuals or "",
            "legal_action": item.legal_action or "",
            "outcome": item.outcome or "",
            "evidence_discrepancy": item.evidence_discrepancy or "",
            "sources": item.sources or "",
            "confidence_score": item.confidence_score,
            "is_approved": True,
            "is_hidden": False,
            "extraction_method": EXTRACTION_METHOD,
        }

    @staticmethod
    def _entity_row(item: EntityItem, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **context,
            "name": item.name,
            "entity_type": item.entity_type,
            "role": item.role,
            "description": item.description,
        }

    @staticmethod
    def _discrepancy_row(item: DiscrepancyItem, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **context,
            "discrepancy_type": item.discrepancy_type,
            "title": item.title,
            "description": item.description,
            "severity": item.severity,
            "legal_reference": item.legal_reference,
            "related_dates": item.related_dates,
        }

    @staticmethod
    def _claim_row(item: ClaimItem, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **context,
            "allegation_text": item.allegation_text,
            "claim_type": item.claim_type,
            "legal_framework": item.legal_framework,
            "legal_section": item.legal_section,
            "alleged_by": item.alleged_by,
            "alleged_against": item.alleged_against,
            "date_alleged": to_calendar_date(item.date_alleged) if item.date_alleged else None,
            "source_document": item.source_document,
            "status": "unverified",
            "support_score": 0,
        }

    @staticmethod
    def _violation_row(item: ComplianceViolationItem, case_id: Optional[uuid.UUID]) -> Dict[str, Any]:
        return {
            "case_id": case_id,
            "violation_type": item.violation_type,
            "title": item.title,
            "description": item.description,
            "severity": item.severity,
            "legal_consequence": item.legal_consequence,
            "remediation_possible": item.remediation_possible,
            "resolved": False,
        }

    @staticmethod
    def _incident_row(
        correlation_id: uuid.UUID, item: FinancialHarmItem, case_id: Optional[uuid.UUID]
    ) -> Dict[str, Any]:
        return {
            "id": correlation_id,
            "case_id": case_id,
            "incident_type": item.incident_type,
            "title": item.title,
            "description": item.description,
            "incident_date": to_calendar_date(item.date) if item.date else None,
            "institution_name": item.institution_name,
            "institution_type": item.institution_type,
            "severity": item.severity,
            "status": item.status or "active",
        }

    @staticmethod
    def _loss_row(
        incident_id: uuid.UUID, item: FinancialHarmItem, case_id: Optional[uuid.UUID]
    ) -> Dict[str, Any]:
        return {
            "case_id": case_id,
            "incident_id": incident_id,
            "amount": to_amount(item.loss_amount),
            "currency": item.currency or DEFAULT_CURRENCY,
            "loss_category": item.loss_category,
            "description": item.loss_description or item.description or "",
            "is_documented": item.is_documented,
            "is_estimated": not item.is_documented,
        }
