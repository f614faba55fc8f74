"""Typed shape of the ``extract_intelligence`` tool-call arguments.

Field names mirror the camelCase keys the model is asked to produce; the
Python attributes are snake_case and the models accept either spelling.
Validation is deliberately lax about individual values (nulls, numbers sent
as strings) because one sloppy field must not sink a whole extraction.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EventCategory(str, Enum):
    """Timeline event categories."""
    BUSINESS_INTERFERENCE = "Business Interference"
    HARASSMENT = "Harassment"
    LEGAL_PROCEEDING = "Legal Proceeding"
    CRIMINAL_ALLEGATION = "Criminal Allegation"


class EntityType(str, Enum):
    PERSON = "Person"
    ORGANIZATION = "Organization"
    OFFICIAL_BODY = "Official Body"
    LEGAL_ENTITY = "Legal Entity"


class DiscrepancyType(str, Enum):
    PROCEDURAL_FAILURE = "Procedural Failure"
    CHAIN_OF_CUSTODY = "Chain of Custody"
    TESTIMONY_CONTRADICTION = "Testimony Contradiction"
    DOCUMENT_FORGERY = "Document Forgery"
    TIMELINE_INCONSISTENCY = "Timeline Inconsistency"
    OTHER = "Other"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClaimType(str, Enum):
    CRIMINAL = "criminal"
    REGULATORY = "regulatory"
    CIVIL = "civil"


class ClaimFramework(str, Enum):
    PAKISTANI = "pakistani"
    INTERNATIONAL = "international"


class ViolationType(str, Enum):
    PROCEDURAL = "procedural"
    TIMELINE = "timeline"
    DOCUMENTATION = "documentation"
    CONSTITUTIONAL = "constitutional"


class IncidentType(str, Enum):
    BANKING = "banking"
    REGULATORY_NOTICE = "regulatory_notice"
    LICENSE = "license"
    CONTRACT = "contract"


class InstitutionType(str, Enum):
    BANK = "bank"
    REGULATOR = "regulator"
    VENDOR = "vendor"
    CLIENT = "client"
    GOVERNMENT = "government"


class LossCategory(str, Enum):
    LOST_REVENUE = "lost_revenue"
    LEGAL_FEES = "legal_fees"
    OPPORTUNITY_COST = "opportunity_cost"
    OPERATIONAL_COST = "operational_cost"
    ASSET_LOSS = "asset_loss"
    REPUTATION_DAMAGE = "reputation_damage"
    COMPLIANCE_COST = "compliance_cost"


def _lenient_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


_TRUE_WORDS = {"true", "yes", "y", "1"}
_FALSE_WORDS = {"false", "no", "n", "0"}


def _as_text(value: Any) -> str:
    """Render a non-string value for a text column; lists are joined with ', '."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item is not None)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_flag(value: Any) -> Optional[bool]:
    """Interpret a loose yes/no value, None when it cannot be read as one."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def _scalar_type(annotation: Any) -> Any:
    # Optional[X] -> X
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class ExtractedItem(BaseModel):
    """Base for every extracted item."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def _field_types(cls) -> Dict[str, Any]:
        """Scalar type of every field, keyed by both attribute name and camelCase key."""
        types = {}
        for name, info in cls.model_fields.items():
            field_type = _scalar_type(info.annotation)
            types[name] = field_type
            types[to_camel(name)] = field_type
        return types

    @model_validator(mode="before")
    @classmethod
    def _coerce_values(cls, data: Any) -> Any:
        """Null means "use the default"; wrong-typed text and flags are coerced.

        Numbers or lists sent for a text field become text, and a flag that
        cannot be read as yes/no falls back to its default.
        """
        if not isinstance(data, dict):
            return data

        field_types = cls._field_types()
        cleaned = {}
        for key, value in data.items():
            if value is None:
                continue
            field_type = field_types.get(key)
            if field_type is str and not isinstance(value, str):
                value = _as_text(value)
            elif field_type is bool and not isinstance(value, bool):
                value = _as_flag(value)
                if value is None:
                    continue
            cleaned[key] = value
        return cleaned


class EventItem(ExtractedItem):
    date: str = ""
    category: str = EventCategory.LEGAL_PROCEEDING.value
    description: str = ""
    individuals: Optional[str] = None
    legal_action: Optional[str] = None
    outcome: Optional[str] = None
    evidence_discrepancy: Optional[str] = None
    sources: Optional[str] = None
    confidence_score: Optional[float] = None

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Optional[float]:
        score = _lenient_float(value)
        if score is None:
            return None
        return min(max(score, 0.0), 1.0)


class EntityItem(ExtractedItem):
    name: str = ""
    entity_type: str = EntityType.PERSON.value
    role: Optional[str] = None
    description: Optional[str] = None


class DiscrepancyItem(ExtractedItem):
    discrepancy_type: str = DiscrepancyType.OTHER.value
    title: str = ""
    description: str = ""
    severity: str = Severity.MEDIUM.value
    legal_reference: Optional[str] = None
    related_dates: List[str] = Field(default_factory=list)

    @field_validator("related_dates", mode="before")
    @classmethod
    def _coerce_dates(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]


class ClaimItem(ExtractedItem):
    allegation_text: str = ""
    claim_type: str = ClaimType.CRIMINAL.value
    legal_framework: str = ClaimFramework.PAKISTANI.value
    legal_section: str = ""
    alleged_by: Optional[str] = None
    alleged_against: Optional[str] = None
    date_alleged: Optional[str] = None
    source_document: Optional[str] = None


class ComplianceViolationItem(ExtractedItem):
    violation_type: str = ViolationType.PROCEDURAL.value
    title: str = ""
    description: str = ""
    severity: str = Severity.MEDIUM.value
    legal_consequence: Optional[str] = None
    remediation_possible: bool = False


class FinancialHarmItem(ExtractedItem):
    """One harm incident together with the loss it caused."""

    incident_type: str = IncidentType.BANKING.value
    title: str = ""
    description: Optional[str] = None
    date: Optional[str] = None
    institution_name: Optional[str] = None
    institution_type: Optional[str] = None
    severity: Optional[str] = None
    status: Optional[str] = None
    loss_amount: Optional[float] = None
    currency: Optional[str] = None
    loss_category: str = LossCategory.LOST_REVENUE.value
    loss_description: Optional[str] = None
    is_documented: bool = False

    @field_validator("loss_amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> Optional[float]:
        if isinstance(value, str):
            value = value.replace(",", "").strip()
        return _lenient_float(value)


class ExtractionResult(ExtractedItem):
    """All six categories returned by one forced tool call."""

    events: List[EventItem] = Field(default_factory=list)
    entities: List[EntityItem] = Field(default_factory=list)
    discrepancies: List[DiscrepancyItem] = Field(default_factory=list)
    claims: List[ClaimItem] = Field(default_factory=list)
    compliance_violations: List[ComplianceViolationItem] = Field(default_factory=list)
    financial_harm: List[FinancialHarmItem] = Field(default_factory=list)

    @field_validator(
        "events",
        "entities",
        "discrepancies",
        "claims",
        "compliance_violations",
        "financial_harm",
        mode="before",
    )
    @classmethod
    def _keep_objects(cls, value: Any) -> list:
        # Stray strings or numbers inside a category are dropped, not fatal
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, BaseModel))]

    def counts(self) -> dict:
        return {
            "events": len(self.events),
            "entities": len(self.entities),
            "discrepancies": len(self.discrepancies),
            "claims": len(self.claims),
            "compliance_violations": len(self.compliance_violations),
            "financial_harm": len(self.financial_harm),
        }
