"""Review endpoints over extracted events, entities and discrepancies."""

from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_async_session as get_session
from app.core.exceptions import NotFoundError
from app.repositories.extraction_repository import (
    ExtractedDiscrepancyRepository,
    ExtractedEntityRepository,
    ExtractedEventRepository,
)
from app.schemas.analysis import (
    EventApprovalUpdate,
    ExtractedDiscrepancyOut,
    ExtractedEntityOut,
    ExtractedEventOut,
)
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_event_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> ExtractedEventRepository:
    return ExtractedEventRepository(db_session)


async def get_entity_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> ExtractedEntityRepository:
    return ExtractedEntityRepository(db_session)


async def get_discrepancy_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> ExtractedDiscrepancyRepository:
    return ExtractedDiscrepancyRepository(db_session)


@router.get(
    "/events",
    response_model=List[ExtractedEventOut],
    tags=["Events"],
    summary="List extracted events in date order",
    operation_id="list_extracted_events",
)
async def list_events(
    events: Annotated[ExtractedEventRepository, Depends(get_event_repository)],
    case_id: Optional[UUID] = Query(None),
    include_hidden: bool = Query(False),
) -> List[ExtractedEventOut]:
    records = await events.list_for_case(case_id, include_hidden=include_hidden)
    return [ExtractedEventOut.model_validate(record) for record in records]


@router.patch(
    "/events/{event_id}/approval",
    response_model=ExtractedEventOut,
    tags=["Events"],
    summary="Approve or reject an extracted event",
    operation_id="set_event_approval",
)
async def set_event_approval(
    event_id: UUID,
    body: EventApprovalUpdate,
    events: Annotated[ExtractedEventRepository, Depends(get_event_repository)],
) -> ExtractedEventOut:
    event = await events.set_approval(event_id, body.is_approved)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    LOGGER.info("Event approval changed", extra={"event_id": str(event_id), "approved": body.is_approved})
    return ExtractedEventOut.model_validate(event)


@router.delete(
    "/events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Events"],
    summary="Delete an extracted event",
    operation_id="delete_extracted_event",
)
async def delete_event(
    event_id: UUID,
    events: Annotated[ExtractedEventRepository, Depends(get_event_repository)],
) -> Response:
    if not await events.delete(event_id):
        raise NotFoundError(f"Event {event_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/entities",
    response_model=List[ExtractedEntityOut],
    tags=["Entities"],
    summary="List extracted entities",
    operation_id="list_extracted_entities",
)
async def list_entities(
    entities: Annotated[ExtractedEntityRepository, Depends(get_entity_repository)],
    case_id: Optional[UUID] = Query(None),
) -> List[ExtractedEntityOut]:
    return [ExtractedEntityOut.model_validate(record) for record in await entities.list_for_case(case_id)]


@router.get(
    "/discrepancies",
    response_model=List[ExtractedDiscrepancyOut],
    tags=["Discrepancies"],
    summary="List extracted discrepancies",
    operation_id="list_extracted_discrepancies",
)
async def list_discrepancies(
    discrepancies: Annotated[ExtractedDiscrepancyRepository, Depends(get_discrepancy_repository)],
    case_id: Optional[UUID] = Query(None),
) -> List[ExtractedDiscrepancyOut]:
    records = await discrepancies.list_for_case(case_id)
    return [ExtractedDiscrepancyOut.model_validate(record) for record in records]
