from typing import Optional

from fastapi import APIRouter, Query, status

from unconference.models.assignment import (
    AssignmentClearResponse,
    AssignmentGenerateResponse,
    AssignmentListResponse,
    AssignmentResponse,
)
from unconference.services.assignment_service import (
    clear_assignments_for_event,
    generate_assignments_for_event,
    list_assignments_for_event,
    list_participant_assignments,
    serialize_assignment,
)

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "service": "assignments"}


@router.post(
    "/{event_id}/assignments/generate",
    response_model=AssignmentGenerateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_assignments(event_id: str):
    assignments, statistics, warnings = await generate_assignments_for_event(event_id=event_id)
    return AssignmentGenerateResponse(
        event_id=event_id,
        assignments=[AssignmentResponse(**serialize_assignment(a)) for a in assignments],
        statistics=statistics,
        warnings=warnings,
    )


@router.get("/{event_id}/assignments", response_model=AssignmentListResponse)
async def list_assignments(
    event_id: str,
    round_number: Optional[int] = Query(default=None, ge=1),
):
    assignments = await list_assignments_for_event(event_id=event_id, round_number=round_number)
    return AssignmentListResponse(
        event_id=event_id,
        round_number=round_number,
        assignments=[AssignmentResponse(**serialize_assignment(a)) for a in assignments],
    )


@router.get(
    "/{event_id}/participants/{participant_id}/assignments",
    response_model=AssignmentListResponse,
)
async def list_assignments_for_participant(event_id: str, participant_id: str):
    assignments = await list_participant_assignments(event_id=event_id, participant_id=participant_id)
    return AssignmentListResponse(
        event_id=event_id,
        assignments=[AssignmentResponse(**serialize_assignment(a)) for a in assignments],
    )


@router.delete("/{event_id}/assignments", response_model=AssignmentClearResponse)
async def clear_assignments(event_id: str):
    deleted = await clear_assignments_for_event(event_id=event_id)
    return AssignmentClearResponse(event_id=event_id, deleted=deleted)
