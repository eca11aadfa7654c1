from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_checkin_repository
from app.core.access import assert_user_is_creator
from app.core.rbac import MANAGER, require_roles
from app.core.security import Identity, get_current_identity
from app.repositories.checkins import (
    AssignmentNotFoundError,
    CheckInCreationError,
    CheckInNotFoundError,
    CheckInRepository,
)
from app.schemas.checkin import (
    AssignedCheckInList,
    CheckInCreated,
    CheckInCreateRequest,
    CheckInDetails,
    CheckInList,
    CreateCheckInData,
    ResponseSubmitRequest,
    ResponseSubmitted,
)
from app.schemas.envelope import ApiResponse

router = APIRouter(prefix="/checkins", tags=["checkins"])


@router.post("", response_model=ApiResponse[CheckInCreated], status_code=status.HTTP_201_CREATED)
def create_checkin(
    payload: CheckInCreateRequest,
    repo: CheckInRepository = Depends(get_checkin_repository),
    current: Identity = Depends(require_roles(MANAGER)),
):
    data = CreateCheckInData(
        title=payload.title,
        description=payload.description,
        questions=payload.questions,
        due_date=payload.due_date,
        created_by=current.id,
        assigned_user_ids=payload.assigned_user_ids,
    )
    try:
        checkin = repo.create_checkin(data)
    except CheckInCreationError:
        raise HTTPException(status_code=500, detail="Failed to create check-in")

    return ApiResponse(
        message="Check-in created successfully",
        data=CheckInCreated(check_in=checkin),
    )


@router.get("/manager", response_model=ApiResponse[CheckInList])
def list_manager_checkins(
    repo: CheckInRepository = Depends(get_checkin_repository),
    current: Identity = Depends(require_roles(MANAGER)),
):
    """Check-ins created by the calling manager."""
    checkins = repo.get_checkins_by_manager(current.id)
    return ApiResponse(
        message="Check-ins fetched successfully",
        data=CheckInList(check_ins=checkins, count=len(checkins)),
    )


@router.get("/assigned", response_model=ApiResponse[AssignedCheckInList])
def list_assigned_checkins(
    repo: CheckInRepository = Depends(get_checkin_repository),
    current: Identity = Depends(get_current_identity),
):
    """Check-ins assigned to the caller, each with the caller's assignment status."""
    assigned = repo.get_assigned_checkins_for_user(current.id)
    return ApiResponse(
        message="Assigned check-ins fetched successfully",
        data=AssignedCheckInList(assigned_check_ins=assigned, count=len(assigned)),
    )


@router.get("/{checkin_id}/details", response_model=ApiResponse[CheckInDetails])
def get_checkin_details(
    checkin_id: str,
    repo: CheckInRepository = Depends(get_checkin_repository),
    current: Identity = Depends(require_roles(MANAGER)),
):
    try:
        details = repo.get_checkin_details(checkin_id)
    except CheckInNotFoundError:
        raise HTTPException(status_code=404, detail="Check-in not found")

    assert_user_is_creator(current, details.check_in)
    return ApiResponse(message="Check-in details fetched successfully", data=details)


@router.post(
    "/{checkin_id}/responses",
    response_model=ApiResponse[ResponseSubmitted],
    status_code=status.HTTP_201_CREATED,
)
def submit_response(
    checkin_id: str,
    payload: ResponseSubmitRequest,
    repo: CheckInRepository = Depends(get_checkin_repository),
    current: Identity = Depends(get_current_identity),
):
    # the responding user is always the token's subject
    try:
        record = repo.submit_response(checkin_id, current.id, payload.answers)
    except CheckInNotFoundError:
        raise HTTPException(status_code=404, detail="Check-in not found")
    except AssignmentNotFoundError:
        raise HTTPException(status_code=403, detail="You are not assigned to this check-in")

    return ApiResponse(
        message="Response submitted successfully",
        data=ResponseSubmitted(
            check_in_id=checkin_id,
            user_id=current.id,
            submitted_at=record.updated_at,
        ),
    )
