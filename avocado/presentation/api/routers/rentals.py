from fastapi import APIRouter, Depends, status

from ....application.services.rental_service import RentalService, today
from ....core.dependencies import get_rental_service
from ....domain.models import Rental, User
from ..dependencies import get_current_user
from ..schemas.rentals import (
    RentalCreateRequest,
    RentalCreateResponse,
    RentalListResponse,
    RentalResponse,
)

router = APIRouter(prefix="/api/rentals", tags=["Rentals"])


@router.post("/create", response_model=RentalCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_rental(
    payload: RentalCreateRequest,
    user: User = Depends(get_current_user),
    service: RentalService = Depends(get_rental_service),
) -> RentalCreateResponse:
    rental = service.create_rental(user, payload.item_id, payload.due_date)
    return RentalCreateResponse(rental=_serialize_rental(rental))


@router.get("/active", response_model=RentalListResponse)
async def list_active_rentals(
    user: User = Depends(get_current_user),
    service: RentalService = Depends(get_rental_service),
) -> RentalListResponse:
    rentals = service.list_active(user)
    return RentalListResponse(
        rentals=[_serialize_rental(rental) for rental in rentals],
        count=len(rentals),
    )


def _serialize_rental(rental: Rental) -> RentalResponse:
    return RentalResponse(
        rental_id=rental.id,
        item_id=rental.item_id,
        title=rental.item_title,
        owner_id=rental.owner_id,
        borrower_id=rental.borrower_id,
        due_date=rental.rental_due_date,
        days_left=(rental.rental_due_date - today()).days,
        reminder_sent=rental.reminder_sent,
        created_at=rental.created_at,
    )
