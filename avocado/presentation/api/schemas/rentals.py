from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel


class RentalCreateRequest(BaseModel):
    item_id: int = 0
    due_date: date


class RentalResponse(BaseModel):
    rental_id: int
    item_id: int
    title: Optional[str]
    owner_id: int
    borrower_id: int
    due_date: date
    days_left: int
    reminder_sent: bool
    created_at: datetime


class RentalCreateResponse(BaseModel):
    message: str = "Rental created"
    rental: RentalResponse


class RentalListResponse(BaseModel):
    rentals: List[RentalResponse]
    count: int


class ReminderSweepResponse(BaseModel):
    message: str
    sent_count: int
    failed_count: int
