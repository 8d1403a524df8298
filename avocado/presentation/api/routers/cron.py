from typing import Optional

from fastapi import APIRouter, Depends

from ....application.services.reminder_service import ReminderService
from ....core.dependencies import get_reminder_service
from ..schemas.rentals import ReminderSweepResponse

router = APIRouter(prefix="/api/cron", tags=["Cron"])


@router.get("/send_reminders", response_model=ReminderSweepResponse)
async def send_reminders(
    api_key: Optional[str] = None,
    service: ReminderService = Depends(get_reminder_service),
) -> ReminderSweepResponse:
    """Reminder sweep, called on a schedule with the shared cron key."""
    result = service.send_reminders(api_key)
    return ReminderSweepResponse(
        message=f"Reminders sent: {result.sent_count}",
        sent_count=result.sent_count,
        failed_count=result.failed_count,
    )
