from dataclasses import dataclass

from ..application.services.marketplace_service import MarketplaceService
from ..application.services.message_service import MessageService
from ..application.services.reminder_service import ReminderService
from ..application.services.rental_service import RentalService
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..services.email_service import EmailService
from ..services.user_service import UserService
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    database: SQLiteDatabase
    user_service: UserService
    email_service: EmailService
    marketplace_service: MarketplaceService
    message_service: MessageService
    rental_service: RentalService
    reminder_service: ReminderService
