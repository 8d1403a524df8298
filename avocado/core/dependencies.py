from fastapi import Depends, Request

from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if not container:
        raise RuntimeError("Application container not initialised.")
    return container


def get_settings(container: ApplicationContainer = Depends(get_container)):
    return container.settings


def get_user_service(container: ApplicationContainer = Depends(get_container)):
    return container.user_service


def get_email_service(container: ApplicationContainer = Depends(get_container)):
    return container.email_service


def get_marketplace_service(container: ApplicationContainer = Depends(get_container)):
    return container.marketplace_service


def get_message_service(container: ApplicationContainer = Depends(get_container)):
    return container.message_service


def get_rental_service(container: ApplicationContainer = Depends(get_container)):
    return container.rental_service


def get_reminder_service(container: ApplicationContainer = Depends(get_container)):
    return container.reminder_service
