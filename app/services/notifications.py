"""
Registration emails.

The email itself is rendered and sent by an external endpoint; this module
builds its payload and hands it to a Celery task. Delivery is fire and forget:
a failure to enqueue is logged and never reaches the registration flow.
"""
import logging
from typing import Any

from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus
from app.tasks import send_notification_task

logger = logging.getLogger(__name__)

REGISTRATION_CONFIRMATION = "registration_confirmation"
WAITLIST_CONFIRMATION = "waitlist_confirmation"

DEFAULT_USER_NAME = "Event Participant"


def template_for_status(status: str) -> str:
    if status == RegistrationStatus.CONFIRMED.value:
        return REGISTRATION_CONFIRMATION
    return WAITLIST_CONFIRMATION


def format_event_date(event: Event) -> str:
    if event.date is None:
        return ""
    d = event.date
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def build_notification(template: str, registration: Registration, event: Event) -> dict[str, Any]:
    return {
        "type": template,
        "to": registration.user_email,
        "data": {
            "userName": registration.user_name or DEFAULT_USER_NAME,
            "eventTitle": event.title,
            "eventDate": format_event_date(event),
            "eventTime": f"{event.start_time} - {event.end_time}",
            "eventLocation": event.location,
            "status": registration.status,
            "registrationId": registration.id,
            "eventId": event.id,
        },
    }


def notify(template: str, registration: Registration, event: Event) -> bool:
    """Enqueue an email for ``registration``. Returns whether one was enqueued."""
    if not registration.user_email:
        return False

    payload = build_notification(template, registration, event)
    try:
        send_notification_task.delay(payload)
    except Exception:
        logger.warning(
            "Could not enqueue %s for registration %s", template, registration.id, exc_info=True
        )
        return False

    logger.info("Enqueued %s for registration %s", template, registration.id)
    return True
