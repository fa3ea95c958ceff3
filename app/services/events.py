import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityConflictError, EventNotFoundError
from app.core.locks import event_lock
from app.database.db import transaction
from app.models.events import Event
from app.services import registrations

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "category",
    "date",
    "start_time",
    "end_time",
    "location",
    "capacity",
    "organizer_id",
    "image_url",
    "is_featured",
)


def create_event(db: Session, **fields: Any) -> Event:
    event = Event(**fields, confirmed_count=0)
    with transaction(db):
        db.add(event)
        db.flush()
    db.refresh(event)
    logger.info("Created event %s with capacity %s", event.id, event.capacity)
    return event


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


def list_events(
    db: Session,
    *,
    category: str | None = None,
    organizer_id: str | None = None,
    featured: bool | None = None,
) -> list[Event]:
    stmt = select(Event)
    if category is not None:
        stmt = stmt.where(Event.category == category)
    if organizer_id is not None:
        stmt = stmt.where(Event.organizer_id == organizer_id)
    if featured is not None:
        stmt = stmt.where(Event.is_featured == featured)
    stmt = stmt.order_by(Event.created_at.desc(), Event.id.desc())
    return list(db.scalars(stmt))


def update_event(db: Session, event_id: int, **changes: Any) -> Event:
    """
    Apply a partial update. Capacity may not drop below the seats already
    confirmed; extra capacity is handed to the waitlist straight away.
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown event fields: {', '.join(sorted(unknown))}")

    with event_lock(event_id):
        with transaction(db):
            event = db.get(Event, event_id, populate_existing=True)
            if event is None:
                raise EventNotFoundError(event_id)

            capacity = changes.get("capacity")
            if capacity is not None and capacity < event.confirmed_count:
                raise CapacityConflictError(
                    f"Capacity {capacity} is below the {event.confirmed_count} confirmed registrations."
                )
            grows = capacity is not None and capacity > event.capacity

            for field, value in changes.items():
                setattr(event, field, value)
            db.flush()

            promoted = registrations.fill_open_seats(db, event_id) if grows else []

    if promoted:
        logger.info("Capacity change on event %s promoted %s registrations", event_id, len(promoted))
        registrations.notify_promoted(promoted)
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int) -> None:
    with event_lock(event_id):
        with transaction(db):
            event = db.get(Event, event_id)
            if event is None:
                raise EventNotFoundError(event_id)
            db.delete(event)
    logger.info("Deleted event %s", event_id)
