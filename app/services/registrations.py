import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateRegistrationError,
    EventFullError,
    EventNotFoundError,
    InvalidTransitionError,
    RegistrationNotFoundError,
)
from app.core.locks import event_lock
from app.database.db import transaction
from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus
from app.services import admission, notifications

logger = logging.getLogger(__name__)

CONFIRMED = RegistrationStatus.CONFIRMED.value
WAITLIST = RegistrationStatus.WAITLIST.value


def _claim_seat(db: Session, event_id: int) -> bool:
    """Take one seat if the event still has one. Single conditional UPDATE."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.confirmed_count < Event.capacity)
        .values(confirmed_count=Event.confirmed_count + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    return res.rowcount == 1  # type: ignore


def _release_seat(db: Session, event_id: int) -> None:
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.confirmed_count > 0)
        .values(confirmed_count=Event.confirmed_count - 1)
        .execution_options(synchronize_session=False)
    )
    db.execute(stmt)


def _waitlist_query(event_id: int):
    return (
        select(Registration)
        .where(Registration.event_id == event_id, Registration.status == WAITLIST)
        .order_by(Registration.registered_at.asc(), Registration.id.asc())
    )


def _get_event_for_update(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id, populate_existing=True)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


def _require_event(db: Session, event_id: int) -> None:
    if db.scalar(select(Event.id).where(Event.id == event_id)) is None:
        raise EventNotFoundError(event_id)


# ---------- Admission ----------
def create_registration(
    db: Session,
    *,
    event_id: int,
    user_id: str,
    user_email: str = "",
    user_name: str = "",
) -> Registration:
    """
    Register a user for an event as confirmed or waitlisted.

    The confirmed count is read, decided on and written under the event lock,
    and the seat itself is claimed with a conditional update, so concurrent
    requests can never confirm more registrations than the event has seats.
    """
    with event_lock(event_id):
        with transaction(db):
            registration = _create_registration_in_transaction(
                db, event_id, user_id, user_email, user_name
            )
            event = registration.event

    notifications.notify(
        notifications.template_for_status(registration.status), registration, event
    )
    return registration


def _create_registration_in_transaction(
    db: Session, event_id: int, user_id: str, user_email: str, user_name: str
) -> Registration:
    event = _get_event_for_update(db, event_id)

    if get_user_registration_for_event(db, event_id, user_id) is not None:
        raise DuplicateRegistrationError(f"User {user_id} is already registered for event {event_id}.")

    status = admission.decide_status(event, event.confirmed_count)
    if status is RegistrationStatus.CONFIRMED and not _claim_seat(db, event_id):
        status = RegistrationStatus.WAITLIST

    registration = Registration(
        event_id=event_id,
        user_id=user_id,
        user_email=user_email,
        user_name=user_name,
        status=status.value,
    )
    db.add(registration)
    try:
        db.flush()  # gets registration.id
    except IntegrityError as exc:
        # uq_registration_event_user caught a duplicate the lock let through
        logger.warning("Duplicate registration for event %s by user %s", event_id, user_id)
        raise DuplicateRegistrationError(
            f"User {user_id} is already registered for event {event_id}."
        ) from exc
    db.refresh(registration)

    logger.info(
        "Registration %s for event %s by user %s is %s",
        registration.id, event_id, user_id, registration.status,
    )
    return registration


def _promote_next_in_transaction(db: Session, event_id: int) -> Registration | None:
    candidate = db.scalars(_waitlist_query(event_id).limit(1)).first()
    if candidate is None:
        return None
    if not _claim_seat(db, event_id):
        return None

    candidate.status = CONFIRMED
    db.flush()
    logger.info("Promoted registration %s for event %s off the waitlist", candidate.id, event_id)
    return candidate


def fill_open_seats(db: Session, event_id: int) -> list[Registration]:
    """Promote waitlisted registrations, oldest first, until seats or waitlist run out."""
    promoted = []
    while True:
        registration = _promote_next_in_transaction(db, event_id)
        if registration is None:
            return promoted
        promoted.append(registration)


def notify_promoted(registrations: list[Registration]) -> None:
    for registration in registrations:
        notifications.notify(
            notifications.REGISTRATION_CONFIRMATION, registration, registration.event
        )


def promote_next(db: Session, event_id: int) -> Registration | None:
    """Promote the earliest waitlisted registration if a seat is free."""
    with event_lock(event_id):
        with transaction(db):
            _get_event_for_update(db, event_id)
            promoted = _promote_next_in_transaction(db, event_id)

    if promoted is not None:
        notify_promoted([promoted])
    return promoted


# ---------- Updates ----------
def update_registration(
    db: Session,
    registration_id: int,
    *,
    user_email: str | None = None,
    user_name: str | None = None,
    status: str | None = None,
) -> Registration:
    new_status = None
    if status is not None:
        try:
            new_status = RegistrationStatus(status).value
        except ValueError:
            raise InvalidTransitionError(f"Unknown registration status {status!r}.") from None

    event_id = get_registration(db, registration_id).event_id

    with event_lock(event_id):
        with transaction(db):
            registration = db.get(Registration, registration_id, populate_existing=True)
            if registration is None:
                raise RegistrationNotFoundError(registration_id)
            previous_status = registration.status

            if user_email is not None:
                registration.user_email = user_email
            if user_name is not None:
                registration.user_name = user_name

            if new_status is not None and new_status != previous_status:
                if new_status == WAITLIST:
                    raise InvalidTransitionError("A confirmed registration cannot be moved back to the waitlist.")
                if not _claim_seat(db, event_id):
                    raise EventFullError(f"Event {event_id} has no free seats.")
                registration.status = new_status

            db.flush()
            event = registration.event

    if admission.on_status_transition(previous_status, registration.status):
        logger.info("Registration %s promoted by update", registration.id)
        notifications.notify(notifications.REGISTRATION_CONFIRMATION, registration, event)
    return registration


def delete_registration(db: Session, registration_id: int) -> Registration | None:
    """
    Delete a registration. When it held a seat, the seat goes to the earliest
    waitlisted registration, which is returned; otherwise returns None.
    """
    event_id = get_registration(db, registration_id).event_id

    with event_lock(event_id):
        with transaction(db):
            registration = db.get(Registration, registration_id, populate_existing=True)
            if registration is None:
                raise RegistrationNotFoundError(registration_id)

            held_seat = registration.status == CONFIRMED
            db.delete(registration)
            db.flush()

            promoted = None
            if held_seat:
                _release_seat(db, event_id)
                promoted = _promote_next_in_transaction(db, event_id)

    logger.info("Deleted registration %s for event %s", registration_id, event_id)
    if promoted is not None:
        notify_promoted([promoted])
    return promoted


# ---------- Queries ----------
def get_registration(db: Session, registration_id: int) -> Registration:
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise RegistrationNotFoundError(registration_id)
    return registration


def list_registrations(db: Session) -> list[Registration]:
    stmt = select(Registration).order_by(Registration.created_at.desc(), Registration.id.desc())
    return list(db.scalars(stmt))


def list_event_registrations(db: Session, event_id: int) -> list[Registration]:
    _require_event(db, event_id)
    stmt = (
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.registered_at.asc(), Registration.id.asc())
    )
    return list(db.scalars(stmt))


def list_user_registrations(db: Session, user_id: str) -> list[Registration]:
    stmt = (
        select(Registration)
        .where(Registration.user_id == user_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def get_user_registration_for_event(db: Session, event_id: int, user_id: str) -> Registration | None:
    stmt = select(Registration).where(
        Registration.event_id == event_id, Registration.user_id == user_id
    )
    return db.scalars(stmt).first()


def count_registrations(db: Session, event_id: int, status: str) -> int:
    count = db.scalar(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.status == status,
        )
    )
    return int(count or 0)


def list_waitlist(db: Session, event_id: int) -> list[Registration]:
    return list(db.scalars(_waitlist_query(event_id)))


def get_waitlist_position(db: Session, event_id: int, user_id: str) -> int | None:
    _require_event(db, event_id)
    return admission.compute_waitlist_position(list_waitlist(db, event_id), user_id)


# ---------- Reports ----------
def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        raise EventNotFoundError(event_id)

    confirmed = count_registrations(db, event_id, CONFIRMED)
    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "confirmed_count": confirmed,
        "waitlist_count": count_registrations(db, event_id, WAITLIST),
        "available_seats": max(event.capacity - confirmed, 0),
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.capacity)))
    total_confirmed = db.scalar(
        select(func.count(Registration.id)).where(Registration.status == CONFIRMED)
    )
    total_waitlisted = db.scalar(
        select(func.count(Registration.id)).where(Registration.status == WAITLIST)
    )

    return {
        "total_capacity": int(total_capacity or 0),
        "total_confirmed": int(total_confirmed or 0),
        "total_waitlisted": int(total_waitlisted or 0),
    }
