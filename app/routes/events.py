from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityConflictError, EventNotFoundError, LockUnavailableError
from app.database.db import get_db
from app.schemas.events import (
    EventCreate,
    EventOut,
    EventStatsOut,
    EventUpdate,
    WaitlistPositionOut,
)
from app.schemas.registrations import RegistrationOut
from app.services import events as event_service
from app.services import registrations as registration_service

router = APIRouter(prefix="/event", tags=["events"])


@router.post("", response_model=EventOut)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    return event_service.create_event(db, **payload.model_dump())


@router.get("", response_model=list[EventOut])
def list_events(
    category: str | None = None,
    organizer_id: str | None = None,
    featured: bool | None = None,
    db: Session = Depends(get_db),
):
    return event_service.list_events(
        db, category=category, organizer_id=organizer_id, featured=featured
    )


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    try:
        return event_service.get_event(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: int, payload: EventUpdate, db: Session = Depends(get_db)):
    try:
        return event_service.update_event(
            db, event_id, **payload.model_dump(exclude_unset=True)
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CapacityConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: int, db: Session = Depends(get_db)):
    try:
        event_service.delete_event(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    try:
        return registration_service.get_event_stats(db, event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")


@router.get("/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(event_id: int, db: Session = Depends(get_db)):
    try:
        return registration_service.list_event_registrations(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{event_id}/waitlist/{user_id}", response_model=WaitlistPositionOut)
def waitlist_position(event_id: int, user_id: str, db: Session = Depends(get_db)):
    try:
        position = registration_service.get_waitlist_position(db, event_id, user_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if position is None:
        raise HTTPException(status_code=404, detail="User is not on the waitlist")
    return {"event_id": event_id, "user_id": user_id, "position": position}


@router.post("/{event_id}/promote", response_model=RegistrationOut | None)
def promote_next(event_id: int, db: Session = Depends(get_db)):
    """Move the earliest waitlisted registration into a free seat, if any."""
    try:
        return registration_service.promote_next(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
