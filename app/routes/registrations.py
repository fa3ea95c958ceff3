from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateRegistrationError,
    EventFullError,
    EventNotFoundError,
    InvalidTransitionError,
    LockUnavailableError,
    RegistrationNotFoundError,
)
from app.database.db import get_db
from app.schemas.registrations import (
    RegistrationDeleteOut,
    RegistrationOut,
    RegistrationRequest,
    RegistrationUpdate,
)
from app.services import registrations as registration_service

router = APIRouter(prefix="/registration", tags=["registrations"])


@router.post("", response_model=RegistrationOut)
def register(payload: RegistrationRequest, db: Session = Depends(get_db)):
    try:
        return registration_service.create_registration(
            db,
            event_id=payload.event_id,
            user_id=payload.user_id,
            user_email=payload.user_email,
            user_name=payload.user_name,
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateRegistrationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("", response_model=list[RegistrationOut])
def list_registrations(db: Session = Depends(get_db)):
    return registration_service.list_registrations(db)


@router.get("/user/{user_id}", response_model=list[RegistrationOut])
def user_registrations(user_id: str, db: Session = Depends(get_db)):
    return registration_service.list_user_registrations(db, user_id)


@router.get("/event/{event_id}/user/{user_id}", response_model=RegistrationOut)
def user_registration_for_event(event_id: int, user_id: str, db: Session = Depends(get_db)):
    registration = registration_service.get_user_registration_for_event(db, event_id, user_id)
    if registration is None:
        raise HTTPException(status_code=404, detail="Registration not found")
    return registration


@router.get("/{registration_id}", response_model=RegistrationOut)
def get_registration(registration_id: int, db: Session = Depends(get_db)):
    try:
        return registration_service.get_registration(db, registration_id)
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{registration_id}", response_model=RegistrationOut)
def update_registration(
    registration_id: int, payload: RegistrationUpdate, db: Session = Depends(get_db)
):
    status = payload.status.value if payload.status is not None else None
    try:
        return registration_service.update_registration(
            db,
            registration_id,
            user_email=payload.user_email,
            user_name=payload.user_name,
            status=status,
        )
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EventFullError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/{registration_id}", response_model=RegistrationDeleteOut)
def delete_registration(registration_id: int, db: Session = Depends(get_db)):
    try:
        promoted = registration_service.delete_registration(db, registration_id)
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LockUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"deleted_id": registration_id, "promoted": promoted}
