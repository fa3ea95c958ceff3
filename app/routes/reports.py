from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.exceptions import EventNotFoundError
from app.database.db import get_db
from app.schemas.events import EventStatsOut
from app.schemas.reports import ReportOut
from app.services.registrations import get_event_stats, get_overall_report

router = APIRouter(prefix="/report", tags=["reports"])


@router.get("", response_model=ReportOut)
def overall_report(db: Session = Depends(get_db)):
    """Aggregate report across all events."""
    return get_overall_report(db)


@router.get("/event/{event_id}", response_model=EventStatsOut)
def event_report(event_id: int, db: Session = Depends(get_db)):
    try:
        return get_event_stats(db, event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
