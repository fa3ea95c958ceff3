"""
Test event service functions.
"""
from datetime import date

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityConflictError, EventNotFoundError
from app.models.registrations import Registration, RegistrationStatus
from app.services.events import create_event, delete_event, get_event, list_events, update_event
from app.services.registrations import create_registration, get_registration

CONFIRMED = RegistrationStatus.CONFIRMED.value
WAITLIST = RegistrationStatus.WAITLIST.value


class TestEventService:
    """Test event CRUD."""

    def test_create_event(self, db_session: Session):
        event = create_event(
            db_session,
            title="Open Mic",
            category="music",
            date=date(2026, 12, 4),
            start_time="19:00",
            end_time="22:00",
            location="Main Hall",
            capacity=40,
            organizer_id="org-1",
        )

        assert event.id is not None
        assert event.confirmed_count == 0
        assert get_event(db_session, event.id).title == "Open Mic"

    def test_get_missing_event(self, db_session: Session):
        with pytest.raises(EventNotFoundError):
            get_event(db_session, 99999)

    def test_list_events_filters(self, db_session: Session):
        create_event(db_session, title="A", category="music", capacity=1, organizer_id="o1")
        create_event(db_session, title="B", category="tech", capacity=1, organizer_id="o1", is_featured=True)
        create_event(db_session, title="C", category="music", capacity=1, organizer_id="o2")

        assert {e.title for e in list_events(db_session)} == {"A", "B", "C"}
        assert {e.title for e in list_events(db_session, category="music")} == {"A", "C"}
        assert {e.title for e in list_events(db_session, organizer_id="o1")} == {"A", "B"}
        assert [e.title for e in list_events(db_session, featured=True)] == ["B"]
        assert {e.title for e in list_events(db_session, featured=False)} == {"A", "C"}

    def test_list_events_newest_first(self, db_session: Session):
        first = create_event(db_session, title="First", capacity=1)
        second = create_event(db_session, title="Second", capacity=1)

        assert [e.id for e in list_events(db_session)] == [second.id, first.id]

    def test_update_event_fields(self, db_session: Session):
        event = create_event(db_session, title="Draft", capacity=5)

        updated = update_event(db_session, event.id, title="Final", location="Room 2")

        assert updated.title == "Final"
        assert updated.location == "Room 2"
        assert updated.capacity == 5

    def test_update_unknown_field(self, db_session: Session):
        event = create_event(db_session, title="Draft", capacity=5)

        with pytest.raises(ValueError):
            update_event(db_session, event.id, confirmed_count=0)

    def test_update_missing_event(self, db_session: Session):
        with pytest.raises(EventNotFoundError):
            update_event(db_session, 99999, title="Nope")

    def test_capacity_below_confirmed_is_rejected(self, db_session: Session):
        event = create_event(db_session, title="Busy", capacity=3)
        for user_id in range(3):
            create_registration(db_session, event_id=event.id, user_id=str(user_id))

        with pytest.raises(CapacityConflictError):
            update_event(db_session, event.id, capacity=2)

        assert get_event(db_session, event.id).capacity == 3

    def test_capacity_increase_promotes_waitlist(self, db_session: Session, sent_notifications):
        event = create_event(db_session, title="Popular", capacity=1)
        registrations = [
            create_registration(
                db_session, event_id=event.id, user_id=str(user_id), user_email=f"{user_id}@example.com"
            )
            for user_id in range(4)
        ]
        sent_notifications.clear()

        updated = update_event(db_session, event.id, capacity=3)

        assert updated.confirmed_count == 3
        statuses = [get_registration(db_session, r.id).status for r in registrations]
        assert statuses == [CONFIRMED, CONFIRMED, CONFIRMED, WAITLIST]
        assert [p["to"] for p in sent_notifications] == ["1@example.com", "2@example.com"]

    def test_capacity_decrease_keeps_waitlist(self, db_session: Session):
        event = create_event(db_session, title="Shrinking", capacity=5)
        create_registration(db_session, event_id=event.id, user_id="a")

        updated = update_event(db_session, event.id, capacity=1)

        assert updated.capacity == 1
        assert updated.confirmed_count == 1
        assert updated.available_seats == 0

    def test_delete_event(self, db_session: Session):
        event = create_event(db_session, title="Gone", capacity=2)
        create_registration(db_session, event_id=event.id, user_id="a")

        delete_event(db_session, event.id)

        with pytest.raises(EventNotFoundError):
            get_event(db_session, event.id)
        assert db_session.query(Registration).count() == 0

    def test_delete_missing_event(self, db_session: Session):
        with pytest.raises(EventNotFoundError):
            delete_event(db_session, 99999)
