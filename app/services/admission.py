"""
Admission policy for event registrations.

Decides whether a new registration takes a seat or joins the waitlist, where a
user sits on the waitlist, and whether a status change is a promotion that
should notify the user. Every function here is pure and never raises: input
outside the documented domain falls back to the safer answer (``waitlist``,
no notification).
"""
from collections.abc import Iterable
from typing import Any

from app.models.registrations import RegistrationStatus


def _as_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def decide_status(event: Any, confirmed_count: int) -> RegistrationStatus:
    """Return ``confirmed`` while a seat is free, ``waitlist`` otherwise."""
    capacity = _as_count(getattr(event, "capacity", None))
    count = _as_count(confirmed_count)
    if capacity is None or count is None:
        return RegistrationStatus.WAITLIST
    if count < capacity:
        return RegistrationStatus.CONFIRMED
    return RegistrationStatus.WAITLIST


def compute_waitlist_position(waitlist_entries: Iterable[Any], user_id: Any) -> int | None:
    """
    1-based position of ``user_id`` in a waitlist already sorted oldest first.
    Returns None when the user is not on it.
    """
    for position, entry in enumerate(waitlist_entries, start=1):
        if getattr(entry, "user_id", None) == user_id:
            return position
    return None


def on_status_transition(previous_status: Any, new_status: Any) -> bool:
    """True only for a waitlist -> confirmed promotion."""
    return (
        previous_status == RegistrationStatus.WAITLIST.value
        and new_status == RegistrationStatus.CONFIRMED.value
    )
