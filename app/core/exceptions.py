"""
Application exceptions raised by the service layer.

Lookups that may legitimately find nothing return ``None`` or an empty list;
everything else that goes wrong raises one of these.
"""


class GatherError(Exception):
    pass


class EventNotFoundError(GatherError):
    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Event {event_id} not found.")


class RegistrationNotFoundError(GatherError):
    def __init__(self, registration_id: int):
        self.registration_id = registration_id
        super().__init__(f"Registration {registration_id} not found.")


class DuplicateRegistrationError(GatherError):
    pass


class EventFullError(GatherError):
    pass


class CapacityConflictError(GatherError):
    pass


class InvalidTransitionError(GatherError):
    pass


class LockUnavailableError(GatherError):
    pass
