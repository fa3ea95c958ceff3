from datetime import datetime

from pydantic import BaseModel, Field

from app.models.registrations import RegistrationStatus


class RegistrationRequest(BaseModel):
    event_id: int = Field(ge=1)
    user_id: str = Field(min_length=1, max_length=100)
    user_email: str = Field(default="", max_length=320)
    user_name: str = Field(default="", max_length=200)


class RegistrationUpdate(BaseModel):
    user_email: str | None = Field(default=None, max_length=320)
    user_name: str | None = Field(default=None, max_length=200)
    status: RegistrationStatus | None = None


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: str
    user_email: str
    user_name: str
    status: str
    registered_at: datetime
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class RegistrationDeleteOut(BaseModel):
    deleted_id: int
    promoted: RegistrationOut | None = None
