import datetime as dt

from pydantic import BaseModel, Field, field_validator


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    category: str = Field(default="", max_length=100)
    date: dt.date | None = None
    start_time: str = Field(default="", max_length=20)
    end_time: str = Field(default="", max_length=20)
    location: str = Field(default="", max_length=300)
    capacity: int = Field(ge=0)
    organizer_id: str = Field(default="", max_length=100)
    image_url: str = Field(default="", max_length=500)
    is_featured: bool = False


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    date: dt.date | None = None
    start_time: str | None = Field(default=None, max_length=20)
    end_time: str | None = Field(default=None, max_length=20)
    location: str | None = Field(default=None, max_length=300)
    capacity: int | None = Field(default=None, ge=0)
    organizer_id: str | None = Field(default=None, max_length=100)
    image_url: str | None = Field(default=None, max_length=500)
    is_featured: bool | None = None

    # Only `date` may be cleared; an explicit null elsewhere is a client error.
    @field_validator(
        "title",
        "description",
        "category",
        "start_time",
        "end_time",
        "location",
        "capacity",
        "organizer_id",
        "image_url",
        "is_featured",
        mode="after",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class EventOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    date: dt.date | None
    start_time: str
    end_time: str
    location: str
    capacity: int
    confirmed_count: int
    available_seats: int
    organizer_id: str
    image_url: str
    is_featured: bool
    created_at: dt.datetime | None
    updated_at: dt.datetime | None

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: int
    capacity: int
    confirmed_count: int
    waitlist_count: int
    available_seats: int


class WaitlistPositionOut(BaseModel):
    event_id: int
    user_id: str
    position: int
