from datetime import date as date_type
from datetime import datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    end_time: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Seats held by confirmed registrations; only changed by conditional updates
    confirmed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    organizer_id: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    registrations: Mapped[list["Registration"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    @property
    def available_seats(self) -> int:
        return max(self.capacity - self.confirmed_count, 0)
