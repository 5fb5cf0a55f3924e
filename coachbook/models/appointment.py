from datetime import datetime

from sqlmodel import Field, SQLModel


class AppointmentPrivate(SQLModel, table=True):
    """A booking with client details. Only ever read for the owning coach."""

    __tablename__ = "appointments_private"
    id: int | None = Field(default=None, primary_key=True)
    coach_id: int = Field(foreign_key="coaches.id", index=True)
    start_time: datetime = Field(index=True)  # naive UTC
    end_time: datetime  # naive UTC
    client_name: str | None = None
    location: str | None = None
    notes: str | None = None
