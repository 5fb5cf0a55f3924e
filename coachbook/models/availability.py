from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class AvailabilityStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class AvailabilitySlot(SQLModel, table=True):
    """Time the coach offers (open) or holds back (closed). Visible to the public when open."""

    __tablename__ = "availability_slots"
    id: int | None = Field(default=None, primary_key=True)
    coach_id: int = Field(foreign_key="coaches.id", index=True)
    start_time: datetime = Field(index=True)  # naive UTC
    end_time: datetime  # naive UTC
    status: str = Field(default=AvailabilityStatus.OPEN.value, index=True)
