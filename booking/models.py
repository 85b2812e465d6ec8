import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_iso_date(value):
    """`YYYY-MM-DD` for dates and datetimes, anything else unchanged."""
    if isinstance(value, datetime.datetime):
        value = value.date()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SlotCount(BaseModel):
    booked: int = 0
    total: int = 100


class Booking(BaseModel):
    """A booking document; unknown caller-supplied fields are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    date: str
    time: str
    kids: int = Field(default=0, ge=0)
    adults: int = Field(default=0, ge=0)
    # free-form, transitions are up to the caller
    status: str = BookingStatus.PENDING.value
    created_at: datetime.datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime.datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("date", mode="before")
    @classmethod
    def iso_date(cls, v):
        return as_iso_date(v)

    @property
    def party_size(self) -> int:
        return self.kids + self.adults

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Booking":
        # stored documents are taken as-is, updates may have written anything
        return cls.model_construct(**{**data, "id": doc_id})

    def to_document(self) -> dict:
        """Field layout stored in the bookings collection (camelCase timestamps, no id)."""
        document = self.model_dump(by_alias=True, exclude={"id"})
        for key in ("createdAt", "updatedAt"):
            if document[key] is None:
                del document[key]
        return document


class AvailabilityDay(BaseModel):
    date: str
    slots: dict[str, SlotCount] = Field(default_factory=dict)


def slot_key(hour: int) -> str:
    return f"{hour:02d}:00"


def generate_default_slots(
    first_hour: int = 9, last_hour: int = 18, capacity: int = 100
) -> dict[str, SlotCount]:
    """One empty slot per hour, both ends inclusive."""
    return {
        slot_key(hour): SlotCount(booked=0, total=capacity)
        for hour in range(first_hour, last_hour + 1)
    }
