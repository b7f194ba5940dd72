"""
BookingDesk Backend — Appointment Schemas
===========================================

What:  API contract and stored shape of an appointment.

clientId and businessId are free-form references. Nothing checks that the
client or business exists.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from bookingdesk.schemas.common import DocumentModel


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive datetimes are taken to be UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Appointment(DocumentModel):
    """An appointment as stored and as returned by the API."""

    id: str = Field(description="Store-assigned identifier")
    client_id: str
    business_id: str
    date: datetime = Field(description="Start of the appointment (ISO 8601, UTC)")

    @field_validator("date")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)


class AppointmentCreate(BaseModel):
    """
    Body of POST /appointments/.

    A missing `date` decodes to None and is rejected by the handler with
    "date invalid", the same message as a date in the past.
    """

    client_id: str = Field(
        default="",
        validation_alias=AliasChoices("clientId", "client_id"),
    )
    business_id: str = Field(
        default="",
        validation_alias=AliasChoices("businessId", "business_id"),
    )
    date: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def ensure_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class AppointmentFilter(DocumentModel):
    """Equality predicates accepted by GET /appointments/, ANDed together."""

    client_id: Optional[str] = None
    business_id: Optional[str] = None
