"""
BookingDesk Backend — Appointment Routes
==========================================

What:  The /appointments resource. Appointments carry no images.

    GET    /appointments/          list (?client=&business=)   public
    GET    /appointments/{id}      get by id                   public
    POST   /appointments/          create                      auth
    DELETE /appointments/{id}      delete                      auth
    POST   anything else           create                      auth
    any other method               501

clientId and businessId are stored as given; nothing checks that the
referenced client or business exists.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from bookingdesk.exceptions import ValidationError
from bookingdesk.routes.common import (
    UNSUPPORTED_METHODS,
    error_responses,
    get_appointment_repository,
    method_not_implemented,
)
from bookingdesk.schemas.appointment import Appointment, AppointmentCreate, AppointmentFilter
from bookingdesk.schemas.common import MessageResponse
from bookingdesk.security import Principal, require_principal
from bookingdesk.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def check_appointment_date(date: Optional[datetime], now: datetime) -> None:
    """
    Reject a missing date or one strictly before `now`.

    A date equal to `now` is accepted.
    """
    if date is None or date < now:
        raise ValidationError(message="date invalid", field="date")


@router.get(
    "/",
    response_model=List[Appointment],
    responses=error_responses(500),
    summary="List appointments",
)
async def list_appointments(
    client: Optional[str] = Query(default=None, description="Only appointments of this client id"),
    business: Optional[str] = Query(default=None, description="Only appointments at this business id"),
    client_id: Optional[str] = Query(default=None, alias="clientId", include_in_schema=False),
    business_id: Optional[str] = Query(default=None, alias="businessId", include_in_schema=False),
    repository: Repository = Depends(get_appointment_repository),
) -> List[Appointment]:
    filters = AppointmentFilter(
        client_id=client or client_id,
        business_id=business or business_id,
    )
    return await repository.list(filters)


@router.get(
    "/{appointment_id}",
    response_model=Appointment,
    responses=error_responses(404, 500),
    summary="Get an appointment by id",
)
async def get_appointment(
    appointment_id: str,
    repository: Repository = Depends(get_appointment_repository),
) -> Appointment:
    return await repository.get_by_id(appointment_id)


@router.post(
    "/",
    response_model=Appointment,
    responses=error_responses(400, 401, 500),
    summary="Book an appointment",
)
async def create_appointment(
    body: AppointmentCreate,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_appointment_repository),
) -> Appointment:
    """
    Rules (checked in order):
        clientId not blank        → 400 "clientId cannot be empty"
        businessId not blank      → 400 "businessId cannot be empty"
        date present, not past    → 400 "date invalid"
    """
    if not body.client_id.strip():
        raise ValidationError(message="clientId cannot be empty", field="clientId")
    if not body.business_id.strip():
        raise ValidationError(message="businessId cannot be empty", field="businessId")
    check_appointment_date(body.date, datetime.now(timezone.utc))

    appointment = await repository.create(
        {
            "clientId": body.client_id,
            "businessId": body.business_id,
            "date": body.date.isoformat(),
        }
    )
    logger.info("Appointment %s booked by %s", appointment.id, principal.id)
    return appointment


@router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    responses=error_responses(401, 500),
    summary="Delete an appointment",
)
async def delete_appointment(
    appointment_id: str,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_appointment_repository),
) -> MessageResponse:
    await repository.delete(appointment_id)
    logger.info("Appointment %s deleted by %s", appointment_id, principal.id)
    return MessageResponse(message="successful deletion")


# POST anywhere else under the mount creates, as POST / does
router.add_api_route(
    "/{rest:path}",
    create_appointment,
    methods=["POST"],
    response_model=Appointment,
    responses=error_responses(400, 401, 500),
    include_in_schema=False,
)

router.add_api_route(
    "/{rest:path}",
    method_not_implemented,
    methods=UNSUPPORTED_METHODS,
    include_in_schema=False,
)
