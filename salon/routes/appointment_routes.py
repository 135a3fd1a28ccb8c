import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon.auth.dependencies import get_current_user, require_staff
from salon.core.errors import BookingError, InvalidArgumentError
from salon.database import get_db
from salon.models.user import User
from salon.scheduling import appointments as appointment_store
from salon.scheduling.appointments import AppointmentUpdate, AppointmentView, to_appointment_view
from salon.scheduling.reminders import dispatch_confirmation
from salon.scheduling.slots import get_available_slots

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)


class AvailabilityResponse(BaseModel):
    availableSlots: list[str]


class CreateAppointmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: int | None = Field(default=None, alias='serviceId')
    stylist_id: str | None = Field(default=None, alias='stylistId')
    date: str | None = None
    time: str | None = None
    notes: str | None = None

    @field_validator('stylist_id', mode='before')
    @classmethod
    def normalize_stylist_id(cls, value):
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        try:
            return appointment_store.validate_notes(value)
        except InvalidArgumentError as exc:
            raise ValueError(exc.detail) from exc


class CreateAppointmentResponse(BaseModel):
    message: str
    appointment: AppointmentView


class MessageResponse(BaseModel):
    message: str


def to_http_exception(exc: BookingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def database_failure(action: str, exc: SQLAlchemyError) -> HTTPException:
    logger.error('Database error while trying to %s: %s', action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f'Failed to {action}.',
    )


@router.get('/availability', response_model=AvailabilityResponse)
def get_availability(
    date: str | None = Query(default=None),
    service_id: int | None = Query(default=None, alias='serviceId'),
    stylist_id: str | None = Query(default=None, alias='stylistId'),
    db: Session = Depends(get_db),
):
    if not date or service_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Date and service ID are required.',
        )

    try:
        slots = get_available_slots(db, date, service_id, stylist_id)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_failure('fetch availability', exc) from exc

    return AvailabilityResponse(availableSlots=slots)


@router.post('', response_model=CreateAppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.service_id is None or not data.date or not data.time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Service, date, and time are required.',
        )

    try:
        appointment = appointment_store.create_appointment(
            db,
            request.app.state.booking_locks,
            customer_id=current_user.id,
            stylist_ref=data.stylist_id,
            service_id=data.service_id,
            appointment_date=data.date,
            appointment_time=data.time,
            notes=data.notes,
        )
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_failure('create appointment', exc) from exc

    view = to_appointment_view(appointment)
    background_tasks.add_task(
        dispatch_confirmation,
        request.app.state.session_factory,
        request.app.state.notification_gateway,
        view,
    )

    return CreateAppointmentResponse(message='Appointment created successfully', appointment=view)


@router.get('/mine', response_model=list[AppointmentView])
def list_my_appointments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        appointments = appointment_store.list_for_customer(db, current_user.id)
    except SQLAlchemyError as exc:
        raise database_failure('fetch appointments', exc) from exc

    return [to_appointment_view(appointment) for appointment in appointments]


@router.get('/staff', response_model=list[AppointmentView])
def list_staff_appointments(
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    try:
        appointments = appointment_store.list_for_staff(db, current_user)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_failure('fetch appointments', exc) from exc

    return [to_appointment_view(appointment) for appointment in appointments]


@router.put('/{appointment_id}', response_model=MessageResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    try:
        appointment_store.update_appointment(db, appointment_id, data)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_failure('update appointment', exc) from exc

    logger.info('Appointment %s updated by %s', appointment_id, current_user.email)
    return MessageResponse(message='Appointment updated successfully')


@router.delete('/{appointment_id}', response_model=MessageResponse)
def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    try:
        appointment_store.delete_appointment(db, appointment_id)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_failure('delete appointment', exc) from exc

    logger.info('Appointment %s deleted by %s', appointment_id, current_user.email)
    return MessageResponse(message='Appointment deleted successfully')
