"""Appointment store: booking, listing, staff edits and deletion."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from salon.core import config
from salon.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from salon.models.appointment import APPOINTMENT_STATUSES, STATUS_SCHEDULED, Appointment
from salon.models.user import ROLE_ADMIN, User
from salon.scheduling.catalog import get_service, get_stylist, get_stylist_for_user
from salon.scheduling.locking import BookingLocks
from salon.scheduling.slots import (
    business_window,
    format_slot_time,
    is_slot_available,
    parse_slot_date,
    parse_slot_time,
    parse_stylist_filter,
)

logger = logging.getLogger(__name__)

ANY_STYLIST_NAME = 'Any available stylist'


class AppointmentView(BaseModel):
    id: int
    customer_id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    stylist_id: int | None = None
    stylist_name: str | None = None
    service_id: int
    service_name: str
    duration_minutes: int
    price: Decimal | None = None
    appointment_date: date
    appointment_time: str
    status: str
    notes: str = ''
    reminder_sent: bool
    day_before_reminder_sent: bool
    created_at: datetime | None = None


class AppointmentUpdate(BaseModel):
    """Partial staff edit; only fields that were provided are applied."""

    date: str | None = None
    time: str | None = None
    status: str | None = None
    notes: str | None = None


def validate_notes(value: str | None) -> str:
    if value is None:
        return ''

    if len(value) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise InvalidArgumentError(
            f'Notes cannot exceed {config.MAX_APPOINTMENT_NOTES_LENGTH} characters.'
        )

    return value.strip()


def validate_status(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in APPOINTMENT_STATUSES:
        raise InvalidArgumentError(f'Status must be one of: {", ".join(APPOINTMENT_STATUSES)}.')

    return normalized


def validate_booking_window(
    slot_date: date,
    slot_time: time,
    duration_minutes: int,
    start_hour: int = config.BUSINESS_HOURS_START,
    end_hour: int = config.BUSINESS_HOURS_END,
) -> None:
    day_open, day_close = business_window(slot_date, start_hour, end_hour)
    start = datetime.combine(slot_date, slot_time)

    if start.minute % config.SLOT_INCREMENT_MINUTES != 0:
        raise InvalidArgumentError(
            f'Appointments must start on {config.SLOT_INCREMENT_MINUTES}-minute boundaries.'
        )

    if start < day_open or start + timedelta(minutes=duration_minutes) > day_close:
        raise InvalidArgumentError('Appointment is outside business hours.')


def to_appointment_view(appointment: Appointment) -> AppointmentView:
    customer = appointment.customer
    stylist = appointment.stylist
    service = appointment.service

    return AppointmentView(
        id=appointment.id,
        customer_id=appointment.customer_id,
        customer_name=customer.name if customer else '',
        customer_email=customer.email if customer else '',
        customer_phone=(customer.phone or '') if customer else '',
        stylist_id=appointment.stylist_id,
        stylist_name=stylist.name if stylist else None,
        service_id=appointment.service_id,
        service_name=service.name if service else '',
        duration_minutes=appointment.duration_minutes or (service.duration_minutes if service else 0),
        price=appointment.price if appointment.price is not None else (service.price if service else None),
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        status=appointment.status,
        notes=appointment.notes or '',
        reminder_sent=bool(appointment.reminder_sent),
        day_before_reminder_sent=bool(appointment.day_before_reminder_sent),
        created_at=appointment.created_at,
    )


def with_display_fields(query):
    return query.options(
        joinedload(Appointment.customer),
        joinedload(Appointment.service),
        joinedload(Appointment.stylist),
    )


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = with_display_fields(db.query(Appointment)).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found.')

    return appointment


def create_appointment(
    db: Session,
    locks: BookingLocks,
    customer_id: int,
    stylist_ref: str | int | None,
    service_id: int | None,
    appointment_date: str | date | None,
    appointment_time: str | time | None,
    notes: str | None = None,
) -> Appointment:
    if service_id is None:
        raise InvalidArgumentError('Service, date, and time are required.')

    slot_date = parse_slot_date(appointment_date)
    slot_time = parse_slot_time(appointment_time)
    normalized_notes = validate_notes(notes)
    stylist_id = parse_stylist_filter(stylist_ref)

    customer = db.get(User, customer_id)
    if customer is None:
        raise NotFoundError('Customer not found.')

    service = get_service(db, service_id)
    if stylist_id is not None:
        get_stylist(db, stylist_id)

    validate_booking_window(slot_date, slot_time, service.duration_minutes)

    try:
        with locks.hold(db, slot_date):
            if not is_slot_available(db, slot_date, slot_time, service.duration_minutes, stylist_id):
                db.rollback()
                raise ConflictError('This time slot is no longer available.')

            appointment = Appointment(
                customer_id=customer.id,
                stylist_id=stylist_id,
                service_id=service.id,
                appointment_date=slot_date,
                appointment_time=format_slot_time(slot_time),
                duration_minutes=service.duration_minutes,
                price=service.price,
                status=STATUS_SCHEDULED,
                notes=normalized_notes,
                reminder_sent=False,
                day_before_reminder_sent=False,
            )
            db.add(appointment)
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        'Booked appointment %s on %s at %s (stylist=%s, service=%s)',
        appointment.id,
        appointment.appointment_date,
        appointment.appointment_time,
        stylist_id or 'any',
        service.id,
    )

    return get_appointment(db, appointment.id)


def list_for_customer(db: Session, customer_id: int) -> list[Appointment]:
    return with_display_fields(db.query(Appointment)).filter(
        Appointment.customer_id == customer_id,
    ).order_by(
        Appointment.appointment_date.desc(),
        Appointment.appointment_time.desc(),
    ).all()


def list_for_staff(db: Session, user: User) -> list[Appointment]:
    query = with_display_fields(db.query(Appointment))

    if user.role != ROLE_ADMIN:
        stylist = get_stylist_for_user(db, user.id)
        if stylist is None:
            raise NotFoundError('Stylist profile not found.')
        query = query.filter(Appointment.stylist_id == stylist.id)

    return query.order_by(
        Appointment.appointment_date.asc(),
        Appointment.appointment_time.asc(),
    ).all()


def merge_appointment_update(appointment: Appointment, update: AppointmentUpdate) -> list[str]:
    """Apply the provided fields of ``update`` onto ``appointment``.

    Returns the names of the columns that were written. Rescheduling does not
    re-check overlaps; staff edits are trusted.
    """
    provided = update.model_dump(exclude_unset=True)
    changed: list[str] = []

    if provided.get('date') is not None:
        appointment.appointment_date = parse_slot_date(provided['date'])
        changed.append('appointment_date')
    if provided.get('time') is not None:
        appointment.appointment_time = format_slot_time(parse_slot_time(provided['time']))
        changed.append('appointment_time')
    if provided.get('status') is not None:
        appointment.status = validate_status(provided['status'])
        changed.append('status')
    if 'notes' in provided:
        appointment.notes = validate_notes(provided['notes'])
        changed.append('notes')

    return changed


def has_updates(update: AppointmentUpdate) -> bool:
    provided = update.model_dump(exclude_unset=True)
    return any(
        provided.get(field) is not None for field in ('date', 'time', 'status')
    ) or 'notes' in provided


def update_appointment(db: Session, appointment_id: int, update: AppointmentUpdate) -> Appointment:
    if not has_updates(update):
        raise InvalidArgumentError('No fields to update.')

    appointment = get_appointment(db, appointment_id)

    try:
        changed = merge_appointment_update(appointment, update)
        db.commit()
    except (SQLAlchemyError, InvalidArgumentError):
        db.rollback()
        raise

    logger.info('Updated appointment %s fields=%s', appointment_id, changed)
    db.refresh(appointment)

    return appointment


def delete_appointment(db: Session, appointment_id: int) -> None:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found.')

    try:
        db.delete(appointment)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info('Deleted appointment %s', appointment_id)
