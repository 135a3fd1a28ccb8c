"""Booking confirmations and the day-before reminder sweep."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from threading import Lock

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from salon.models.appointment import STATUS_SCHEDULED, Appointment
from salon.scheduling.appointments import AppointmentView, with_display_fields, to_appointment_view

logger = logging.getLogger(__name__)

_sweep_lock = Lock()


@dataclass
class SweepResult:
    target_date: date
    selected: int = 0
    sent: int = 0
    failed: int = 0
    skipped: bool = False


def get_appointments_for_reminder(db: Session, target_date: date) -> list[Appointment]:
    return with_display_fields(db.query(Appointment)).filter(
        Appointment.appointment_date == target_date,
        Appointment.status == STATUS_SCHEDULED,
        Appointment.day_before_reminder_sent.is_(False),
    ).order_by(Appointment.appointment_time.asc()).all()


def mark_day_before_reminder_sent(db: Session, appointment_id: int) -> bool:
    """Flip the day-before flag; False when another sweep already did."""
    updated = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.day_before_reminder_sent.is_(False),
    ).update({Appointment.day_before_reminder_sent: True}, synchronize_session=False)
    db.commit()

    return updated == 1


def mark_confirmation_sent(db: Session, appointment_id: int) -> bool:
    updated = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.reminder_sent.is_(False),
    ).update({Appointment.reminder_sent: True}, synchronize_session=False)
    db.commit()

    return updated == 1


def dispatch_confirmation(session_factory: sessionmaker, gateway, view: AppointmentView) -> bool:
    """Send a booking confirmation. Failures are logged, never raised."""
    try:
        gateway.send_confirmation(view)
    except Exception:
        logger.exception('Failed to send confirmation for appointment %s', view.id)
        return False

    db = session_factory()
    try:
        mark_confirmation_sent(db, view.id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Confirmation sent but flag not saved for appointment %s', view.id)
    finally:
        db.close()

    return True


def run_day_before_sweep(session_factory: sessionmaker, gateway, today: date | None = None) -> SweepResult:
    target_date = (today or date.today()) + timedelta(days=1)

    if not _sweep_lock.acquire(blocking=False):
        logger.warning('Reminder sweep already running; skipping run for %s', target_date)
        return SweepResult(target_date=target_date, skipped=True)

    result = SweepResult(target_date=target_date)
    db = None
    try:
        db = session_factory()
        views = [to_appointment_view(appointment) for appointment in get_appointments_for_reminder(db, target_date)]
        db.rollback()
        result.selected = len(views)
        logger.info('Found %s appointments needing reminders for %s', result.selected, target_date)

        for view in views:
            try:
                gateway.send_reminder(view)
            except Exception:
                result.failed += 1
                logger.exception('Error sending reminder for appointment %s', view.id)
                continue

            try:
                flipped = mark_day_before_reminder_sent(db, view.id)
            except SQLAlchemyError:
                db.rollback()
                result.failed += 1
                logger.exception('Reminder sent but flag not saved for appointment %s', view.id)
                continue

            if flipped:
                result.sent += 1
                logger.info('Reminder sent for appointment %s', view.id)
            else:
                logger.warning('Appointment %s was already marked by a concurrent sweep', view.id)
    finally:
        if db is not None:
            db.close()
        _sweep_lock.release()

    logger.info(
        'Reminder sweep for %s finished: %s sent, %s failed',
        target_date,
        result.sent,
        result.failed,
    )

    return result
