"""Availability engine.

Turns business hours, a service duration and the scheduled appointments of a
day into the list of bookable start times. Candidates sit on a fixed
30-minute grid regardless of the service duration; a candidate survives when
``[start, start + duration)`` fits before closing and does not overlap any
blocking appointment (half-open intervals, touching ends are allowed).

Blocking scope: with a specific stylist only that stylist's scheduled
appointments block; with "any" every scheduled appointment of the day blocks.
"""

import re
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session, joinedload

from salon.core import config
from salon.core.errors import InvalidArgumentError
from salon.models.appointment import STATUS_SCHEDULED, Appointment
from salon.scheduling.catalog import get_service, get_stylist

ANY_STYLIST = 'any'

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_TIME_PATTERN = re.compile(r'^(\d{2}):(\d{2})(?::00)?$')


def parse_slot_date(value: str | date | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    normalized = (value or '').strip()
    if not normalized:
        raise InvalidArgumentError('Date is required.')
    if not _DATE_PATTERN.match(normalized):
        raise InvalidArgumentError('Date must be formatted as YYYY-MM-DD.')

    try:
        return date.fromisoformat(normalized)
    except ValueError as exc:
        raise InvalidArgumentError('Date must be a valid calendar date.') from exc


def parse_slot_time(value: str | time | None) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    normalized = (value or '').strip()
    if not normalized:
        raise InvalidArgumentError('Time is required.')

    match = _TIME_PATTERN.match(normalized)
    if not match:
        raise InvalidArgumentError('Time must be formatted as HH:MM (24-hour).')

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidArgumentError('Time must be a valid time of day.')

    return time(hour, minute)


def format_slot_time(value: time | datetime) -> str:
    return value.strftime('%H:%M')


def parse_stylist_filter(value: str | int | None) -> int | None:
    """Return the stylist id to filter on, or ``None`` for "any"."""
    if value is None:
        return None
    if isinstance(value, int):
        return value

    normalized = value.strip().lower()
    if not normalized or normalized == ANY_STYLIST:
        return None
    if not normalized.isdigit():
        raise InvalidArgumentError('Stylist must be a stylist id or "any".')

    return int(normalized)


def intervals_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    return start1 < end2 and end1 > start2


def business_window(slot_date: date, start_hour: int, end_hour: int) -> tuple[datetime, datetime]:
    midnight = datetime.combine(slot_date, time(0, 0))
    return midnight + timedelta(hours=start_hour), midnight + timedelta(hours=end_hour)


def iterate_candidate_starts(
    slot_date: date,
    start_hour: int = config.BUSINESS_HOURS_START,
    end_hour: int = config.BUSINESS_HOURS_END,
    increment_minutes: int = config.SLOT_INCREMENT_MINUTES,
) -> list[datetime]:
    day_open, day_close = business_window(slot_date, start_hour, end_hour)
    candidates: list[datetime] = []
    current = day_open

    while current < day_close:
        candidates.append(current)
        current += timedelta(minutes=increment_minutes)

    return candidates


def get_appointment_duration_minutes(appointment: Appointment) -> int:
    if appointment.duration_minutes:
        return appointment.duration_minutes

    return appointment.service.duration_minutes


def get_appointment_interval(appointment: Appointment) -> tuple[datetime, datetime]:
    start = datetime.combine(appointment.appointment_date, parse_slot_time(appointment.appointment_time))
    return start, start + timedelta(minutes=get_appointment_duration_minutes(appointment))


def get_blocking_appointments(
    db: Session,
    slot_date: date,
    stylist_id: int | None,
) -> list[Appointment]:
    query = db.query(Appointment).options(joinedload(Appointment.service)).filter(
        Appointment.appointment_date == slot_date,
        Appointment.status == STATUS_SCHEDULED,
    )

    if stylist_id is not None:
        query = query.filter(Appointment.stylist_id == stylist_id)

    return query.all()


def find_free_starts(
    candidates: list[datetime],
    duration_minutes: int,
    busy_intervals: list[tuple[datetime, datetime]],
    day_close: datetime,
) -> list[datetime]:
    duration = timedelta(minutes=duration_minutes)
    free_starts: list[datetime] = []

    for candidate in sorted(candidates):
        candidate_end = candidate + duration
        if candidate_end > day_close:
            continue
        if any(intervals_overlap(candidate, candidate_end, busy_start, busy_end) for busy_start, busy_end in busy_intervals):
            continue
        free_starts.append(candidate)

    return free_starts


def get_available_slots(
    db: Session,
    slot_date: str | date,
    service_id: int | None,
    stylist_filter: str | int | None = None,
    start_hour: int = config.BUSINESS_HOURS_START,
    end_hour: int = config.BUSINESS_HOURS_END,
) -> list[str]:
    parsed_date = parse_slot_date(slot_date)
    if service_id is None:
        raise InvalidArgumentError('Service is required.')

    stylist_id = parse_stylist_filter(stylist_filter)
    service = get_service(db, service_id)
    if stylist_id is not None:
        get_stylist(db, stylist_id)

    _, day_close = business_window(parsed_date, start_hour, end_hour)
    busy_intervals = [
        get_appointment_interval(appointment)
        for appointment in get_blocking_appointments(db, parsed_date, stylist_id)
    ]

    free_starts = find_free_starts(
        iterate_candidate_starts(parsed_date, start_hour, end_hour),
        service.duration_minutes,
        busy_intervals,
        day_close,
    )

    return [format_slot_time(start) for start in free_starts]


def is_slot_available(
    db: Session,
    slot_date: date,
    slot_time: time,
    duration_minutes: int,
    stylist_id: int | None,
) -> bool:
    start = datetime.combine(slot_date, slot_time)
    end = start + timedelta(minutes=duration_minutes)

    for appointment in get_blocking_appointments(db, slot_date, stylist_id):
        busy_start, busy_end = get_appointment_interval(appointment)
        if intervals_overlap(start, end, busy_start, busy_end):
            return False

    return True
