"""Appointment model definitions."""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship
from salon.database import Base
from salon.models.service import Service
from salon.models.stylist import Stylist
from salon.models.user import User


STATUS_SCHEDULED = 'scheduled'
STATUS_COMPLETED = 'completed'
STATUS_CANCELLED = 'cancelled'
STATUS_NO_SHOW = 'no-show'
APPOINTMENT_STATUSES = (STATUS_SCHEDULED, STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW)


class Appointment(Base):
    """Represents a booked appointment.

    ``duration_minutes`` and ``price`` are copied from the service when the
    appointment is created so later catalog edits do not move existing
    bookings.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'no-show')",
            name='ck_appointments_status',
        ),
    )

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    stylist_id = Column(Integer, ForeignKey("stylists.id"))
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM, 24-hour
    duration_minutes = Column(Integer)
    price = Column(Numeric(10, 2))
    status = Column(String, nullable=False, default=STATUS_SCHEDULED)
    notes = Column(String(1000), default='')
    reminder_sent = Column(Boolean, nullable=False, default=False)
    day_before_reminder_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship(User)
    service = relationship(Service)
    stylist = relationship(Stylist)
