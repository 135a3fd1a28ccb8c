"""Service model definitions."""

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String
from salon.database import Base


class Service(Base):
    """Represents a bookable salon service."""
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint('duration_minutes > 0', name='ck_services_duration_positive'),
        CheckConstraint('price >= 0', name='ck_services_price_non_negative'),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
