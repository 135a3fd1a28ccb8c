"""User model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, func
from salon.database import Base


ROLE_CUSTOMER = 'customer'
ROLE_STYLIST = 'stylist'
ROLE_ADMIN = 'admin'
STAFF_ROLES = (ROLE_STYLIST, ROLE_ADMIN)


class User(Base):
    """Represents an application user (customer, stylist or admin)."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=False, default='')
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_CUSTOMER)  # customer/stylist/admin
    created_at = Column(DateTime, server_default=func.now())
