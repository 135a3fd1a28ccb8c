"""Stylist model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from salon.database import Base
from salon.models.user import User


class Stylist(Base):
    """Represents a stylist profile, optionally owned by a staff user."""
    __tablename__ = "stylists"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True)
    name = Column(String, nullable=False)
    bio = Column(String)
    active = Column(Boolean, nullable=False, default=True)

    user = relationship(User)
