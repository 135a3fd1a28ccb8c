"""Read access to services and stylists."""

from sqlalchemy.orm import Session

from salon.core.errors import NotFoundError
from salon.models.service import Service
from salon.models.stylist import Stylist


def get_service(db: Session, service_id: int) -> Service:
    service = db.query(Service).filter(
        Service.id == service_id,
        Service.active.is_(True),
    ).first()
    if service is None:
        raise NotFoundError('Service not found.')

    return service


def get_stylist(db: Session, stylist_id: int) -> Stylist:
    stylist = db.query(Stylist).filter(
        Stylist.id == stylist_id,
        Stylist.active.is_(True),
    ).first()
    if stylist is None:
        raise NotFoundError('Stylist not found.')

    return stylist


def get_stylist_for_user(db: Session, user_id: int) -> Stylist | None:
    return db.query(Stylist).filter(Stylist.user_id == user_id).first()


def list_active_services(db: Session) -> list[Service]:
    return db.query(Service).filter(Service.active.is_(True)).order_by(Service.id.asc()).all()


def list_active_stylists(db: Session) -> list[Stylist]:
    return db.query(Stylist).filter(Stylist.active.is_(True)).order_by(Stylist.name.asc()).all()
