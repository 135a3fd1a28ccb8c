from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon.database import get_db
from salon.scheduling.catalog import list_active_services, list_active_stylists

router = APIRouter(tags=['catalog'])


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    duration_minutes: int
    price: Decimal
    active: bool


class StylistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    bio: str | None = None


@router.get('/services', response_model=list[ServiceResponse])
def list_services(db: Session = Depends(get_db)):
    try:
        return list_active_services(db)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to fetch services.',
        ) from exc


@router.get('/stylists', response_model=list[StylistResponse])
def list_stylists(db: Session = Depends(get_db)):
    try:
        return list_active_stylists(db)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to fetch stylists.',
        ) from exc
