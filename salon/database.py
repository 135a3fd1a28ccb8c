from decimal import Decimal

from fastapi import Request
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


Base = declarative_base()

DEFAULT_SERVICES = [
    ('Haircut', 'Standard haircut and styling', 60, Decimal('35.00')),
    ('Coloring', 'Full hair coloring service', 120, Decimal('85.00')),
    ('Highlights', 'Partial highlights', 90, Decimal('65.00')),
    ('Haircut & Style', 'Haircut with advanced styling', 75, Decimal('45.00')),
    ('Wash & Blow Dry', 'Hair wash and blow dry', 30, Decimal('25.00')),
]


def build_engine(database_url: str) -> Engine:
    if not database_url:
        raise RuntimeError('DATABASE_URL is required.')

    connect_args = {}
    if database_url.startswith('sqlite'):
        connect_args['check_same_thread'] = False

    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def ensure_appointment_schema(engine: Engine) -> None:
    inspector = inspect(engine)

    if 'appointments' not in inspector.get_table_names():
        return

    with engine.begin() as connection:
        connection.execute(
            text(
                'CREATE INDEX IF NOT EXISTS idx_appointments_date_status '
                'ON appointments(appointment_date, status)'
            )
        )
        connection.execute(
            text(
                'CREATE INDEX IF NOT EXISTS idx_appointments_stylist_date '
                'ON appointments(stylist_id, appointment_date)'
            )
        )
        connection.execute(
            text(
                'CREATE INDEX IF NOT EXISTS idx_appointments_reminder '
                'ON appointments(appointment_date, status, day_before_reminder_sent)'
            )
        )


def seed_default_services(db: Session) -> int:
    from salon.models.service import Service

    if db.query(Service.id).first() is not None:
        return 0

    for name, description, duration_minutes, price in DEFAULT_SERVICES:
        db.add(
            Service(
                name=name,
                description=description,
                duration_minutes=duration_minutes,
                price=price,
                active=True,
            )
        )
    db.commit()

    return len(DEFAULT_SERVICES)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
