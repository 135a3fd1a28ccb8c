import os

os.environ['DATABASE_URL'] = 'sqlite:///./test.db'
os.environ['BUSINESS_HOURS_START'] = '9'
os.environ['BUSINESS_HOURS_END'] = '18'
os.environ['EMAIL_API_KEY'] = ''
os.environ['TWILIO_ACCOUNT_SID'] = ''
os.environ['TWILIO_AUTH_TOKEN'] = ''

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from salon.core.errors import NotificationError  # noqa: E402
from salon.database import Base, build_engine, build_session_factory  # noqa: E402
from salon.models.appointment import STATUS_SCHEDULED, Appointment  # noqa: E402
from salon.models.service import Service  # noqa: E402
from salon.models.stylist import Stylist  # noqa: E402
from salon.models.user import ROLE_CUSTOMER, User  # noqa: E402


class BookingFactory:
    """Inserts rows directly, bypassing the booking checks."""

    def __init__(self, db):
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def user(self, role: str = ROLE_CUSTOMER, email: str | None = None, name: str | None = None, phone: str = '+15550000000') -> User:
        number = self._next()
        user = User(
            email=email or f'{role}{number}@example.com',
            name=name or f'{role.title()} {number}',
            phone=phone,
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def service(self, duration_minutes: int = 60, name: str | None = None, active: bool = True, price: str = '35.00') -> Service:
        service = Service(
            name=name or f'Service {self._next()}',
            description='',
            duration_minutes=duration_minutes,
            price=Decimal(price),
            active=active,
        )
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)
        return service

    def stylist(self, name: str | None = None, user: User | None = None, active: bool = True) -> Stylist:
        stylist = Stylist(
            name=name or f'Stylist {self._next()}',
            bio='',
            user_id=user.id if user else None,
            active=active,
        )
        self.db.add(stylist)
        self.db.commit()
        self.db.refresh(stylist)
        return stylist

    def appointment(
        self,
        customer: User,
        service: Service,
        appointment_date: date,
        appointment_time: str,
        stylist: Stylist | None = None,
        status: str = STATUS_SCHEDULED,
        duration_minutes: int | None = None,
        day_before_reminder_sent: bool = False,
    ) -> Appointment:
        appointment = Appointment(
            customer_id=customer.id,
            stylist_id=stylist.id if stylist else None,
            service_id=service.id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            duration_minutes=duration_minutes if duration_minutes is not None else service.duration_minutes,
            price=service.price,
            status=status,
            notes='',
            reminder_sent=False,
            day_before_reminder_sent=day_before_reminder_sent,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment


class FakeGateway:
    def __init__(self, failing_ids: set[int] | None = None):
        self.failing_ids = failing_ids or set()
        self.confirmations = []
        self.reminders = []

    def send_confirmation(self, view) -> None:
        if view.id in self.failing_ids:
            raise NotificationError('confirmation delivery failed')
        self.confirmations.append(view)

    def send_reminder(self, view) -> None:
        if view.id in self.failing_ids:
            raise NotificationError('reminder delivery failed')
        self.reminders.append(view)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f'sqlite:///{tmp_path / "salon.db"}')
    Base.metadata.create_all(bind=engine)
    try:
        yield build_session_factory(engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def appointment_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make(appointment_db) -> BookingFactory:
    return BookingFactory(appointment_db)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway_factory():
    return FakeGateway
