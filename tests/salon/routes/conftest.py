import pytest
from fastapi.testclient import TestClient

from salon.main import create_app
from salon.models.service import Service
from salon.models.stylist import Stylist
from salon.models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_STYLIST, User


@pytest.fixture
def app(tmp_path, fake_gateway):
    application = create_app(
        database_url=f'sqlite:///{tmp_path / "routes.db"}',
        notification_gateway=fake_gateway,
    )
    try:
        yield application
    finally:
        application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded(client, app):
    db = app.state.session_factory()
    try:
        customer = User(email='casey@example.com', name='Casey', phone='+15551234567', role=ROLE_CUSTOMER)
        other_customer = User(email='drew@example.com', name='Drew', phone='', role=ROLE_CUSTOMER)
        stylist_user = User(email='alex@example.com', name='Alex', phone='', role=ROLE_STYLIST)
        orphan_stylist = User(email='robin@example.com', name='Robin', phone='', role=ROLE_STYLIST)
        admin = User(email='admin@example.com', name='Admin', phone='', role=ROLE_ADMIN)
        db.add_all([customer, other_customer, stylist_user, orphan_stylist, admin])
        db.commit()

        stylist = Stylist(name='Alex', bio='Colorist', user_id=stylist_user.id, active=True)
        db.add(stylist)
        db.add(Stylist(name='Jordan', bio='', active=False))
        db.commit()

        haircut = db.query(Service).filter(Service.name == 'Haircut').one()
        coloring = db.query(Service).filter(Service.name == 'Coloring').one()

        return {
            'stylist_id': stylist.id,
            'haircut_id': haircut.id,
            'coloring_id': coloring.id,
        }
    finally:
        db.close()
