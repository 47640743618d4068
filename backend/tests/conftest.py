"""
Pytest fixtures for fabricstore backend tests.

Provides test database setup, seeded users per role, auth headers, and
a sample catalog.
"""

import pytest

from fabricstore import create_app
from fabricstore.extensions import db
from fabricstore.services import auth_service, get_services


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost keeps user fixtures fast."""
    monkeypatch.setattr(auth_service, "BCRYPT_ROUNDS", 4)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh database for each test."""
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def services(db_session):
    return get_services()


def _make_user(services, name, email, role):
    return services.users.create(
        {"name": name, "email": email, "password": PASSWORD, "role": role},
        None,
    )


@pytest.fixture(scope='function')
def admin_user(services):
    return _make_user(services, "Ada Admin", "admin@fabric.test", "admin")


@pytest.fixture(scope='function')
def storekeeper_user(services):
    return _make_user(services, "Sam Storekeeper", "keeper@fabric.test", "storekeeper")


@pytest.fixture(scope='function')
def viewer_user(services):
    return _make_user(services, "Vic Viewer", "viewer@fabric.test", "viewer")


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def _headers_for(services, user) -> dict:
    _, token = services.auth.login(user.email, PASSWORD)
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(services, admin_user):
    return _headers_for(services, admin_user)


@pytest.fixture(scope='function')
def storekeeper_headers(services, storekeeper_user):
    return _headers_for(services, storekeeper_user)


@pytest.fixture(scope='function')
def viewer_headers(services, viewer_user):
    return _headers_for(services, viewer_user)


@pytest.fixture(scope='function')
def catalog(services, admin_user):
    """Active sample catalog."""
    return services.catalogs.create(
        {"code": "ctn-001", "name": "Premium Cotton", "material": "Cotton"},
        admin_user.id,
    )


@pytest.fixture(scope='function')
def make_roll(services, catalog, storekeeper_user):
    """Factory: make_roll("RC100", status="reserved") -> persisted Roll."""
    def _make(barcode, **overrides):
        data = {
            "barcode": barcode,
            "catalogId": catalog.id,
            "color": "Blue",
            "degree": "A",
            "lengthMeters": 50,
        }
        data.update(overrides)
        return services.rolls.create(data, storekeeper_user.id)
    return _make
