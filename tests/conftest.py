"""
Shared pytest fixtures for the Spendlist test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.
"""
import pytest
from flask import g
from flask.testing import FlaskClient
from app import create_app
from extensions import db as _db, token_issuer


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()


class FreshUserClient(FlaskClient):
    """Test client that forgets the loaded user between requests.

    The suite shares one app context, so Flask-Login's per-request user
    cache on ``g`` would otherwise carry over from one request to the next.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    app.test_client_class = FreshUserClient
    return app.test_client()


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

def make_user(email, name='', password='TestPass1!'):
    from models.users import User
    u = User(email=email, name=name)
    u.set_password(password)
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture
def user(app):
    return make_user('owner@example.com', name='Owner User')


@pytest.fixture
def alice(app):
    return make_user('alice@example.com', name='Alice')


@pytest.fixture
def bob(app):
    return make_user('bob@example.com', name='Bob')


@pytest.fixture
def carol(app):
    """A user with no profile name, labelled by email."""
    return make_user('carol@example.com')


@pytest.fixture
def currency(app):
    from models.currencies import Currency
    c = Currency(code='EUR', name='Euro', symbol='€')
    _db.session.add(c)
    _db.session.commit()
    return c


@pytest.fixture
def auth_headers():
    """Return a helper that builds token headers for a user."""
    def _headers(u):
        return {'x-access-token': token_issuer.issue(u)}
    return _headers


@pytest.fixture
def linked(app, alice, bob):
    """Alice and Bob as approved family members."""
    from services.family_service import FamilyService
    FamilyService.request_link(bob.id, alice.email)
    FamilyService.resolve_link(alice.id, bob.email, True)
    return alice, bob
