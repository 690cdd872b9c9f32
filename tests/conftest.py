import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from feedbackboard import create_app
from feedbackboard.extensions import db
from feedbackboard.models import Board, Customer, Feedback
from feedbackboard.services.identity import SESSION_EMAIL_KEY


@pytest.fixture(scope="session")
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "MAIL_SUPPRESS_SEND": True,
        "APP_BASE_URL": "http://example.test",
        "WTF_CSRF_ENABLED": False,
        "RATELIMIT_ENABLED": False,
        "CORS_ALLOWED_ORIGINS": ["https://acme.test", "*.widgets.test"],
        "CORS_ALLOW_ALL": False,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


def make_customer(email="owner@acme.test", name="Acme", slug="acme-co", password="s3cret-pass"):
    c = Customer(email=email, name=name, slug=slug)
    if password:
        c.set_password(password)
    db.session.add(c)
    db.session.commit()
    return c.id


def make_board(owner_id, slug="acme", is_public=True, requires_approval=True, name="Acme Board"):
    b = Board(owner_id=owner_id, name=name, slug=slug, is_public=is_public, requires_approval=requires_approval)
    db.session.add(b)
    db.session.commit()
    return b.id


def make_feedback(board_id, title="Broken button", description="It does nothing at all", type="bug", approved=True):
    f = Feedback(board_id=board_id, title=title, description=description, type=type, is_approved=approved)
    db.session.add(f)
    db.session.commit()
    return f.id


def login_customer(client, customer_id):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(customer_id)


def login_email(client, email):
    with client.session_transaction() as sess:
        sess[SESSION_EMAIL_KEY] = email
