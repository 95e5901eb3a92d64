"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from mail import MemoryMailer  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    APP_ENV = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    JWT_COOKIE_SECURE = False
    CLIENT_URL = "https://client.example"
    MAIL_BACKEND = "memory"
    MAIL_ASYNC = False
    RATE_LIMIT = "1000 per minute"


def build_app(**overrides) -> Flask:
    """Create an app from the test config with selected keys overridden."""

    class TestConfig(_BaseTestConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
    return application


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def mailer(app: Flask) -> MemoryMailer:
    """Return the in-memory mail backend used by the app."""

    return app.extensions["mail_dispatcher"].mailer


def create_user(
    email: str,
    password: str,
    name: str = "Test User",
    *,
    verified: bool = False,
) -> User:
    """Persist a user directly. Must be called inside an app context."""

    user = User(email=email, name=name, is_verified=verified)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def signup(client: FlaskClient, email: str = "a@b.com", password: str = "secret1", name: str = "A"):
    return client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "name": name},
    )
