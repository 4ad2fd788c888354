"""Shared fixtures: a fresh in-memory app per test, plus registered users."""

import pytest

import credentials
import tokens
from app import create_app
from extensions import db


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path / 'uploads')})
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice(app):
    return credentials.register('alice', 'a@x.com', 'secret1')


@pytest.fixture
def bob(app):
    return credentials.register('bob', 'b@x.com', 'secret2')


@pytest.fixture
def auth_header():
    """Build an Authorization header for a registered user dict."""
    def _make(user):
        token = tokens.issue(user['id'], user['username'])
        return {'Authorization': f'Bearer {token}'}
    return _make
