from __future__ import annotations

import pytest

from api import create_app
from models import storage

PASSWORD = "Abc12345!"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def issuer(app):
    return app.extensions["session_issuer"]


@pytest.fixture
def resolver(issuer):
    return issuer.resolver


@pytest.fixture
def store(issuer):
    return issuer.store


@pytest.fixture
def register(client):
    def _register(email: str = "a@x.com", password: str = PASSWORD, name: str = "A Person", http=None):
        return (http or client).post(
            "/api/auth/register", json={"email": email, "password": password, "name": name}
        )

    return _register
