"""
Pytest fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient

from main import app
from app.dependencies.auth import get_sign_in_coordinator, get_sign_in_provider
from app.services.sign_in import SignInCoordinator
from tests.fakes import FakeSignInProvider


@pytest.fixture
def fake_provider():
    return FakeSignInProvider()


@pytest.fixture(scope="function")
def client(fake_provider):
    """
    Create a test client with the sign-in provider replaced by a fake.
    """
    coordinator = SignInCoordinator(fake_provider, timeout=5)

    app.dependency_overrides[get_sign_in_provider] = lambda: fake_provider
    app.dependency_overrides[get_sign_in_coordinator] = lambda: coordinator

    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client

    # Clear overrides after test
    app.dependency_overrides.clear()


@pytest.fixture
def sign_up_form(client):
    """
    Switch the client's form to sign-up mode.
    """
    response = client.post("/auth/form/toggle")
    assert response.json()["mode"] == "sign_up"
    return client


@pytest.fixture
def valid_sign_up(sign_up_form):
    """
    Fill every sign-up field with valid values.
    """
    sign_up_form.patch(
        "/auth/form",
        json={
            "email": "jane@example.com",
            "password": "secret1",
            "name": "Jane",
            "confirm_password": "secret1",
        },
    )
    return sign_up_form
