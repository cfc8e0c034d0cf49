"""Fixtures for route tests: an app wired to the in-memory store."""

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from coursehub.api.app import register_exception_handlers
from coursehub.api.dependencies import get_settings, get_store
from coursehub.api.routes import admin, auth, courses
from coursehub.config import Settings
from coursehub.security import TokenService
from coursehub.store import CourseStore, User


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key="route-test-secret")


@pytest.fixture
def app(store: CourseStore, settings: Settings) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    app = FastAPI()

    def override_get_store():
        yield store

    app.dependency_overrides[get_store] = override_get_store
    app.dependency_overrides[get_settings] = lambda: settings

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[User], dict[str, str]]:
    """Build an Authorization header for a stored user."""
    tokens = TokenService(settings)

    def headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {tokens.create_access_token(user.id, user.role)}"}

    return headers
