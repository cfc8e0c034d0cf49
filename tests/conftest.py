"""Shared pytest fixtures and configuration."""

import pytest

from coursehub.store import Course, CourseStore, Requester, Role, User

PASSWORD = "Secret123"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory CourseStore."""
    s = CourseStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def admin(store: CourseStore) -> User:
    return store.register_user("Ada Admin", "ada@coursehub.io", PASSWORD, Role.ADMIN)


@pytest.fixture
def instructor(store: CourseStore) -> User:
    return store.register_user("Ian Instructor", "ian@coursehub.io", PASSWORD, Role.INSTRUCTOR)


@pytest.fixture
def student(store: CourseStore) -> User:
    return store.register_user("Sam Student", "sam@coursehub.io", PASSWORD, Role.STUDENT)


@pytest.fixture
def student2(store: CourseStore) -> User:
    return store.register_user("Sue Student", "sue@coursehub.io", PASSWORD, Role.STUDENT)


@pytest.fixture
def course(store: CourseStore, instructor: User) -> Course:
    return store.create_course(
        Requester.of(instructor),
        title="Intro to Python",
        description="Variables, functions and modules for beginners.",
        category="Programming",
        price=49.0,
        duration=10,
    )
