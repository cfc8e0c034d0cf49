"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Callable, Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from coursehub.config import Settings
from coursehub.security import PasswordHasher, TokenError, TokenService
from coursehub.store import CourseStore, Requester, Role, User, UserNotFoundError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

# Global CourseStore instance (initialized on app startup)
_store: CourseStore | None = None


def init_store(
    db_path: str = "coursehub.db", password_schemes: list[str] | None = None
) -> CourseStore:
    """Initialize the global CourseStore instance."""
    global _store  # noqa: PLW0603
    _store = CourseStore(db_path, PasswordHasher(password_schemes))
    return _store


def close_store() -> None:
    """Close the global CourseStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[CourseStore, None, None]:
    """Dependency that provides the CourseStore instance."""
    if _store is None:
        raise RuntimeError("CourseStore not initialized. Call init_store() first.")
    yield _store


# Type alias for dependency injection
StoreDep = Annotated[CourseStore, Depends(get_store)]

# Global Settings instance (initialized on app startup)
_settings: Settings | None = None


def init_settings(settings: Settings) -> Settings:
    """Initialize the global Settings instance."""
    global _settings  # noqa: PLW0603
    _settings = settings
    return _settings


def get_settings() -> Settings:
    """Dependency that provides the Settings instance."""
    if _settings is None:
        raise RuntimeError("Settings not initialized. Call init_settings() first.")
    return _settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_token_service(settings: SettingsDep) -> TokenService:
    """Dependency that provides a TokenService bound to the current settings."""
    return TokenService(settings)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    store: StoreDep,
    tokens: TokenServiceDep,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> User:
    """Resolve the bearer token to an active user.

    The role is read from the stored user, not from the token, so role
    changes take effect immediately.
    """
    if not token:
        raise _unauthorized("Not authenticated")
    try:
        claims = tokens.decode(token)
        user = store.get_user(claims.user_id)
    except (TokenError, UserNotFoundError) as e:
        raise _unauthorized("Could not validate credentials") from e
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_requester(user: CurrentUserDep) -> Requester:
    """Identity of the authenticated caller, for store authorization checks."""
    return Requester.of(user)


RequesterDep = Annotated[Requester, Depends(get_requester)]


def require_roles(*roles: Role) -> Callable[[Requester], Requester]:
    """Build a dependency that only admits requesters with one of ``roles``."""
    allowed = {Role(r) for r in roles}

    def check(requester: RequesterDep) -> Requester:
        if requester.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{requester.role}' is not authorized for this action",
            )
        return requester

    return check


StudentDep = Annotated[Requester, Depends(require_roles(Role.STUDENT))]
InstructorDep = Annotated[Requester, Depends(require_roles(Role.INSTRUCTOR, Role.ADMIN))]
AdminDep = Annotated[Requester, Depends(require_roles(Role.ADMIN))]
