"""Registration, login and profile endpoints."""

from fastapi import APIRouter, status

from coursehub.api.dependencies import CurrentUserDep, StoreDep, TokenServiceDep
from coursehub.api.models import (
    APIResponse,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    user_to_response,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=APIResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest, store: StoreDep, tokens: TokenServiceDep
) -> APIResponse[TokenResponse]:
    """Create an account and log it in."""
    user = store.register_user(
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
    )
    token = tokens.create_access_token(user.id, user.role)
    return APIResponse(data=TokenResponse(access_token=token, user=user_to_response(user)))


@router.post("/login", response_model=APIResponse[TokenResponse])
def login(
    body: LoginRequest, store: StoreDep, tokens: TokenServiceDep
) -> APIResponse[TokenResponse]:
    """Exchange email and password for a bearer token."""
    user = store.authenticate(body.email, body.password)
    token = tokens.create_access_token(user.id, user.role)
    return APIResponse(data=TokenResponse(access_token=token, user=user_to_response(user)))


@router.get("/me", response_model=APIResponse[UserResponse])
def me(user: CurrentUserDep) -> APIResponse[UserResponse]:
    """Get the authenticated user."""
    return APIResponse(data=user_to_response(user))


@router.put("/profile", response_model=APIResponse[UserResponse])
def update_profile(
    body: ProfileUpdate, user: CurrentUserDep, store: StoreDep
) -> APIResponse[UserResponse]:
    """Update the authenticated user's name and/or email."""
    updated = store.update_profile(user.id, name=body.name, email=body.email)
    return APIResponse(data=user_to_response(updated))


@router.put("/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(body: PasswordChange, user: CurrentUserDep, store: StoreDep) -> None:
    """Change the authenticated user's password."""
    store.change_password(user.id, body.current_password, body.new_password)
