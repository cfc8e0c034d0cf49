"""Pydantic models for REST API."""

import re
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from coursehub.store.models import Category, ContentType, Level, Role

T = TypeVar("T")

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class PageMeta(BaseModel):
    """Pagination details for list responses."""

    total: int
    total_pages: int
    page: int
    page_size: int
    count: int


class PagedResponse(APIResponse[T], Generic[T]):
    """API response wrapper carrying pagination details."""

    meta: PageMeta | None = None


def _check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "and one number"
        )
    return value


# Auth models


class RegisterRequest(BaseModel):
    """Request model for registering an account."""

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.STUDENT

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @field_validator("role")
    @classmethod
    def no_self_admin(cls, value: Role) -> Role:
        if value == Role.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Request model for updating one's own profile (partial update)."""

    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: EmailStr | None = None


class PasswordChange(BaseModel):
    """Request model for changing one's password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


class UserResponse(BaseModel):
    """Response model for a user. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


def user_to_response(user: Any) -> UserResponse:
    """Convert a User model to UserResponse."""
    return UserResponse.model_validate(user)


class TokenResponse(BaseModel):
    """Response model for a successful login."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class AdminUserUpdate(BaseModel):
    """Request model for an admin editing a user (partial update)."""

    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: EmailStr | None = None
    role: Role | None = None
    is_active: bool | None = None


# Course models


class ContentItemIn(BaseModel):
    """A lesson item in a course create/update request."""

    title: str = Field(..., min_length=1, max_length=255)
    type: ContentType = ContentType.TEXT
    body: str = Field(..., min_length=1)
    duration: int = Field(default=0, ge=0)
    order: int | None = None


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    category: Category = Category.OTHER
    level: Level = Level.BEGINNER
    duration: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0)
    thumbnail: str = Field(default="", max_length=500)
    is_published: bool = True
    content: list[ContentItemIn] = Field(default_factory=list)


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update)."""

    title: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=500)
    category: Category | None = None
    level: Level | None = None
    duration: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    thumbnail: str | None = Field(default=None, max_length=500)
    is_published: bool | None = None
    content: list[ContentItemIn] | None = None


class ContentItemResponse(BaseModel):
    """Response model for a lesson item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    type: str
    body: str
    duration: int
    order: int


class ReviewResponse(BaseModel):
    """Response model for a review."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    user_id: str | None
    rating: int
    comment: str | None
    created_at: datetime


def review_to_response(review: Any) -> ReviewResponse:
    """Convert a Review model to ReviewResponse."""
    return ReviewResponse.model_validate(review)


class ReviewCreate(BaseModel):
    """Request model for adding a review."""

    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=200)


class CourseResponse(BaseModel):
    """Response model for a course in listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    instructor_id: str
    instructor_name: str
    category: str
    level: str
    duration: int
    price: float
    thumbnail: str
    is_published: bool
    enrollment_count: int
    rating: float
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


class CourseDetailResponse(CourseResponse):
    """Response model for a single course, with reviews and content."""

    reviews: list[ReviewResponse]
    content: list[ContentItemResponse]


def course_to_detail(course: Any) -> CourseDetailResponse:
    """Convert a Course model (relationships loaded) to CourseDetailResponse."""
    return CourseDetailResponse.model_validate(course)


class UserDetailResponse(UserResponse):
    """Response model for a single user, with enrolled and created courses."""

    enrolled_courses: list[CourseResponse]
    created_courses: list[CourseResponse]


def user_to_detail(user: Any, enrolled: list[Any], created: list[Any]) -> UserDetailResponse:
    """Convert a User model and its course lists to UserDetailResponse."""
    return UserDetailResponse(
        **user_to_response(user).model_dump(),
        enrolled_courses=[course_to_response(c) for c in enrolled],
        created_courses=[course_to_response(c) for c in created],
    )


def page_meta(page: Any) -> PageMeta:
    """Build pagination details from a store Page."""
    return PageMeta(
        total=page.total,
        total_pages=page.total_pages,
        page=page.page,
        page_size=page.page_size,
        count=len(page.items),
    )


# Admin models


class DashboardStatsResponse(BaseModel):
    """Response model for dashboard statistics."""

    model_config = ConfigDict(from_attributes=True)

    total_users: int
    total_students: int
    total_instructors: int
    total_courses: int
    published_courses: int
    total_enrollments: int
    popular_courses: list[CourseResponse]
    recent_users: list[UserResponse]


def dashboard_stats_to_response(stats: Any) -> DashboardStatsResponse:
    """Convert DashboardStats to DashboardStatsResponse."""
    return DashboardStatsResponse.model_validate(stats)
