"""SQLAlchemy models for the course store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class Role(StrEnum):
    """User role enum."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class Category(StrEnum):
    """Course category enum."""

    PROGRAMMING = "Programming"
    DESIGN = "Design"
    BUSINESS = "Business"
    MARKETING = "Marketing"
    SCIENCE = "Science"
    LANGUAGE = "Language"
    OTHER = "Other"


class Level(StrEnum):
    """Course difficulty enum."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ContentType(StrEnum):
    """Lesson item type enum."""

    VIDEO = "video"
    TEXT = "text"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (SQLite stores no offset)."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """User model - an account with a role.

    Enrolled and created courses are not stored here; they are derived from
    ``Enrollment`` rows and ``Course.instructor_id``.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(
        self,
        name: str,
        email: str,
        password_hash: str,
        id: str | None = None,
        role: str | None = None,
        is_active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.role = role if role is not None else Role.STUDENT.value
        self.is_active = is_active

    @property
    def user_role(self) -> Role:
        """Get role as Role enum."""
        return Role(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, role={self.role!r})>"


class Course(Base):
    """Course model - owned by an instructor, holds reviews and content."""

    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("instructor_id", "title", name="uq_course_instructor_title"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    instructor_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    instructor_name: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False)
    enrollment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    reviews: Mapped[list[Review]] = relationship(
        "Review",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by=lambda: [Review.created_at, Review.id],
    )
    content: Mapped[list[ContentItem]] = relationship(
        "ContentItem",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="ContentItem.order",
    )

    def __init__(
        self,
        title: str,
        description: str,
        instructor_id: str,
        instructor_name: str,
        id: str | None = None,
        category: str | None = None,
        level: str | None = None,
        duration: int = 0,
        price: float = 0.0,
        thumbnail: str = "",
        is_published: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.description = description
        self.instructor_id = instructor_id
        self.instructor_name = instructor_name
        self.category = category if category is not None else Category.OTHER.value
        self.level = level if level is not None else Level.BEGINNER.value
        self.duration = duration
        self.price = price
        self.thumbnail = thumbnail
        self.is_published = is_published
        self.enrollment_count = 0
        self.rating = 0.0

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, title={self.title!r})>"


class Enrollment(Base):
    """Enrollment model - the single record of a (course, student) membership."""

    __tablename__ = "enrollments"

    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def __init__(self, course_id: str, user_id: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.course_id = course_id
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"<Enrollment(course_id={self.course_id!r}, user_id={self.user_id!r})>"


class Review(Base):
    """Review model - one per (course, author)."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("course_id", "user_id", name="uq_review_course_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    course: Mapped[Course] = relationship("Course", back_populates="reviews")

    def __init__(
        self,
        course_id: str,
        user_id: str | None,
        rating: int,
        id: str | None = None,
        comment: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.user_id = user_id
        self.rating = rating
        self.comment = comment

    def __repr__(self) -> str:
        return f"<Review(id={self.id!r}, course_id={self.course_id!r}, rating={self.rating!r})>"


class ContentItem(Base):
    """Lesson item belonging to a course."""

    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    course: Mapped[Course] = relationship("Course", back_populates="content")

    def __init__(
        self,
        title: str,
        body: str,
        order: int,
        id: str | None = None,
        type: str | None = None,
        duration: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.body = body
        self.order = order
        self.type = type if type is not None else ContentType.TEXT.value
        self.duration = duration

    def __repr__(self) -> str:
        return f"<ContentItem(id={self.id!r}, title={self.title!r}, order={self.order!r})>"


@dataclass(frozen=True)
class Requester:
    """Authenticated identity performing an operation."""

    id: str
    role: Role

    @classmethod
    def of(cls, user: User) -> Requester:
        """Identity of a stored user."""
        return cls(id=user.id, role=Role(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class Page:
    """One page of a filtered listing."""

    items: list[Any]
    total: int
    total_pages: int
    page: int
    page_size: int


@dataclass
class DashboardStats:
    """Aggregated statistics for the admin dashboard."""

    total_users: int
    total_students: int
    total_instructors: int
    total_courses: int
    published_courses: int
    total_enrollments: int
    popular_courses: list[Course] = field(default_factory=list)
    recent_users: list[User] = field(default_factory=list)
