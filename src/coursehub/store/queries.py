"""Query construction for course and user listings.

Turns optional search parameters into SQLAlchemy ``Select`` statements. The
functions here never touch a session; ``CourseStore`` executes what they
build.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select

from coursehub.store.exceptions import ValidationError
from coursehub.store.models import Course, User

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select

ALL = "all"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class CourseSort(StrEnum):
    """Supported course orderings."""

    TITLE = "title"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    RATING = "rating"
    NEWEST = "newest"


@dataclass
class CourseFilters:
    """Search parameters for course listings."""

    search: str | None = None
    category: str | None = None
    level: str | None = None
    status: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: str | None = None


@dataclass
class UserFilters:
    """Search parameters for the admin user listing."""

    search: str | None = None
    role: str | None = None
    status: str | None = None


def is_set(value: str | None) -> bool:
    """True when a filter value is present and not the "all" sentinel."""
    return value is not None and value.strip() != "" and value.strip().lower() != ALL


def course_conditions(filters: CourseFilters, published_only: bool) -> list[ColumnElement[bool]]:
    """Build WHERE conditions for a course listing.

    Args:
        filters: Search parameters; unset fields add no condition.
        published_only: Restrict to published courses (public listing).
            When False, ``filters.status`` may select published or drafts.

    Returns:
        Conditions to AND together.
    """
    conditions: list[ColumnElement[bool]] = []

    if published_only:
        conditions.append(Course.is_published.is_(True))
    elif is_set(filters.status):
        published = (filters.status or "").strip().lower() == "published"
        conditions.append(Course.is_published.is_(published))

    if filters.search and filters.search.strip():
        text = filters.search.strip()
        conditions.append(
            or_(
                Course.title.icontains(text, autoescape=True),
                Course.description.icontains(text, autoescape=True),
                Course.instructor_name.icontains(text, autoescape=True),
                Course.category.icontains(text, autoescape=True),
            )
        )

    if is_set(filters.category):
        conditions.append(Course.category == filters.category)
    if is_set(filters.level):
        conditions.append(Course.level == filters.level)

    if filters.min_price is not None:
        conditions.append(Course.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Course.price <= filters.max_price)

    return conditions


def course_ordering(sort: str | None) -> list[Any]:
    """Map a sort key to ORDER BY clauses.

    Unknown or missing keys fall back to newest first. ``Course.id`` is the
    final tiebreaker so paging is stable.
    """
    try:
        key = CourseSort(sort) if sort else CourseSort.NEWEST
    except ValueError:
        key = CourseSort.NEWEST

    match key:
        case CourseSort.TITLE:
            primary = [Course.title.asc()]
        case CourseSort.PRICE_LOW:
            primary = [Course.price.asc()]
        case CourseSort.PRICE_HIGH:
            primary = [Course.price.desc()]
        case CourseSort.RATING:
            primary = [Course.rating.desc()]
        case _:
            primary = [Course.created_at.desc()]

    return [*primary, Course.id.asc()]


def user_conditions(filters: UserFilters) -> list[ColumnElement[bool]]:
    """Build WHERE conditions for the admin user listing."""
    conditions: list[ColumnElement[bool]] = []

    if filters.search and filters.search.strip():
        text = filters.search.strip()
        conditions.append(
            or_(
                User.name.icontains(text, autoescape=True),
                User.email.icontains(text, autoescape=True),
            )
        )
    if is_set(filters.role):
        conditions.append(User.role == filters.role)
    if is_set(filters.status):
        active = (filters.status or "").strip().lower() == "active"
        conditions.append(User.is_active.is_(active))

    return conditions


def build_course_query(
    filters: CourseFilters, published_only: bool = True
) -> tuple[Select[Any], Select[Any]]:
    """Build the (rows, count) statement pair for a course listing."""
    conditions = course_conditions(filters, published_only)
    rows = select(Course).where(*conditions).order_by(*course_ordering(filters.sort))
    count = select(func.count()).select_from(Course).where(*conditions)
    return rows, count


def build_user_query(filters: UserFilters) -> tuple[Select[Any], Select[Any]]:
    """Build the (rows, count) statement pair for a user listing, newest first."""
    conditions = user_conditions(filters)
    rows = select(User).where(*conditions).order_by(User.created_at.desc(), User.id.asc())
    count = select(func.count()).select_from(User).where(*conditions)
    return rows, count


def paginate(stmt: Select[Any], page: int, page_size: int) -> Select[Any]:
    """Apply 1-based page/page_size as OFFSET/LIMIT.

    Raises:
        ValidationError: If page < 1 or page_size is outside 1..MAX_PAGE_SIZE.
    """
    if page < 1:
        raise ValidationError(f"Page must be >= 1, got {page}")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")
    return stmt.offset((page - 1) * page_size).limit(page_size)


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` rows."""
    return math.ceil(total / page_size)
