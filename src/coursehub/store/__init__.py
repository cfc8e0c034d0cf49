"""Course store - persistent storage for users, courses, enrollments and reviews."""

from coursehub.store.exceptions import (
    AccountDisabledError,
    AlreadyEnrolledError,
    AlreadyReviewedError,
    AuthenticationError,
    ConflictError,
    CourseExistsError,
    CourseNotFoundError,
    EmailExistsError,
    ForbiddenError,
    NotEnrolledError,
    NotFoundError,
    StoreError,
    UserNotFoundError,
    ValidationError,
)
from coursehub.store.models import (
    Category,
    ContentItem,
    ContentType,
    Course,
    DashboardStats,
    Enrollment,
    Level,
    Page,
    Requester,
    Review,
    Role,
    User,
)
from coursehub.store.queries import CourseFilters, CourseSort, UserFilters
from coursehub.store.store import CourseStore

__all__ = [
    "AccountDisabledError",
    "AlreadyEnrolledError",
    "AlreadyReviewedError",
    "AuthenticationError",
    "Category",
    "ConflictError",
    "ContentItem",
    "ContentType",
    "Course",
    "CourseExistsError",
    "CourseFilters",
    "CourseNotFoundError",
    "CourseSort",
    "CourseStore",
    "DashboardStats",
    "EmailExistsError",
    "Enrollment",
    "ForbiddenError",
    "Level",
    "NotEnrolledError",
    "NotFoundError",
    "Page",
    "Requester",
    "Review",
    "Role",
    "StoreError",
    "User",
    "UserFilters",
    "UserNotFoundError",
    "ValidationError",
]
