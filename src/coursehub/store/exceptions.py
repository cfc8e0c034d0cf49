"""Custom exceptions for the course store."""


class StoreError(Exception):
    """Base exception for course store errors."""


class ValidationError(StoreError):
    """Input is malformed or out of range."""


class AuthenticationError(StoreError):
    """Credentials do not match a known user."""


class NotFoundError(StoreError):
    """Requested record does not exist."""


class UserNotFoundError(NotFoundError):
    """User with given ID or email does not exist."""


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist."""


class ConflictError(StoreError):
    """Operation would violate a uniqueness rule."""


class EmailExistsError(ConflictError):
    """Another user already registered this email."""


class CourseExistsError(ConflictError):
    """Instructor already owns a course with this title."""


class AlreadyEnrolledError(ConflictError):
    """User is already enrolled in the course."""


class AlreadyReviewedError(ConflictError):
    """User has already reviewed the course."""


class ForbiddenError(StoreError):
    """Requester is not allowed to perform the operation."""


class AccountDisabledError(ForbiddenError):
    """User account has been deactivated."""


class NotEnrolledError(StoreError):
    """Operation requires the user to be enrolled in the course."""
