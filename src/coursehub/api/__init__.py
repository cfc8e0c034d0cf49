"""REST API for CourseHub."""

from coursehub.api.app import create_app
from coursehub.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseUpdate",
    "create_app",
]
