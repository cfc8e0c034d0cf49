"""Administration endpoints: user management, all-course listing, dashboard."""

from fastapi import APIRouter, Query, status

from coursehub.api.dependencies import AdminDep, StoreDep
from coursehub.api.models import (
    AdminUserUpdate,
    APIResponse,
    CourseResponse,
    DashboardStatsResponse,
    PagedResponse,
    UserDetailResponse,
    UserResponse,
    course_to_response,
    dashboard_stats_to_response,
    page_meta,
    user_to_detail,
    user_to_response,
)
from coursehub.store import CourseFilters, UserFilters
from coursehub.store.queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=PagedResponse[list[UserResponse]])
def list_users(
    store: StoreDep,
    _admin: AdminDep,
    search: str | None = Query(default=None, description="Match name or email"),
    role: str | None = Query(default=None, description="Role or 'all'"),
    status_filter: str | None = Query(
        default=None, alias="status", description="active|inactive|all"
    ),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PagedResponse[list[UserResponse]]:
    """List users with search, role/status filters and pagination."""
    filters = UserFilters(search=search, role=role, status=status_filter)
    result = store.list_users(filters, page=page, page_size=limit)
    return PagedResponse(
        data=[user_to_response(u) for u in result.items],
        meta=page_meta(result),
    )


@router.get("/users/{user_id}", response_model=APIResponse[UserDetailResponse])
def get_user(user_id: str, store: StoreDep, _admin: AdminDep) -> APIResponse[UserDetailResponse]:
    """Get a user by ID with their enrolled and created courses."""
    user = store.get_user(user_id)
    detail = user_to_detail(
        user,
        enrolled=store.list_enrolled_courses(user_id),
        created=store.list_instructor_courses(user_id),
    )
    return APIResponse(data=detail)


@router.put("/users/{user_id}", response_model=APIResponse[UserResponse])
def update_user(
    user_id: str, body: AdminUserUpdate, store: StoreDep, admin: AdminDep
) -> APIResponse[UserResponse]:
    """Update a user's name, email, role or active flag."""
    updated = store.update_user(
        user_id,
        admin,
        name=body.name,
        email=body.email,
        role=body.role,
        is_active=body.is_active,
    )
    return APIResponse(data=user_to_response(updated))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, store: StoreDep, admin: AdminDep) -> None:
    """Delete a user and cascade to their enrollments and courses."""
    store.delete_user(user_id, admin)


@router.get("/courses", response_model=PagedResponse[list[CourseResponse]])
def list_all_courses(
    store: StoreDep,
    _admin: AdminDep,
    search: str | None = Query(default=None, description="Text to match"),
    category: str | None = Query(default=None, description="Category or 'all'"),
    status_filter: str | None = Query(
        default=None, alias="status", description="published|draft|all"
    ),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PagedResponse[list[CourseResponse]]:
    """List every course, published or not."""
    filters = CourseFilters(search=search, category=category, status=status_filter)
    result = store.list_all_courses(filters, page=page, page_size=limit)
    return PagedResponse(
        data=[course_to_response(c) for c in result.items],
        meta=page_meta(result),
    )


@router.get("/stats", response_model=APIResponse[DashboardStatsResponse])
def get_stats(store: StoreDep, _admin: AdminDep) -> APIResponse[DashboardStatsResponse]:
    """Get dashboard statistics."""
    return APIResponse(data=dashboard_stats_to_response(store.get_dashboard_stats()))
