"""Course, enrollment and review endpoints."""

from fastapi import APIRouter, Query, status

from coursehub.api.dependencies import InstructorDep, StoreDep, StudentDep
from coursehub.api.models import (
    APIResponse,
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
    PagedResponse,
    ReviewCreate,
    ReviewResponse,
    UserResponse,
    course_to_detail,
    course_to_response,
    page_meta,
    review_to_response,
    user_to_response,
)
from coursehub.store import CourseFilters
from coursehub.store.queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=PagedResponse[list[CourseResponse]])
def list_courses(
    store: StoreDep,
    search: str | None = Query(default=None, description="Text to match"),
    category: str | None = Query(default=None, description="Category or 'All'"),
    level: str | None = Query(default=None, description="Level or 'All'"),
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    sort: str | None = Query(default=None, description="title|price_low|price_high|rating|newest"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PagedResponse[list[CourseResponse]]:
    """List published courses with search, filters, sorting and pagination."""
    filters = CourseFilters(
        search=search,
        category=category,
        level=level,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )
    result = store.list_courses(filters, page=page, page_size=limit)
    return PagedResponse(
        data=[course_to_response(c) for c in result.items],
        meta=page_meta(result),
    )


@router.get("/instructor/my-courses", response_model=APIResponse[list[CourseResponse]])
def list_my_courses(store: StoreDep, requester: InstructorDep) -> APIResponse[list[CourseResponse]]:
    """List courses created by the authenticated instructor."""
    courses = store.list_instructor_courses(requester.id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.get("/student/enrolled", response_model=APIResponse[list[CourseResponse]])
def list_enrolled(store: StoreDep, requester: StudentDep) -> APIResponse[list[CourseResponse]]:
    """List courses the authenticated student is enrolled in."""
    courses = store.list_enrolled_courses(requester.id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseDetailResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    course: CourseCreate, store: StoreDep, requester: InstructorDep
) -> APIResponse[CourseDetailResponse]:
    """Create a course owned by the authenticated instructor."""
    created = store.create_course(
        requester,
        title=course.title,
        description=course.description,
        category=course.category,
        level=course.level,
        duration=course.duration,
        price=course.price,
        thumbnail=course.thumbnail,
        is_published=course.is_published,
        content=[item.model_dump() for item in course.content],
    )
    return APIResponse(data=course_to_detail(created))


@router.get("/{course_id}", response_model=APIResponse[CourseDetailResponse])
def get_course(course_id: str, store: StoreDep) -> APIResponse[CourseDetailResponse]:
    """Get a course with its reviews and content."""
    course = store.get_course(course_id)
    return APIResponse(data=course_to_detail(course))


@router.put("/{course_id}", response_model=APIResponse[CourseDetailResponse])
def update_course(
    course_id: str, course: CourseUpdate, store: StoreDep, requester: InstructorDep
) -> APIResponse[CourseDetailResponse]:
    """Update a course (partial update, owner or admin)."""
    content = None
    if course.content is not None:
        content = [item.model_dump() for item in course.content]
    updated = store.update_course(
        course_id,
        requester,
        title=course.title,
        description=course.description,
        category=course.category,
        level=course.level,
        duration=course.duration,
        price=course.price,
        thumbnail=course.thumbnail,
        is_published=course.is_published,
        content=content,
    )
    return APIResponse(data=course_to_detail(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str, store: StoreDep, requester: InstructorDep) -> None:
    """Delete a course (owner or admin)."""
    store.delete_course(course_id, requester)


@router.get("/{course_id}/students", response_model=APIResponse[list[UserResponse]])
def list_students(
    course_id: str, store: StoreDep, requester: InstructorDep
) -> APIResponse[list[UserResponse]]:
    """List students enrolled in a course (owner or admin)."""
    students = store.list_enrolled_students(course_id, requester)
    return APIResponse(data=[user_to_response(s) for s in students])


@router.post("/{course_id}/enroll", response_model=APIResponse[CourseResponse])
def enroll(course_id: str, store: StoreDep, requester: StudentDep) -> APIResponse[CourseResponse]:
    """Enroll the authenticated student in a course."""
    course = store.enroll(course_id, requester.id)
    return APIResponse(data=course_to_response(course))


@router.post("/{course_id}/unenroll", response_model=APIResponse[CourseResponse])
def unenroll(course_id: str, store: StoreDep, requester: StudentDep) -> APIResponse[CourseResponse]:
    """Unenroll the authenticated student from a course."""
    course = store.unenroll(course_id, requester.id)
    return APIResponse(data=course_to_response(course))


@router.get("/{course_id}/reviews", response_model=APIResponse[list[ReviewResponse]])
def list_reviews(course_id: str, store: StoreDep) -> APIResponse[list[ReviewResponse]]:
    """List a course's reviews, oldest first."""
    reviews = store.list_reviews(course_id)
    return APIResponse(data=[review_to_response(r) for r in reviews])


@router.post(
    "/{course_id}/reviews",
    response_model=APIResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    course_id: str, review: ReviewCreate, store: StoreDep, requester: StudentDep
) -> APIResponse[ReviewResponse]:
    """Review a course the authenticated student is enrolled in."""
    created = store.add_review(course_id, requester.id, review.rating, review.comment)
    return APIResponse(data=review_to_response(created))

