"""Unit tests for course, enrollment and review routes."""

import pytest
from fastapi.testclient import TestClient

from coursehub.store import Course, CourseStore, Requester, User

DESCRIPTION = "A practical course with plenty of exercises."


@pytest.mark.unit
class TestListCourses:
    """Tests for GET /courses."""

    def test_list_empty(self, client: TestClient) -> None:
        """Returns an empty page when there are no courses."""
        response = client.get("/api/v1/courses")

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["meta"]["total"] == 0
        assert body["error"] is None

    def test_filters_and_meta(
        self, client: TestClient, store: CourseStore, instructor: User
    ) -> None:
        """Query parameters map to store filters; meta describes the page."""
        requester = Requester.of(instructor)
        for title, price in (("Forty", 40), ("Seventy Five", 75), ("One Fifty", 150)):
            store.create_course(requester, title=title, description=DESCRIPTION, price=price)

        response = client.get(
            "/api/v1/courses", params={"minPrice": 50, "maxPrice": 100, "limit": 5}
        )

        assert response.status_code == 200
        body = response.json()
        assert [c["title"] for c in body["data"]] == ["Seventy Five"]
        assert body["meta"] == {
            "total": 1,
            "total_pages": 1,
            "page": 1,
            "page_size": 5,
            "count": 1,
        }

    def test_sort_and_category_all(
        self, client: TestClient, store: CourseStore, instructor: User
    ) -> None:
        """sort=price_low orders ascending; category=All matches everything."""
        requester = Requester.of(instructor)
        for title, price in (("Thirty", 30), ("Ten", 10), ("Twenty", 20)):
            store.create_course(requester, title=title, description=DESCRIPTION, price=price)

        response = client.get("/api/v1/courses", params={"sort": "price_low", "category": "All"})

        assert [c["price"] for c in response.json()["data"]] == [10, 20, 30]

    def test_limit_too_large(self, client: TestClient) -> None:
        """422 for a page size over 100."""
        response = client.get("/api/v1/courses", params={"limit": 101})

        assert response.status_code == 422


@pytest.mark.unit
class TestCourseCrud:
    """Tests for POST/GET/PUT/DELETE /courses."""

    def test_create_as_instructor(
        self, client: TestClient, instructor: User, auth_headers
    ) -> None:
        """201 with the course detail, owned by the caller."""
        response = client.post(
            "/api/v1/courses",
            json={
                "title": "Git Basics",
                "description": DESCRIPTION,
                "category": "Programming",
                "price": 19.5,
                "content": [{"title": "Install", "body": "Install git.", "type": "video"}],
            },
            headers=auth_headers(instructor),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["instructor_id"] == instructor.id
        assert data["instructor_name"] == instructor.name
        assert data["content"][0]["order"] == 1
        assert data["reviews"] == []

    def test_create_as_student_forbidden(
        self, client: TestClient, student: User, auth_headers
    ) -> None:
        """403 for students."""
        response = client.post(
            "/api/v1/courses",
            json={"title": "Git Basics", "description": DESCRIPTION},
            headers=auth_headers(student),
        )

        assert response.status_code == 403

    def test_create_unauthenticated(self, client: TestClient) -> None:
        """401 without a token."""
        response = client.post(
            "/api/v1/courses", json={"title": "Git Basics", "description": DESCRIPTION}
        )

        assert response.status_code == 401

    def test_create_duplicate_title(
        self, client: TestClient, instructor: User, course: Course, auth_headers
    ) -> None:
        """409 when the instructor already has this title."""
        response = client.post(
            "/api/v1/courses",
            json={"title": course.title, "description": DESCRIPTION},
            headers=auth_headers(instructor),
        )

        assert response.status_code == 409

    def test_get_course(self, client: TestClient, course: Course) -> None:
        """Public detail view."""
        response = client.get(f"/api/v1/courses/{course.id}")

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Intro to Python"

    def test_get_course_not_found(self, client: TestClient) -> None:
        """404 with an error envelope."""
        response = client.get("/api/v1/courses/nonexistent-id")

        assert response.status_code == 404
        assert response.json()["data"] is None
        assert "nonexistent-id" in response.json()["error"]

    def test_update_by_owner(
        self, client: TestClient, instructor: User, course: Course, auth_headers
    ) -> None:
        """200 with only the given fields changed."""
        response = client.put(
            f"/api/v1/courses/{course.id}",
            json={"price": 99.0, "is_published": False},
            headers=auth_headers(instructor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 99.0
        assert data["is_published"] is False
        assert data["title"] == course.title

    def test_update_by_other_instructor(
        self, client: TestClient, store: CourseStore, course: Course, auth_headers
    ) -> None:
        """403 for an instructor who doesn't own the course."""
        other = store.register_user("Olga Other", "olga@coursehub.io", "Secret123", "instructor")

        response = client.put(
            f"/api/v1/courses/{course.id}", json={"price": 1.0}, headers=auth_headers(other)
        )

        assert response.status_code == 403

    def test_delete_by_admin(
        self, client: TestClient, admin: User, course: Course, auth_headers
    ) -> None:
        """204, after which the course is gone."""
        response = client.delete(f"/api/v1/courses/{course.id}", headers=auth_headers(admin))

        assert response.status_code == 204
        assert client.get(f"/api/v1/courses/{course.id}").status_code == 404


@pytest.mark.unit
class TestInstructorViews:
    """Tests for instructor-only listings."""

    def test_my_courses(
        self, client: TestClient, instructor: User, course: Course, auth_headers
    ) -> None:
        """Lists the caller's own courses."""
        response = client.get(
            "/api/v1/courses/instructor/my-courses", headers=auth_headers(instructor)
        )

        assert [c["id"] for c in response.json()["data"]] == [course.id]

    def test_students(
        self,
        client: TestClient,
        store: CourseStore,
        instructor: User,
        student: User,
        course: Course,
        auth_headers,
    ) -> None:
        """Owner lists enrolled students without password hashes."""
        store.enroll(course.id, student.id)

        response = client.get(
            f"/api/v1/courses/{course.id}/students", headers=auth_headers(instructor)
        )

        assert response.status_code == 200
        assert [u["id"] for u in response.json()["data"]] == [student.id]
        assert "password_hash" not in response.json()["data"][0]


@pytest.mark.unit
class TestEnrollment:
    """Tests for enroll/unenroll routes."""

    def test_enroll(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """200 with the updated count; course shows up in the student's list."""
        headers = auth_headers(student)

        response = client.post(f"/api/v1/courses/{course.id}/enroll", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["enrollment_count"] == 1
        enrolled = client.get("/api/v1/courses/student/enrolled", headers=headers)
        assert [c["id"] for c in enrolled.json()["data"]] == [course.id]

    def test_enroll_twice(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """409 on the second enrollment."""
        headers = auth_headers(student)
        client.post(f"/api/v1/courses/{course.id}/enroll", headers=headers)

        response = client.post(f"/api/v1/courses/{course.id}/enroll", headers=headers)

        assert response.status_code == 409

    def test_enroll_as_instructor_forbidden(
        self, client: TestClient, instructor: User, course: Course, auth_headers
    ) -> None:
        """403: only students enroll."""
        response = client.post(
            f"/api/v1/courses/{course.id}/enroll", headers=auth_headers(instructor)
        )

        assert response.status_code == 403

    def test_unenroll_not_enrolled(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """400 when the student isn't enrolled."""
        response = client.post(
            f"/api/v1/courses/{course.id}/unenroll", headers=auth_headers(student)
        )

        assert response.status_code == 400

    def test_unenroll(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """200 with the count back to zero."""
        headers = auth_headers(student)
        client.post(f"/api/v1/courses/{course.id}/enroll", headers=headers)

        response = client.post(f"/api/v1/courses/{course.id}/unenroll", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["enrollment_count"] == 0


@pytest.mark.unit
class TestReviews:
    """Tests for review routes."""

    def test_review_requires_enrollment(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """400 for a student who isn't enrolled."""
        response = client.post(
            f"/api/v1/courses/{course.id}/reviews",
            json={"rating": 4},
            headers=auth_headers(student),
        )

        assert response.status_code == 400

    def test_review_flow(
        self, client: TestClient, student: User, course: Course, auth_headers
    ) -> None:
        """201 for the first review, 409 for the second; rating updated."""
        headers = auth_headers(student)
        client.post(f"/api/v1/courses/{course.id}/enroll", headers=headers)

        first = client.post(
            f"/api/v1/courses/{course.id}/reviews",
            json={"rating": 4, "comment": "Solid"},
            headers=headers,
        )
        second = client.post(
            f"/api/v1/courses/{course.id}/reviews", json={"rating": 1}, headers=headers
        )

        assert first.status_code == 201
        assert first.json()["data"]["user_id"] == student.id
        assert second.status_code == 409
        detail = client.get(f"/api/v1/courses/{course.id}").json()["data"]
        assert detail["rating"] == 4.0
        assert [r["comment"] for r in detail["reviews"]] == ["Solid"]

    @pytest.mark.parametrize(
        "body", [{"rating": 0}, {"rating": 6}, {"rating": 3, "comment": "x" * 201}]
    )
    def test_review_invalid_body(
        self, client: TestClient, student: User, course: Course, auth_headers, body: dict
    ) -> None:
        """422 for out-of-range ratings and long comments."""
        response = client.post(
            f"/api/v1/courses/{course.id}/reviews", json=body, headers=auth_headers(student)
        )

        assert response.status_code == 422

    def test_list_reviews(
        self, client: TestClient, store: CourseStore, student: User, course: Course
    ) -> None:
        """Public list of reviews."""
        store.enroll(course.id, student.id)
        store.add_review(course.id, student.id, 5, "Great")

        response = client.get(f"/api/v1/courses/{course.id}/reviews")

        assert response.status_code == 200
        assert [r["rating"] for r in response.json()["data"]] == [5]
