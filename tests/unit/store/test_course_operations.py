"""Unit tests for CourseStore course operations."""

import pytest

from coursehub.store import (
    Course,
    CourseExistsError,
    CourseNotFoundError,
    CourseStore,
    ForbiddenError,
    Requester,
    User,
    ValidationError,
)

DESCRIPTION = "A practical course with plenty of exercises."


@pytest.mark.unit
class TestCreateCourse:
    """Tests for create_course."""

    def test_create_course_minimal(self, store: CourseStore, instructor: User) -> None:
        """Create with only title and description."""
        course = store.create_course(
            Requester.of(instructor), title="Git Basics", description=DESCRIPTION
        )

        assert course.id is not None
        assert course.instructor_id == instructor.id
        assert course.instructor_name == "Ian Instructor"
        assert course.category == "Other"
        assert course.level == "Beginner"
        assert course.price == 0.0
        assert course.is_published is True
        assert course.enrollment_count == 0
        assert course.rating == 0.0
        assert course.reviews == []
        assert course.content == []

    def test_create_course_with_content(self, store: CourseStore, instructor: User) -> None:
        """Content items are stored in order; order defaults to position."""
        course = store.create_course(
            Requester.of(instructor),
            title="Git Basics",
            description=DESCRIPTION,
            category="Programming",
            level="Intermediate",
            content=[
                {"title": "Install", "body": "Install git.", "type": "video", "duration": 5},
                {"title": "Commit", "body": "Make a commit."},
            ],
        )

        assert [c.title for c in course.content] == ["Install", "Commit"]
        assert [c.order for c in course.content] == [1, 2]
        assert course.content[0].type == "video"
        assert course.content[1].type == "text"

    def test_student_cannot_create(self, store: CourseStore, student: User) -> None:
        """ForbiddenError when a student creates a course."""
        with pytest.raises(ForbiddenError):
            store.create_course(Requester.of(student), title="Git Basics", description=DESCRIPTION)

    def test_admin_can_create(self, store: CourseStore, admin: User) -> None:
        """Admins own the courses they create."""
        course = store.create_course(
            Requester.of(admin), title="Git Basics", description=DESCRIPTION
        )

        assert course.instructor_id == admin.id

    def test_duplicate_title_same_instructor_raises(
        self, store: CourseStore, instructor: User, course: Course
    ) -> None:
        """CourseExistsError when the instructor reuses a title."""
        with pytest.raises(CourseExistsError) as exc_info:
            store.create_course(
                Requester.of(instructor), title="Intro to Python", description=DESCRIPTION
            )

        assert "Intro to Python" in str(exc_info.value)

    def test_same_title_other_instructor_ok(
        self, store: CourseStore, admin: User, course: Course
    ) -> None:
        """Titles are unique per instructor, not globally."""
        other = store.create_course(
            Requester.of(admin), title="Intro to Python", description=DESCRIPTION
        )

        assert other.id != course.id

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "Go"},
            {"description": "Too short"},
            {"category": "Cooking"},
            {"level": "Expert"},
            {"price": -1.0},
            {"duration": -5},
            {"content": [{"title": "", "body": "No title"}]},
            {"content": [{"title": "Quiz", "body": "Q1", "type": "survey"}]},
        ],
    )
    def test_invalid_fields_raise(
        self, store: CourseStore, instructor: User, overrides: dict
    ) -> None:
        """ValidationError for malformed fields."""
        fields = {"title": "Git Basics", "description": DESCRIPTION, **overrides}

        with pytest.raises(ValidationError):
            store.create_course(Requester.of(instructor), **fields)


@pytest.mark.unit
class TestGetCourse:
    """Tests for get_course."""

    def test_get_course_exists(self, store: CourseStore, course: Course) -> None:
        """Returns the course with relationships loaded."""
        retrieved = store.get_course(course.id)

        assert retrieved.id == course.id
        assert retrieved.title == "Intro to Python"
        assert retrieved.reviews == []

    def test_get_course_not_found_raises(self, store: CourseStore) -> None:
        """CourseNotFoundError for invalid ID."""
        with pytest.raises(CourseNotFoundError) as exc_info:
            store.get_course("nonexistent-id")

        assert "nonexistent-id" in str(exc_info.value)


@pytest.mark.unit
class TestUpdateCourse:
    """Tests for update_course."""

    def test_owner_updates_fields(
        self, store: CourseStore, instructor: User, course: Course
    ) -> None:
        """Only provided fields are updated."""
        updated = store.update_course(
            course.id, Requester.of(instructor), price=59.0, is_published=False
        )

        assert updated.price == 59.0
        assert updated.is_published is False
        assert updated.title == "Intro to Python"
        assert updated.description == course.description

    def test_admin_updates_any_course(
        self, store: CourseStore, admin: User, course: Course
    ) -> None:
        """Admins may edit courses they don't own."""
        updated = store.update_course(course.id, Requester.of(admin), level="Advanced")

        assert updated.level == "Advanced"

    def test_other_instructor_forbidden(self, store: CourseStore, course: Course) -> None:
        """ForbiddenError for an instructor who doesn't own the course."""
        other = store.register_user("Olga Other", "olga@coursehub.io", "Secret123", "instructor")

        with pytest.raises(ForbiddenError):
            store.update_course(course.id, Requester.of(other), price=1.0)

        assert store.get_course(course.id).price == 49.0

    def test_content_replaced(self, store: CourseStore, instructor: User, course: Course) -> None:
        """A provided content list replaces existing items."""
        requester = Requester.of(instructor)
        store.update_course(course.id, requester, content=[{"title": "Old", "body": "Old"}])

        updated = store.update_course(
            course.id,
            requester,
            content=[{"title": "New A", "body": "A"}, {"title": "New B", "body": "B"}],
        )

        assert [c.title for c in updated.content] == ["New A", "New B"]

    def test_title_clash_raises(self, store: CourseStore, instructor: User, course: Course) -> None:
        """CourseExistsError when renaming onto another of the owner's titles."""
        requester = Requester.of(instructor)
        second = store.create_course(requester, title="Advanced Python", description=DESCRIPTION)

        with pytest.raises(CourseExistsError):
            store.update_course(second.id, requester, title="Intro to Python")

    def test_update_not_found(self, store: CourseStore, instructor: User) -> None:
        """CourseNotFoundError for invalid ID."""
        with pytest.raises(CourseNotFoundError):
            store.update_course("nonexistent-id", Requester.of(instructor), price=1.0)


@pytest.mark.unit
class TestDeleteCourse:
    """Tests for delete_course."""

    def test_delete_course_cascades(
        self, store: CourseStore, instructor: User, student: User, course: Course
    ) -> None:
        """Course, its enrollments and its reviews are removed."""
        store.enroll(course.id, student.id)
        store.add_review(course.id, student.id, 4, "Good")

        store.delete_course(course.id, Requester.of(instructor))

        with pytest.raises(CourseNotFoundError):
            store.get_course(course.id)
        assert store.list_enrolled_courses(student.id) == []
        assert store.list_instructor_courses(instructor.id) == []
        assert store.is_enrolled(course.id, student.id) is False

    def test_delete_by_student_forbidden(
        self, store: CourseStore, student: User, course: Course
    ) -> None:
        """ForbiddenError for a non-owner, non-admin requester."""
        with pytest.raises(ForbiddenError):
            store.delete_course(course.id, Requester.of(student))

        assert store.get_course(course.id).id == course.id

    def test_delete_not_found(self, store: CourseStore, admin: User) -> None:
        """CourseNotFoundError for invalid ID."""
        with pytest.raises(CourseNotFoundError):
            store.delete_course("nonexistent-id", Requester.of(admin))


@pytest.mark.unit
class TestInstructorListings:
    """Tests for list_instructor_courses and list_enrolled_students."""

    def test_instructor_courses_include_drafts(
        self, store: CourseStore, instructor: User, course: Course
    ) -> None:
        """An instructor's own listing includes unpublished courses."""
        draft = store.create_course(
            Requester.of(instructor),
            title="Draft Course",
            description=DESCRIPTION,
            is_published=False,
        )

        ids = {c.id for c in store.list_instructor_courses(instructor.id)}

        assert ids == {course.id, draft.id}

    def test_enrolled_students(
        self, store: CourseStore, instructor: User, student: User, student2: User, course: Course
    ) -> None:
        """Owner sees enrolled students in enrollment order."""
        store.enroll(course.id, student.id)
        store.enroll(course.id, student2.id)

        students = store.list_enrolled_students(course.id, Requester.of(instructor))

        assert [s.id for s in students] == [student.id, student2.id]

    def test_enrolled_students_forbidden_for_students(
        self, store: CourseStore, student: User, course: Course
    ) -> None:
        """ForbiddenError for a requester who doesn't own the course."""
        with pytest.raises(ForbiddenError):
            store.list_enrolled_students(course.id, Requester.of(student))
