"""Unit tests for course store models."""

from coursehub.store.models import (
    Category,
    ContentItem,
    ContentType,
    Course,
    Level,
    Requester,
    Review,
    Role,
    User,
)


class TestEnums:
    """Tests for the string enums."""

    def test_role_values(self) -> None:
        """Roles are student, instructor and admin."""
        assert [r.value for r in Role] == ["student", "instructor", "admin"]

    def test_category_values(self) -> None:
        """Seven categories, Other included."""
        assert len(Category) == 7
        assert Category("Other") is Category.OTHER

    def test_level_values(self) -> None:
        """Three difficulty levels."""
        assert [lv.value for lv in Level] == ["Beginner", "Intermediate", "Advanced"]

    def test_content_type_values(self) -> None:
        """Lesson items are video, text, quiz or assignment."""
        assert {t.value for t in ContentType} == {"video", "text", "quiz", "assignment"}


class TestUserModel:
    """Tests for User model."""

    def test_user_defaults(self) -> None:
        """Role defaults to student, accounts start active, IDs are generated."""
        user = User(name="Sam", email="sam@coursehub.io", password_hash="x")

        assert user.role == "student"
        assert user.user_role is Role.STUDENT
        assert user.is_active is True
        assert len(user.id) == 36

    def test_user_repr(self) -> None:
        """repr shows ID, email and role but not the hash."""
        user = User(id="u-1", name="Sam", email="sam@coursehub.io", password_hash="secret-hash")

        text = repr(user)
        assert "u-1" in text
        assert "sam@coursehub.io" in text
        assert "secret-hash" not in text


class TestCourseModel:
    """Tests for Course model."""

    def test_course_defaults(self) -> None:
        """Category Other, level Beginner, published, no enrollments or rating."""
        course = Course(
            title="Intro", description="Ten chars+", instructor_id="u-1", instructor_name="Ian"
        )

        assert course.category == "Other"
        assert course.level == "Beginner"
        assert course.is_published is True
        assert course.enrollment_count == 0
        assert course.rating == 0.0
        assert course.price == 0.0

    def test_course_repr(self) -> None:
        """repr includes ID and title."""
        course = Course(
            id="c-1",
            title="Intro",
            description="Ten chars+",
            instructor_id="u-1",
            instructor_name="Ian",
        )

        assert "c-1" in repr(course)
        assert "Intro" in repr(course)


class TestReviewAndContent:
    """Tests for Review and ContentItem models."""

    def test_review_comment_optional(self) -> None:
        """Comment defaults to None."""
        review = Review(course_id="c-1", user_id="u-1", rating=4)

        assert review.comment is None
        assert review.rating == 4

    def test_content_type_defaults_to_text(self) -> None:
        """Lesson items default to text with no duration."""
        item = ContentItem(title="Welcome", body="Hello", order=1)

        assert item.type == "text"
        assert item.duration == 0


class TestRequester:
    """Tests for Requester."""

    def test_of_user(self) -> None:
        """Built from a stored user's ID and role."""
        user = User(id="u-1", name="Ada", email="ada@coursehub.io", password_hash="x", role="admin")

        requester = Requester.of(user)

        assert requester == Requester(id="u-1", role=Role.ADMIN)
        assert requester.is_admin is True

    def test_non_admin(self) -> None:
        """Instructors are not admins."""
        assert Requester(id="u-2", role=Role.INSTRUCTOR).is_admin is False
