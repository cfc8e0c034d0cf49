"""CourseStore - Main API for course store operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from coursehub.logging import get_logger
from coursehub.security import PasswordHasher
from coursehub.store.database import Database
from coursehub.store.exceptions import (
    AccountDisabledError,
    AlreadyEnrolledError,
    AlreadyReviewedError,
    AuthenticationError,
    CourseExistsError,
    CourseNotFoundError,
    EmailExistsError,
    ForbiddenError,
    NotEnrolledError,
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
from coursehub.store.queries import (
    DEFAULT_PAGE_SIZE,
    CourseFilters,
    UserFilters,
    build_course_query,
    build_user_query,
    paginate,
    total_pages,
)

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Session

logger = get_logger("store")

EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)
MAX_COMMENT_LENGTH = 200
MIN_PASSWORD_LENGTH = 6
DASHBOARD_LIMIT = 5


# --- Validation ---


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not 2 <= len(name) <= 50:
        raise ValidationError("Name must be between 2 and 50 characters")
    return name


def _normalize_email(email: str) -> str:
    # Accepts exactly what the API's EmailStr fields accept.
    email = (email or "").strip()
    try:
        return EMAIL_ADAPTER.validate_python(email).lower()
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid email address: '{email}'") from e


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def _parse_enum(enum_cls: Any, value: str, label: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError as e:
        raise ValidationError(f"Invalid {label}: '{value}'") from e


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not 3 <= len(title) <= 100:
        raise ValidationError("Title must be between 3 and 100 characters")
    return title


def _clean_description(description: str) -> str:
    description = (description or "").strip()
    if not 10 <= len(description) <= 500:
        raise ValidationError("Description must be between 10 and 500 characters")
    return description


def _check_non_negative(value: float, label: str) -> None:
    if isinstance(value, bool) or value < 0:
        raise ValidationError(f"{label} cannot be negative")


def _build_content(items: list[dict[str, Any]]) -> list[ContentItem]:
    content = []
    for index, item in enumerate(items):
        title = (item.get("title") or "").strip()
        body = item.get("body") or ""
        if not title or not body:
            raise ValidationError(f"Content item {index + 1} needs a title and a body")
        duration = item.get("duration") or 0
        _check_non_negative(duration, "Content duration")
        order = item.get("order")
        content.append(
            ContentItem(
                title=title,
                body=body,
                order=order if order is not None else index + 1,
                type=_parse_enum(ContentType, item.get("type") or ContentType.TEXT, "content type"),
                duration=duration,
            )
        )
    return content


def _check_review(rating: Any, comment: str | None) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")
    if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")


# --- Authorization ---


def _require_admin(requester: Requester, action: str) -> None:
    if not requester.is_admin:
        raise ForbiddenError(f"Admin privileges required to {action}")


def _require_owner_or_admin(course: Course, requester: Requester, action: str) -> None:
    if course.instructor_id != requester.id and not requester.is_admin:
        raise ForbiddenError(f"Not authorized to {action} course '{course.id}'")


class CourseStore:
    """Main API for course store operations.

    Every public method is one transaction: the course row, its enrollment
    rows and the cached counters are written together or not at all.
    """

    def __init__(self, db_path: str = "coursehub.db", hasher: PasswordHasher | None = None) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            hasher: Password hasher; defaults to pbkdf2_sha256
        """
        self._db = Database(db_path)
        self._db.create_tables()
        self._hasher = hasher or PasswordHasher()

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Internal helpers ---

    @staticmethod
    def _get_user(session: Session, user_id: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(f"User with id '{user_id}' not found")
        return user

    @staticmethod
    def _get_course(session: Session, course_id: str) -> Course:
        course = session.get(Course, course_id)
        if course is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        return course

    @staticmethod
    def _course_detail_stmt() -> Select[Any]:
        return select(Course).options(selectinload(Course.reviews), selectinload(Course.content))

    def _load_course(self, session: Session, course_id: str) -> Course:
        """Reload a course with reviews and content, discarding stale state."""
        stmt = (
            self._course_detail_stmt()
            .where(Course.id == course_id)
            .execution_options(populate_existing=True)
        )
        course = session.execute(stmt).scalar_one_or_none()
        if course is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        return course

    @staticmethod
    def _email_taken(session: Session, email: str, exclude_id: str | None = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return session.execute(stmt).first() is not None

    @staticmethod
    def _title_taken(
        session: Session, instructor_id: str, title: str, exclude_id: str | None = None
    ) -> bool:
        stmt = select(Course.id).where(Course.instructor_id == instructor_id, Course.title == title)
        if exclude_id is not None:
            stmt = stmt.where(Course.id != exclude_id)
        return session.execute(stmt).first() is not None

    @staticmethod
    def _recount_enrollments(session: Session, course_ids: list[str]) -> None:
        """Set enrollment_count from the enrollment rows in one statement per course."""
        for course_id in course_ids:
            count = (
                select(func.count())
                .select_from(Enrollment)
                .where(Enrollment.course_id == course_id)
                .scalar_subquery()
            )
            session.execute(
                update(Course).where(Course.id == course_id).values(enrollment_count=count),
                execution_options={"synchronize_session": False},
            )

    @staticmethod
    def _recompute_rating(session: Session, course_id: str) -> None:
        """Set rating to the mean of the course's review ratings (0 with none)."""
        mean = (
            select(func.coalesce(func.avg(Review.rating), 0.0))
            .where(Review.course_id == course_id)
            .scalar_subquery()
        )
        session.execute(
            update(Course).where(Course.id == course_id).values(rating=mean),
            execution_options={"synchronize_session": False},
        )

    @staticmethod
    def _delete_course_rows(session: Session, course: Course) -> None:
        """Delete a course with its enrollments, reviews and content."""
        session.execute(delete(Enrollment).where(Enrollment.course_id == course.id))
        session.delete(course)

    def _page(
        self, session: Session, rows: Select[Any], count: Select[Any], page: int, page_size: int
    ) -> Page:
        stmt = paginate(rows, page, page_size)
        items = list(session.execute(stmt).scalars().all())
        total = session.execute(count).scalar_one()
        return Page(
            items=items,
            total=total,
            total_pages=total_pages(total, page_size),
            page=page,
            page_size=page_size,
        )

    # --- User Operations ---

    def register_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Role | str = Role.STUDENT,
    ) -> User:
        """Create a new user account.

        Args:
            name: Display name (2-50 characters)
            email: Email address, matched case-insensitively
            password: Plain-text password; only its hash is stored
            role: student, instructor or admin

        Returns:
            Created User object with generated ID

        Raises:
            ValidationError: If any field is malformed
            EmailExistsError: If the email is already registered
        """
        name = _clean_name(name)
        email = _normalize_email(email)
        role_value = _parse_enum(Role, role, "role")
        _check_password(password)

        session = self._db.get_session()
        try:
            if self._email_taken(session, email):
                raise EmailExistsError(f"Email '{email}' is already registered")

            user = User(
                name=name,
                email=email,
                password_hash=self._hasher.hash(password),
                role=role_value,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            logger.info("Registered user %s (role=%s)", user.id, user.role)
            return user
        except IntegrityError as e:
            session.rollback()
            raise EmailExistsError(f"Email '{email}' is already registered") from e
        finally:
            session.close()

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
            AccountDisabledError: If the account has been deactivated
        """
        email = (email or "").strip().lower()
        with self._db.transaction() as session:
            user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
            if user is None or not self._hasher.verify(password, user.password_hash):
                logger.info("Failed login attempt")
                raise AuthenticationError("Invalid email or password")
            if not user.is_active:
                raise AccountDisabledError("Account is deactivated")
            return user

    def get_user(self, user_id: str) -> User:
        """Get user by ID.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        with self._db.transaction() as session:
            return self._get_user(session, user_id)

    def get_user_by_email(self, email: str) -> User:
        """Get user by email (case-insensitive).

        Raises:
            UserNotFoundError: If no user has this email
        """
        email = (email or "").strip().lower()
        with self._db.transaction() as session:
            user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
            if user is None:
                raise UserNotFoundError(f"User with email '{email}' not found")
            return user

    def update_profile(
        self, user_id: str, name: str | None = None, email: str | None = None
    ) -> User:
        """Update the caller's own name and/or email.

        Raises:
            UserNotFoundError: If user doesn't exist
            ValidationError: If a field is malformed
            EmailExistsError: If the new email belongs to another user
        """
        return self._update_user_fields(user_id, name=name, email=email)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """Replace a user's password after checking the current one.

        Raises:
            UserNotFoundError: If user doesn't exist
            AuthenticationError: If current_password is wrong
            ValidationError: If new_password is too short
        """
        _check_password(new_password)
        with self._db.transaction() as session:
            user = self._get_user(session, user_id)
            if not self._hasher.verify(current_password, user.password_hash):
                raise AuthenticationError("Current password is incorrect")
            user.password_hash = self._hasher.hash(new_password)
        logger.info("Password changed for user %s", user_id)

    def update_user(
        self,
        user_id: str,
        requester: Requester,
        name: str | None = None,
        email: str | None = None,
        role: Role | str | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Admin edit of any user. Only provided fields are updated.

        Raises:
            ForbiddenError: If requester is not an admin
            UserNotFoundError: If user doesn't exist
            ValidationError: If a field is malformed
            EmailExistsError: If the new email belongs to another user
        """
        _require_admin(requester, "update users")
        return self._update_user_fields(
            user_id, name=name, email=email, role=role, is_active=is_active
        )

    def _update_user_fields(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        role: Role | str | None = None,
        is_active: bool | None = None,
    ) -> User:
        session = self._db.get_session()
        try:
            user = self._get_user(session, user_id)

            if name is not None:
                user.name = _clean_name(name)
            if email is not None:
                email = _normalize_email(email)
                if self._email_taken(session, email, exclude_id=user_id):
                    raise EmailExistsError(f"Email '{email}' is already taken")
                user.email = email
            if role is not None:
                user.role = _parse_enum(Role, role, "role")
            if is_active is not None:
                user.is_active = is_active

            session.commit()
            session.refresh(user)
            return user
        except IntegrityError as e:
            session.rollback()
            raise EmailExistsError(f"Email '{email}' is already taken") from e
        finally:
            session.close()

    def list_users(
        self,
        filters: UserFilters | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """List users for administration, newest first.

        Args:
            filters: Search text (name/email), role and active status
            page: 1-based page number
            page_size: Max users per page

        Returns:
            Page of User objects with total and total_pages
        """
        rows, count = build_user_query(filters or UserFilters())
        with self._db.transaction() as session:
            return self._page(session, rows, count, page, page_size)

    def delete_user(self, user_id: str, requester: Requester) -> None:
        """Delete a user and everything that depends on them.

        The user's enrollments are removed (affected counts recomputed), their
        reviews are kept with the author cleared, and every course they own is
        deleted with the same cascade as ``delete_course``.

        Raises:
            ForbiddenError: If requester is not an admin, or deletes themselves
            UserNotFoundError: If user doesn't exist
        """
        _require_admin(requester, "delete users")
        if requester.id == user_id:
            raise ForbiddenError("Admins cannot delete their own account")

        with self._db.transaction() as session:
            user = self._get_user(session, user_id)

            owned = session.execute(select(Course).where(Course.instructor_id == user_id)).scalars()
            owned_ids = set()
            for course in owned.all():
                owned_ids.add(course.id)
                self._delete_course_rows(session, course)
            session.flush()

            enrolled_ids = list(
                session.execute(
                    select(Enrollment.course_id).where(Enrollment.user_id == user_id)
                ).scalars()
            )
            session.execute(delete(Enrollment).where(Enrollment.user_id == user_id))
            self._recount_enrollments(session, [c for c in enrolled_ids if c not in owned_ids])

            session.execute(
                update(Review).where(Review.user_id == user_id).values(user_id=None),
                execution_options={"synchronize_session": False},
            )
            session.delete(user)

        logger.info(
            "Deleted user %s (%d owned courses, %d enrollments)",
            user_id,
            len(owned_ids),
            len(enrolled_ids),
        )

    # --- Course Operations ---

    def create_course(
        self,
        requester: Requester,
        title: str,
        description: str,
        category: Category | str | None = None,
        level: Level | str | None = None,
        duration: int = 0,
        price: float = 0.0,
        thumbnail: str = "",
        is_published: bool = True,
        content: list[dict[str, Any]] | None = None,
    ) -> Course:
        """Create a course owned by the requester.

        Args:
            requester: Instructor or admin creating the course
            title: Course title (3-100 characters), unique per instructor
            description: Course description (10-500 characters)
            category: Category name (default Other)
            level: Difficulty (default Beginner)
            duration: Length in hours
            price: Price, >= 0
            thumbnail: Image URL
            is_published: Visible in the public listing
            content: Lesson items (title, body, type, duration, order)

        Returns:
            Created Course with reviews and content loaded

        Raises:
            ForbiddenError: If requester is a student
            UserNotFoundError: If requester's account no longer exists
            ValidationError: If any field is malformed
            CourseExistsError: If the instructor already has a course with this title
        """
        if requester.role not in (Role.INSTRUCTOR, Role.ADMIN):
            raise ForbiddenError("Only instructors and admins can create courses")

        title = _clean_title(title)
        description = _clean_description(description)
        category_value = _parse_enum(Category, category or Category.OTHER, "category")
        level_value = _parse_enum(Level, level or Level.BEGINNER, "level")
        _check_non_negative(duration, "Duration")
        _check_non_negative(price, "Price")
        items = _build_content(content or [])

        session = self._db.get_session()
        try:
            owner = self._get_user(session, requester.id)
            if self._title_taken(session, owner.id, title):
                raise CourseExistsError(f"You already have a course titled '{title}'")

            course = Course(
                title=title,
                description=description,
                instructor_id=owner.id,
                instructor_name=owner.name,
                category=category_value,
                level=level_value,
                duration=duration,
                price=price,
                thumbnail=thumbnail or "",
                is_published=is_published,
            )
            course.content = items
            session.add(course)
            session.commit()
            logger.info("Course %s created by %s", course.id, owner.id)
            return self._load_course(session, course.id)
        except IntegrityError as e:
            session.rollback()
            raise CourseExistsError(f"You already have a course titled '{title}'") from e
        finally:
            session.close()

    def get_course(self, course_id: str) -> Course:
        """Get course by ID, with reviews and content.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.transaction() as session:
            return self._load_course(session, course_id)

    def update_course(
        self,
        course_id: str,
        requester: Requester,
        title: str | None = None,
        description: str | None = None,
        category: Category | str | None = None,
        level: Level | str | None = None,
        duration: int | None = None,
        price: float | None = None,
        thumbnail: str | None = None,
        is_published: bool | None = None,
        content: list[dict[str, Any]] | None = None,
    ) -> Course:
        """Update course fields. Only provided fields are updated.

        A provided ``content`` list replaces the existing lesson items. The
        denormalized instructor_name is left untouched.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ForbiddenError: If requester is neither the owner nor an admin
            ValidationError: If a field is malformed
            CourseExistsError: If the new title clashes with another of the owner's courses
        """
        session = self._db.get_session()
        try:
            course = self._get_course(session, course_id)
            _require_owner_or_admin(course, requester, "update")

            if title is not None:
                title = _clean_title(title)
                if self._title_taken(session, course.instructor_id, title, exclude_id=course_id):
                    raise CourseExistsError(f"Instructor already has a course titled '{title}'")
                course.title = title
            if description is not None:
                course.description = _clean_description(description)
            if category is not None:
                course.category = _parse_enum(Category, category, "category")
            if level is not None:
                course.level = _parse_enum(Level, level, "level")
            if duration is not None:
                _check_non_negative(duration, "Duration")
                course.duration = duration
            if price is not None:
                _check_non_negative(price, "Price")
                course.price = price
            if thumbnail is not None:
                course.thumbnail = thumbnail
            if is_published is not None:
                course.is_published = is_published
            if content is not None:
                course.content = _build_content(content)

            session.commit()
            return self._load_course(session, course_id)
        except IntegrityError as e:
            session.rollback()
            raise CourseExistsError(f"Instructor already has a course titled '{title}'") from e
        finally:
            session.close()

    def delete_course(self, course_id: str, requester: Requester) -> None:
        """Delete a course.

        Its enrollment rows go with it, so it drops out of every student's
        enrolled courses and out of the owner's created courses.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ForbiddenError: If requester is neither the owner nor an admin
        """
        with self._db.transaction() as session:
            course = self._get_course(session, course_id)
            _require_owner_or_admin(course, requester, "delete")
            self._delete_course_rows(session, course)
        logger.info("Course %s deleted by %s", course_id, requester.id)

    def list_courses(
        self,
        filters: CourseFilters | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """List published courses.

        Args:
            filters: Search text, category, level, price range and sort key
            page: 1-based page number
            page_size: Max courses per page

        Returns:
            Page of Course objects with total and total_pages
        """
        rows, count = build_course_query(filters or CourseFilters(), published_only=True)
        with self._db.transaction() as session:
            return self._page(session, rows, count, page, page_size)

    def list_all_courses(
        self,
        filters: CourseFilters | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """List courses regardless of publish state (admin view).

        ``filters.status`` of "published" or "draft" narrows the result.
        """
        rows, count = build_course_query(filters or CourseFilters(), published_only=False)
        with self._db.transaction() as session:
            return self._page(session, rows, count, page, page_size)

    def list_instructor_courses(self, user_id: str) -> list[Course]:
        """Courses owned by a user, newest first."""
        with self._db.transaction() as session:
            self._get_user(session, user_id)
            stmt = (
                select(Course)
                .where(Course.instructor_id == user_id)
                .order_by(Course.created_at.desc(), Course.id)
            )
            return list(session.execute(stmt).scalars().all())

    def list_enrolled_courses(self, user_id: str) -> list[Course]:
        """Courses a user is enrolled in, most recent enrollment first."""
        with self._db.transaction() as session:
            self._get_user(session, user_id)
            stmt = (
                select(Course)
                .join(Enrollment, Enrollment.course_id == Course.id)
                .where(Enrollment.user_id == user_id)
                .order_by(Enrollment.created_at.desc(), Course.id)
            )
            return list(session.execute(stmt).scalars().all())

    def list_enrolled_students(self, course_id: str, requester: Requester) -> list[User]:
        """Students enrolled in a course, in enrollment order.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ForbiddenError: If requester is neither the owner nor an admin
        """
        with self._db.transaction() as session:
            course = self._get_course(session, course_id)
            _require_owner_or_admin(course, requester, "view students of")
            stmt = (
                select(User)
                .join(Enrollment, Enrollment.user_id == User.id)
                .where(Enrollment.course_id == course_id)
                .order_by(Enrollment.created_at, User.id)
            )
            return list(session.execute(stmt).scalars().all())

    # --- Enrollment Operations ---

    def is_enrolled(self, course_id: str, user_id: str) -> bool:
        """Whether the user is enrolled in the course."""
        with self._db.transaction() as session:
            return session.get(Enrollment, (course_id, user_id)) is not None

    def enroll(self, course_id: str, user_id: str) -> Course:
        """Enroll a user in a course.

        Args:
            course_id: The course's unique ID
            user_id: The student's unique ID

        Returns:
            The course with its refreshed enrollment_count

        Raises:
            CourseNotFoundError: If course doesn't exist
            UserNotFoundError: If user doesn't exist
            AlreadyEnrolledError: If the user is already enrolled
        """
        session = self._db.get_session()
        try:
            self._get_course(session, course_id)
            self._get_user(session, user_id)
            if session.get(Enrollment, (course_id, user_id)) is not None:
                raise AlreadyEnrolledError(f"User '{user_id}' is already enrolled in '{course_id}'")

            session.add(Enrollment(course_id=course_id, user_id=user_id))
            # The composite primary key rejects a concurrent duplicate here
            session.flush()
            self._recount_enrollments(session, [course_id])
            session.commit()
            logger.info("User %s enrolled in course %s", user_id, course_id)
            return self._load_course(session, course_id)
        except IntegrityError as e:
            session.rollback()
            raise AlreadyEnrolledError(
                f"User '{user_id}' is already enrolled in '{course_id}'"
            ) from e
        finally:
            session.close()

    def unenroll(self, course_id: str, user_id: str) -> Course:
        """Remove a user's enrollment.

        Returns:
            The course with its refreshed enrollment_count

        Raises:
            CourseNotFoundError: If course doesn't exist
            NotEnrolledError: If the user is not enrolled
        """
        with self._db.transaction() as session:
            self._get_course(session, course_id)
            result = session.execute(
                delete(Enrollment).where(
                    Enrollment.course_id == course_id, Enrollment.user_id == user_id
                )
            )
            if result.rowcount == 0:
                raise NotEnrolledError(f"User '{user_id}' is not enrolled in '{course_id}'")
            self._recount_enrollments(session, [course_id])
            session.flush()
            course = self._load_course(session, course_id)
        logger.info("User %s unenrolled from course %s", user_id, course_id)
        return course

    # --- Review Operations ---

    def add_review(
        self, course_id: str, user_id: str, rating: int, comment: str | None = None
    ) -> Review:
        """Add a review and recompute the course rating.

        Args:
            course_id: The course's unique ID
            user_id: The author's unique ID; must be enrolled
            rating: Integer from 1 to 5
            comment: Optional text, up to 200 characters

        Returns:
            The created Review

        Raises:
            ValidationError: If rating or comment is out of range
            CourseNotFoundError: If course doesn't exist
            NotEnrolledError: If the author is not enrolled in the course
            AlreadyReviewedError: If the author already reviewed the course
        """
        _check_review(rating, comment)

        session = self._db.get_session()
        try:
            self._get_course(session, course_id)
            if session.get(Enrollment, (course_id, user_id)) is None:
                raise NotEnrolledError(f"Must be enrolled in '{course_id}' to review it")

            existing = session.execute(
                select(Review.id).where(Review.course_id == course_id, Review.user_id == user_id)
            ).first()
            if existing is not None:
                raise AlreadyReviewedError(f"User '{user_id}' already reviewed '{course_id}'")

            review = Review(course_id=course_id, user_id=user_id, rating=rating, comment=comment)
            session.add(review)
            session.flush()
            self._recompute_rating(session, course_id)
            session.commit()
            session.refresh(review)
            logger.info("Review %s added to course %s", review.id, course_id)
            return review
        except IntegrityError as e:
            session.rollback()
            raise AlreadyReviewedError(f"User '{user_id}' already reviewed '{course_id}'") from e
        finally:
            session.close()

    def list_reviews(self, course_id: str) -> list[Review]:
        """Reviews of a course, oldest first.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.transaction() as session:
            self._get_course(session, course_id)
            stmt = (
                select(Review)
                .where(Review.course_id == course_id)
                .order_by(Review.created_at, Review.id)
            )
            return list(session.execute(stmt).scalars().all())

    # --- Admin Operations ---

    def get_dashboard_stats(self) -> DashboardStats:
        """Aggregate counts for the admin dashboard.

        Returns:
            DashboardStats with user/course counts, total enrollments, the five
            most enrolled courses and the five newest users
        """
        with self._db.transaction() as session:
            users = session.execute(
                select(User.role, func.count(User.id)).group_by(User.role)
            ).all()
            by_role = {role: count for role, count in users}

            courses = session.execute(
                select(
                    func.count(Course.id),
                    func.coalesce(
                        func.sum(case((Course.is_published.is_(True), 1), else_=0)), 0
                    ),
                    func.coalesce(func.sum(Course.enrollment_count), 0),
                )
            ).one()

            popular = session.execute(
                select(Course)
                .order_by(Course.enrollment_count.desc(), Course.created_at.asc(), Course.id)
                .limit(DASHBOARD_LIMIT)
            ).scalars()
            recent = session.execute(
                select(User).order_by(User.created_at.desc(), User.id).limit(DASHBOARD_LIMIT)
            ).scalars()

            return DashboardStats(
                total_users=sum(by_role.values()),
                total_students=by_role.get(Role.STUDENT.value, 0),
                total_instructors=by_role.get(Role.INSTRUCTOR.value, 0),
                total_courses=courses[0],
                published_courses=int(courses[1]),
                total_enrollments=int(courses[2]),
                popular_courses=list(popular.all()),
                recent_users=list(recent.all()),
            )
