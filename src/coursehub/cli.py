"""CLI entry point for CourseHub.

Commands:
- serve: run the API with uvicorn
- init-db: create the database tables
- create-admin: add an administrator account
- seed: load demo users, courses and enrollments
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from coursehub import __version__
from coursehub.config import ConfigError, Settings, load_settings
from coursehub.logging import get_logger, setup_logging
from coursehub.security import PasswordHasher
from coursehub.store import (
    CourseStore,
    EmailExistsError,
    Requester,
    Role,
    StoreError,
)

logger = get_logger("cli")

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    ("Admin User", "admin@demo.com", Role.ADMIN),
    ("John Smith", "instructor@demo.com", Role.INSTRUCTOR),
    ("Jane Doe", "instructor2@demo.com", Role.INSTRUCTOR),
    ("Student One", "student@demo.com", Role.STUDENT),
    ("Alice Johnson", "student2@demo.com", Role.STUDENT),
    ("Bob Wilson", "student3@demo.com", Role.STUDENT),
]

# (instructor index, title, description, category, level, price, duration,
#  enrolled student indexes, reviews as (student index, rating, comment))
DEMO_COURSES = [
    (
        0,
        "Complete JavaScript Course",
        "Learn JavaScript from basics to advanced concepts including ES6, "
        "async/await, and modern frameworks.",
        "Programming",
        "Beginner",
        89.99,
        40,
        [0, 1],
        [(0, 5, "Clear and practical."), (1, 4, "Good pace.")],
    ),
    (
        0,
        "Advanced React Patterns",
        "Hooks, context, render props and performance techniques for large React apps.",
        "Programming",
        "Advanced",
        129.99,
        25,
        [0],
        [],
    ),
    (
        1,
        "UI/UX Design Fundamentals",
        "Design principles, wireframing and prototyping for web and mobile interfaces.",
        "Design",
        "Beginner",
        69.99,
        30,
        [1, 2],
        [(2, 5, "Loved the exercises.")],
    ),
    (
        1,
        "Digital Marketing Strategy",
        "Plan campaigns, measure results and grow an audience across channels.",
        "Marketing",
        "Intermediate",
        79.99,
        20,
        [],
        [],
    ),
]


def _settings(config_path: Path | None, db_path: str | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if db_path:
        settings.db_path = db_path
    return settings


def _open_store(settings: Settings) -> CourseStore:
    return CourseStore(settings.db_path, PasswordHasher(settings.password_schemes))


@click.group()
@click.version_option(__version__)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to coursehub.yaml",
)
@click.option("--db", "db_path", help="SQLite database path (overrides config)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, db_path: str | None, verbose: bool) -> None:
    """CourseHub - course enrollment service."""
    settings = _settings(config_path, db_path)
    setup_logging(
        log_dir=settings.log_dir,
        level="DEBUG" if verbose else settings.log_level,
    )
    ctx.obj = settings


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_obj
def serve(settings: Settings, host: str, port: int, reload: bool) -> None:
    """Run the REST API."""
    import uvicorn  # noqa: PLC0415

    from coursehub.api.app import create_app  # noqa: PLC0415

    logger.info("Serving on %s:%d", host, port)
    if reload:
        # The reloader imports the module-level app, which reads settings
        # from the environment.
        env = settings.to_env()
        config_path = click.get_current_context().find_root().params.get("config_path")
        if config_path is not None:
            env["COURSEHUB_CONFIG"] = str(config_path.resolve())
        os.environ.update(env)
        uvicorn.run("coursehub.api.app:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(create_app(settings), host=host, port=port)


@main.command("init-db")
@click.pass_obj
def init_db(settings: Settings) -> None:
    """Create database tables."""
    store = _open_store(settings)
    store.close()
    click.echo(f"Database ready at {settings.db_path}")


@main.command("create-admin")
@click.argument("name")
@click.argument("email")
@click.password_option()
@click.pass_obj
def create_admin(settings: Settings, name: str, email: str, password: str) -> None:
    """Create an administrator account."""
    store = _open_store(settings)
    try:
        user = store.register_user(name=name, email=email, password=password, role=Role.ADMIN)
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    finally:
        store.close()
    click.echo(f"Created admin {user.email} ({user.id})")


@main.command()
@click.pass_obj
def seed(settings: Settings) -> None:
    """Load demo users, courses, enrollments and reviews.

    Expects a fresh database; stops if a demo account already exists.
    """
    store = _open_store(settings)
    try:
        users = []
        for name, email, role in DEMO_USERS:
            try:
                users.append(store.register_user(name, email, DEMO_PASSWORD, role))
            except EmailExistsError:
                raise click.ClickException(
                    f"{email} already exists; seed a fresh database"
                ) from None

        instructors = [u for u in users if u.role == Role.INSTRUCTOR]
        students = [u for u in users if u.role == Role.STUDENT]

        for owner, title, description, category, level, price, duration, enrolled, reviews in (
            DEMO_COURSES
        ):
            instructor = instructors[owner]
            course = store.create_course(
                Requester.of(instructor),
                title=title,
                description=description,
                category=category,
                level=level,
                price=price,
                duration=duration,
            )
            for index in enrolled:
                store.enroll(course.id, students[index].id)
            for index, rating, comment in reviews:
                store.add_review(course.id, students[index].id, rating, comment)
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    finally:
        store.close()

    click.echo(f"Seeded {len(DEMO_USERS)} users and {len(DEMO_COURSES)} courses")
    click.echo(f"Demo password for every account: {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
