"""Pytest configuration for simpleform tests."""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Literal

import pytest
from pydantic import BaseModel, EmailStr, Field, HttpUrl, SecretStr

from simpleform import Text


def pytest_configure() -> None:
    """Configure minimal Django settings with an in-memory database."""
    import django
    from django.conf import settings

    # The Playwright sync API keeps an event loop running in the test thread
    os.environ.setdefault("DJANGO_ALLOW_ASYNC_UNSAFE", "true")

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "simpleform",
            ],
            TEMPLATES=[
                {
                    "BACKEND": "django.template.backends.django.DjangoTemplates",
                    "DIRS": [],
                    "APP_DIRS": False,
                    "OPTIONS": {
                        "context_processors": [],
                    },
                }
            ],
            LANGUAGE_CODE="en",
            USE_I18N=True,
            USE_TZ=False,
            DEFAULT_AUTO_FIELD="django.db.models.AutoField",
        )
        django.setup()


class Plan(str, Enum):
    """Sample enum for testing choice inference."""

    FREE = "free"
    PRO_MONTHLY = "pro_monthly"


class Account(BaseModel):
    """Pydantic model covering the supported attribute types."""

    id: int | None = None
    username: str = Field(max_length=30)
    bio: Text | None = None
    password: SecretStr | None = None
    email: EmailStr | None = None
    website: HttpUrl | None = None
    balance: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    score: int = Field(default=0, ge=0, le=100, multiple_of=5)
    ratio: float | None = None
    newsletter: bool = False
    birthday: date | None = None
    last_login: datetime | None = None
    wake_up: time | None = None
    plan: Plan = Plan.FREE
    theme: Literal["light", "dark"] = "light"
    nickname: str | None = Field(default=None, title="Screen name")


@dataclass
class Project:
    """Dataclass record for testing dataclass introspection."""

    name: str
    summary: Text = ""
    budget: Decimal | None = None
    deadline: date | None = None
    tags: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def django_db():
    """Create the test tables and the companies every association test lists."""
    from django.db import connection

    from .models import Company, Tag, User

    with connection.schema_editor() as editor:
        for model in (Company, Tag, User):
            editor.create_model(model)

    Company.objects.bulk_create(
        [Company(pk=pk, name=f"Company {pk}") for pk in (1, 2, 3)]
    )
    Tag.objects.bulk_create([Tag(pk=1, name="python"), Tag(pk=2, name="django")])


@pytest.fixture
def user(django_db):
    """A persisted user whose name failed validation."""
    from .models import User

    user = User.objects.create(
        name="New in Django",
        description="Hello!",
        age=19,
        credit_limit=Decimal("100.50"),
        born_at=date(1990, 5, 17),
        created_at=datetime(2024, 1, 1, 10, 30),
        company_id=2,
    )
    user.errors = {"name": ["can't be blank"]}
    yield user
    user.delete()


@pytest.fixture
def account() -> Account:
    return Account(id=7, username="ada", plan=Plan.PRO_MONTHLY, password="s3cret")


@pytest.fixture
def html_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for static HTML files."""
    html_path = tmp_path / "html"
    html_path.mkdir(exist_ok=True)
    return html_path


@pytest.fixture
def render_form_to_file(html_dir: Path) -> Callable:
    """Write rendered form markup into a complete HTML document.

    Returns a callable that accepts the markup and optional filename,
    writes the document to the temporary directory, and returns the path.
    """

    def _render(markup: str, filename: str = "form.html") -> Path:
        html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>simpleform test</title>
</head>
<body>
    {markup}
</body>
</html>
"""
        file_path = html_dir / filename
        file_path.write_text(html_content, encoding="utf-8")
        return file_path

    return _render


@pytest.fixture
def page_from_file(page):
    """Navigate a Playwright page to a local file.

    Returns a callable that accepts a file path, navigates to it using
    the file:// protocol, and returns the page ready for assertions.
    """

    def _navigate(file_path: Path):
        page.goto(f"file://{file_path.absolute()}")
        return page

    return _navigate


@pytest.fixture
def render_page(render_form_to_file, page_from_file):
    """Open rendered markup in the Playwright page.

    Returns a callable that accepts the markup, writes it to an HTML file
    and returns the page navigated to it, ready for locator assertions.
    """

    def _render(markup: str, filename: str = "form.html"):
        return page_from_file(render_form_to_file(markup, filename))

    return _render
