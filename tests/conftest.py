"""Shared fixtures: an isolated in-memory database seeded with cats."""

from __future__ import annotations

import os

# Must be set before querypage.config is imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from querypage.database import Base  # noqa: E402
from querypage.models.cat import Cat, CatToy  # noqa: E402

# (id, name, color, age, is_indoor, toy)
CATS = [
    (1, "Milo", "brown", 6, True, "Mouse"),
    (2, "Garfield", "ginger", 5, False, "Lasagna"),
    (3, "Shadow", "black", 4, True, "Ball"),
    (4, "George", "white", 3, True, None),
    (5, "Leche", "white", 1, False, None),
    (6, "Tom", "grey", None, True, None),
]


@pytest.fixture
def engine():
    """In-memory SQLite shared across connections, with the full schema."""
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as sess:
        yield sess


@pytest.fixture
def cats(session: Session) -> list[Cat]:
    """Seed the six reference cats (three of them own a toy)."""
    rows = []
    for cat_id, name, color, age, is_indoor, toy in CATS:
        cat = Cat(id=cat_id, name=name, color=color, age=age, is_indoor=is_indoor)
        if toy:
            cat.toys.append(CatToy(name=toy))
        rows.append(cat)
    session.add_all(rows)
    session.commit()
    return rows
