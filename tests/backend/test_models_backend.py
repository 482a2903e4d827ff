from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models import Book, Category, Profile, ProfileStatus, Role


def test_profile_model(db_session: Session, reader: Profile):
    assert reader.email == "reader@example.com"
    assert reader.role == Role.READER
    assert reader.status == ProfileStatus.ACTIVE
    assert reader.password != "reader-pass1"
    assert reader.password.startswith("$2")
    assert reader.total_fines == Decimal("12.50")
    assert reader.token_version == 0
    assert reader.created_at is not None


def test_category_book_relationship(db_session: Session, make_category):
    category = make_category("Mystery", description="Whodunits", books=2)

    db_session.refresh(category)
    assert len(category.books) == 2
    assert all(book.category_id == category.id for book in category.books)
    assert category.books[0].category.name == "Mystery"


def test_category_timestamps(db_session: Session):
    category = Category(name="Travel")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)

    assert category.created_at is not None
    assert category.updated_at is not None
    assert category.description is None


def test_book_requires_category(db_session: Session):
    book = Book(title="Orphan", category_id=999)
    db_session.add(book)
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
