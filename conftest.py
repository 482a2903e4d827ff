import os

# must be set before the backend modules read their configuration
os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("TEST_DB_URL", "sqlite:///./test.db")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("LIBRARY_LOCALE", "en")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from backend.auth import create_access_token, hash_password
from backend.main import app, get_db
from backend.models import Base, Book, Category, Profile, ProfileStatus, Role
from backend.storage import make_engine

SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DB_URL")

engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

READER_PASSWORD = "reader-pass1"
LIBRARIAN_PASSWORD = "librarian-pass1"


def create_profile_record(
    db,
    name,
    email,
    password,
    role=Role.READER,
    phone=None,
    address=None,
    borrow_count=0,
    total_fines=Decimal("0"),
    status=ProfileStatus.ACTIVE,
):
    profile = Profile(
        name=name,
        email=email.strip().lower(),
        password=hash_password(password),
        role=role,
        phone=phone,
        address=address,
        borrow_count=borrow_count,
        total_fines=total_fines,
        status=status,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def create_book_record(db, title, category_id):
    book = Book(title=title, category_id=category_id)
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


@pytest.fixture(scope="function", autouse=True)
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client():
    app.state.testing = True
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.state.testing = False
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def reader(db_session):
    return create_profile_record(
        db_session,
        name="Reader One",
        email="reader@example.com",
        password=READER_PASSWORD,
        role=Role.READER,
        phone="0912345678",
        address="12 Library Street",
        borrow_count=4,
        total_fines=Decimal("12.50"),
    )


@pytest.fixture(scope="function")
def librarian(db_session):
    return create_profile_record(
        db_session,
        name="Libby Rarian",
        email="librarian@example.com",
        password=LIBRARIAN_PASSWORD,
        role=Role.LIBRARIAN,
        address="1 Main Desk",
    )


@pytest.fixture(scope="function")
def reader_headers(reader):
    return {"Authorization": f"Bearer {create_access_token(reader)}"}


@pytest.fixture(scope="function")
def librarian_headers(librarian):
    return {"Authorization": f"Bearer {create_access_token(librarian)}"}


@pytest.fixture(scope="function")
def make_category(db_session):
    def _make(name, description=None, books=0):
        category = Category(name=name, description=description)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        for i in range(books):
            create_book_record(db_session, f"{name} book {i + 1}", category.id)
        return category

    return _make


@pytest.fixture(scope="function")
def session_factory():
    return TestingSessionLocal
