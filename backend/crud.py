import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from backend.auth import (
    ELEVATED_ROLES,
    Caller,
    hash_password,
    require_role,
    verify_password,
)
from backend.messages import translate
from backend.models import Book, Category, Profile
from backend.schemas import CategorySchema, ProfileSchema
from exceptions.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialError,
    NotFoundError,
    PasswordReuseError,
)

logger = logging.getLogger(__name__)

def _books_count_query(db: Session):
    return (
        db.query(Category, func.count(Book.id).label("books_count"))
        .outerjoin(Book, Book.category_id == Category.id)
        .group_by(Category.id)
    )


def _format_category(category: Category, books_count: int) -> Dict[str, Any]:
    return CategorySchema(
        id=category.id,
        name=category.name,
        description=category.description,
        created_at=category.created_at,
        updated_at=category.updated_at,
        books_count=books_count,
    ).model_dump()


def _count_books(db: Session, category_id: int) -> int:
    return db.query(func.count(Book.id)).filter(Book.category_id == category_id).scalar()


def _name_conflict() -> ConflictError:
    message = translate("category.exists")
    return ConflictError(message, field="name")


# Categories


def list_categories(
    db: Session,
    search: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> List[Dict[str, Any]]:
    descending = (sort_order or "asc").lower() == "desc"
    try:
        query = _books_count_query(db)
        if search:
            query = query.filter(Category.name.icontains(search, autoescape=True))

        if sort_by == "name":
            query = query.order_by(Category.name.desc() if descending else Category.name.asc())
        elif sort_by == "books_count":
            # the count is not a column; ordered in memory below
            query = query.order_by(Category.created_at.asc())
        else:
            query = query.order_by(
                Category.created_at.desc() if descending else Category.created_at.asc()
            )
        rows = query.all()
    except SQLAlchemyError as e:
        logger.error(f"Get All Categories Error: {e}")
        raise DatabaseError("list categories", str(e), translate("category.list_failed"))

    categories = [_format_category(category, count) for category, count in rows]
    if sort_by == "books_count":
        categories.sort(key=lambda c: c["books_count"], reverse=descending)
    return categories


def create_category(db: Session, caller: Caller, payload: Dict[str, Any]) -> Dict[str, Any]:
    require_role(caller, ELEVATED_ROLES)
    name = payload["name"].strip()
    description = payload.get("description")

    try:
        # best effort; the unique constraint decides concurrent creates
        if db.query(Category).filter(Category.name == name).first() is not None:
            raise _name_conflict()

        category = Category(name=name, description=description)
        db.add(category)
        db.commit()
        db.refresh(category)
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Create Category conflict on name {name!r}: {e.orig}")
        raise _name_conflict()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Create Category Error: {e}")
        raise DatabaseError("create category", str(e), translate("category.create_failed"))

    logger.info(f"Category {category.id} ({category.name}) created by profile {caller.profile_id}")
    return _format_category(category, 0)


def update_category(
    db: Session, caller: Caller, category_id: int, payload: Dict[str, Any]
) -> Dict[str, Any]:
    require_role(caller, ELEVATED_ROLES)
    name = payload["name"].strip()
    description = payload.get("description")

    try:
        category = db.get(Category, category_id)
        if category is None:
            raise NotFoundError(translate("category.not_found"))

        duplicate = (
            db.query(Category)
            .filter(Category.name == name, Category.id != category_id)
            .first()
        )
        if duplicate is not None:
            raise _name_conflict()

        category.name = name
        category.description = description
        db.commit()
        db.refresh(category)
        books_count = _count_books(db, category.id)
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Update Category conflict on name {name!r}: {e.orig}")
        raise _name_conflict()
    except StaleDataError:
        db.rollback()
        raise NotFoundError(translate("category.not_found"))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Update Category Error: {e}")
        raise DatabaseError("update category", str(e), translate("category.update_failed"))

    logger.info(f"Category {category_id} updated by profile {caller.profile_id}")
    return _format_category(category, books_count)


def delete_category(db: Session, caller: Caller, category_id: int) -> None:
    require_role(caller, ELEVATED_ROLES)
    try:
        category = db.get(Category, category_id)
        if category is None:
            raise NotFoundError(translate("category.not_found"))

        books_count = _count_books(db, category_id)
        if books_count > 0:
            raise ConflictError(
                translate("category.has_books"),
                field="id",
                detail=translate("category.has_books_count", count=books_count),
            )

        db.delete(category)
        db.commit()
    except IntegrityError as e:
        # a book was attached between the count and the delete
        db.rollback()
        logger.info(f"Delete Category {category_id} blocked by books: {e.orig}")
        raise ConflictError(translate("category.has_books"))
    except StaleDataError:
        db.rollback()
        raise NotFoundError(translate("category.not_found"))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Delete Category Error: {e}")
        raise DatabaseError("delete category", str(e), translate("category.delete_failed"))

    logger.info(f"Category {category_id} deleted by profile {caller.profile_id}")


# Profiles


def _format_profile(profile: Profile) -> Dict[str, Any]:
    return ProfileSchema(
        name=profile.name,
        email=profile.email,
        phone=profile.phone or "",
        address=profile.address or "",
        joined_date=profile.created_at,
        total_borrows=profile.borrow_count or 0,
        total_fines=float(profile.total_fines or 0),
    ).model_dump()


def _own_profile(db: Session, caller: Caller) -> Profile:
    profile = db.get(Profile, caller.profile_id)
    if profile is None:
        raise NotFoundError(translate("profile.not_found"))
    return profile


def get_profile(db: Session, caller: Caller) -> Dict[str, Any]:
    try:
        profile = _own_profile(db, caller)
    except SQLAlchemyError as e:
        logger.error(f"Get Profile Error: {e}")
        raise DatabaseError("get profile", str(e), translate("profile.get_failed"))
    return _format_profile(profile)


def update_profile(db: Session, caller: Caller, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        profile = _own_profile(db, caller)
        profile.name = payload["name"]
        profile.phone = payload.get("phone")
        profile.address = payload["address"]
        db.commit()
        db.refresh(profile)
    except StaleDataError:
        db.rollback()
        raise NotFoundError(translate("profile.not_found"))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Update Profile Error: {e}")
        raise DatabaseError("update profile", str(e), translate("profile.update_failed"))

    logger.info(f"Profile {caller.profile_id} updated")
    return _format_profile(profile)


def change_password(db: Session, caller: Caller, payload: Dict[str, Any]) -> None:
    """Replace the caller's password and invalidate every session issued so far.

    The new password is compared against the stored hash, not against the
    submitted current password, so reuse is caught regardless of input.
    """
    try:
        profile = _own_profile(db, caller)

        if not verify_password(payload["current_password"], profile.password):
            raise InvalidCredentialError(translate("password.current_invalid"))

        if verify_password(payload["new_password"], profile.password):
            raise PasswordReuseError(translate("password.must_differ"))

        profile.password = hash_password(payload["new_password"])
        profile.token_version = (profile.token_version or 0) + 1
        db.commit()
    except StaleDataError:
        db.rollback()
        raise NotFoundError(translate("profile.not_found"))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Change Password Error: {e}")
        raise DatabaseError("change password", str(e), translate("password.change_failed"))

    logger.info(f"Password changed for profile {caller.profile_id}; sessions invalidated")

