"""Password hashing, session tokens and caller identity.

Routes never read identity from the request body: ``get_caller`` turns the
session token into a ``Caller`` which is then handed to every service
operation explicitly.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import bcrypt
import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from sqlalchemy.orm import Session

from backend import config
from backend.messages import translate
from backend.models import Profile, ProfileStatus, Role
from backend.storage import SessionLocal
from exceptions.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)
bearer = HTTPBearer(auto_error=False)

ELEVATED_ROLES = frozenset({Role.LIBRARIAN, Role.ADMIN})


@dataclass(frozen=True)
class Caller:
    profile_id: int
    role: Role
    token_version: int
    # false once the token has outlived its profile row
    profile_exists: bool = True


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or config.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        # malformed stored hash
        logger.error(f"Password verification failed: {e}")
        return False


def create_access_token(profile: Profile, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(profile.id),
        "role": Role(profile.role).value,
        "ver": profile.token_version or 0,
        "type": "access",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.debug("Access token expired")
        return None
    except InvalidTokenError as e:
        logger.warning(f"Invalid access token: {e}")
        return None

    if payload.get("type") != "access":
        logger.warning("Invalid token type")
        return None
    return payload


def caller_from_payload(payload: dict) -> Caller:
    try:
        return Caller(
            profile_id=int(payload["sub"]),
            role=Role(payload["role"]),
            token_version=int(payload.get("ver", 0)),
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Malformed token claims: {e}")
        raise AuthenticationError(translate("auth.required"))


def require_role(caller: Caller, roles: Iterable[Role]) -> None:
    if not caller.profile_exists:
        logger.info(f"Profile {caller.profile_id} no longer exists")
        raise AuthenticationError(translate("auth.session_expired"))
    if caller.role not in roles:
        logger.info(f"Profile {caller.profile_id} with role {caller.role.value} denied")
        raise PermissionDeniedError(translate("auth.forbidden"))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def read_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def get_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Caller:
    token = read_token(request, credentials)
    if not token:
        raise AuthenticationError(translate("auth.required"))

    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError(translate("auth.session_expired"))
    caller = caller_from_payload(payload)

    profile = db.get(Profile, caller.profile_id)
    if profile is None:
        # profile operations report this as not found, role checks refuse it
        return replace(caller, profile_exists=False)
    if profile.token_version != caller.token_version:
        logger.info(f"Rejected stale session for profile {caller.profile_id}")
        raise AuthenticationError(translate("auth.session_expired"))
    if ProfileStatus(profile.status) != ProfileStatus.ACTIVE:
        raise AuthenticationError(translate("auth.account_inactive"))
    # the stored role wins over the claim, so demotions apply immediately
    return replace(caller, role=Role(profile.role))


def authenticate(db: Session, email: str, password: str) -> Profile:
    profile = db.query(Profile).filter(Profile.email == email.strip().lower()).first()
    if profile is None or not verify_password(password, profile.password):
        raise AuthenticationError(translate("auth.invalid_login"))
    if ProfileStatus(profile.status) != ProfileStatus.ACTIVE:
        raise AuthenticationError(translate("auth.account_inactive"))
    return profile


def get_elevated_caller(caller: Caller = Depends(get_caller)) -> Caller:
    require_role(caller, ELEVATED_ROLES)
    return caller
