import jwt
import pytest

from backend import config
from backend.auth import (
    Caller,
    create_access_token,
    decode_access_token,
    hash_password,
    require_role,
    verify_password,
)
from backend.messages import translate
from backend.models import ProfileStatus, Role
from exceptions.exceptions import AuthenticationError, PermissionDeniedError


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other-pass", hashed)


def test_verify_password_with_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_access_token_claims(reader):
    payload = decode_access_token(create_access_token(reader))
    assert payload["sub"] == str(reader.id)
    assert payload["role"] == "reader"
    assert payload["ver"] == 0


def test_decode_rejects_foreign_and_expired_tokens(reader):
    forged = jwt.encode({"sub": "1", "role": "admin", "type": "access"}, "wrong", algorithm="HS256")
    assert decode_access_token(forged) is None

    expired = jwt.encode(
        {"sub": "1", "role": "reader", "type": "access", "exp": 1},
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
    )
    assert decode_access_token(expired) is None

    refresh = jwt.encode(
        {"sub": "1", "role": "reader", "type": "refresh"},
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
    )
    assert decode_access_token(refresh) is None


def test_require_role():
    admin = Caller(profile_id=1, role=Role.ADMIN, token_version=0)
    reader = Caller(profile_id=2, role=Role.READER, token_version=0)
    require_role(admin, {Role.LIBRARIAN, Role.ADMIN})
    with pytest.raises(PermissionDeniedError):
        require_role(reader, {Role.LIBRARIAN, Role.ADMIN})

    vanished = Caller(profile_id=3, role=Role.ADMIN, token_version=0, profile_exists=False)
    with pytest.raises(AuthenticationError):
        require_role(vanished, {Role.LIBRARIAN, Role.ADMIN})


def test_login_sets_cookie_and_cookie_authenticates(client, reader):
    response = client.post(
        "/auth/login", json={"email": "Reader@Example.com ", "password": "reader-pass1"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["role"] == "reader"
    assert decode_access_token(body["data"]["token"])["sub"] == str(reader.id)
    assert client.cookies.get(config.SESSION_COOKIE_NAME) == body["data"]["token"]

    # no Authorization header: the cookie carries the session
    assert client.get("/profile").status_code == 200

    response = client.post("/auth/logout")
    assert response.status_code == 200
    assert client.cookies.get(config.SESSION_COOKIE_NAME) is None
    assert client.get("/profile").status_code == 401


def test_login_with_bad_credentials(client, reader):
    response = client.post(
        "/auth/login", json={"email": "reader@example.com", "password": "wrong-pass"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == translate("auth.invalid_login")


def test_inactive_profile_is_rejected(client, reader, reader_headers, db_session):
    reader.status = ProfileStatus.SUSPENDED
    db_session.commit()

    response = client.get("/profile", headers=reader_headers)
    assert response.status_code == 401
    assert response.json()["message"] == translate("auth.account_inactive")


def test_garbage_token_is_rejected(client):
    response = client.get("/categories", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
