import jwt
import pytest

from skillsync.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

USER = {"id": 7, "email": "jane@example.com", "role": "admin", "full_name": "Jane Doe"}


def test_password_hash_round_trip():
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_against_garbage_hash_is_false():
    assert not verify_password("s3cret", "not-a-bcrypt-hash")


def test_token_carries_identity_claims():
    claims = decode_access_token(create_access_token(USER, "secret"), "secret")

    assert claims["id"] == 7
    assert claims["email"] == "jane@example.com"
    assert claims["role"] == "admin"
    assert claims["fullName"] == "Jane Doe"
    assert "exp" in claims


def test_role_defaults_to_student():
    claims = decode_access_token(create_access_token({"id": 1, "email": "a@b.c"}, "secret"), "secret")

    assert claims["role"] == "student"


def test_wrong_secret_is_rejected():
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(create_access_token(USER, "secret"), "other")


def test_expired_token_is_rejected():
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(create_access_token(USER, "secret", expire_hours=-1), "secret")
