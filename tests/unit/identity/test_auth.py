"""
Name: Identity Tests

Responsibilities:
  - Argon2 password hashing/verification
  - JWT access tokens (claims, expiry, tampering)
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from backoffice.crosscutting.error_responses import AppHTTPException, ErrorCode
from backoffice.identity.passwords import (
    dummy_password_hash,
    hash_password,
    verify_password,
)
from backoffice.identity.tokens import AccessTokenCodec

pytestmark = pytest.mark.unit

CODEC = AccessTokenCodec(secret="test-secret", ttl_minutes=5)


def test_hash_and_verify_password():
    hashed = hash_password("motdepasse")

    assert hashed != "motdepasse"
    assert verify_password("motdepasse", hashed)
    assert not verify_password("autre", hashed)
    assert not verify_password("motdepasse", "not-a-hash")


def test_dummy_hash_is_a_real_argon2_hash_that_never_matches():
    dummy = dummy_password_hash()

    assert dummy.startswith("$argon2")
    assert dummy_password_hash() is dummy
    assert not verify_password("motdepasse", dummy)


def test_token_roundtrip(user_factory):
    user = user_factory.superadmin()

    issued = CODEC.issue(user)
    claims = CODEC.decode(issued.token)

    assert issued.expires_in == 300
    assert claims.user_id == user.id
    assert claims.role == user.role


def test_expired_token_is_unauthorized(user_factory):
    issued = CODEC.issue(
        user_factory.create(),
        now=datetime.now(timezone.utc) - timedelta(minutes=10),
    )

    with pytest.raises(AppHTTPException) as exc_info:
        CODEC.decode(issued.token)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token expirado."


def test_token_signed_with_other_secret(user_factory):
    issued = replace(CODEC, secret="otro-secreto").issue(user_factory.create())

    with pytest.raises(AppHTTPException) as exc_info:
        CODEC.decode(issued.token)

    assert exc_info.value.code == ErrorCode.UNAUTHORIZED


def test_token_without_role_claim(user_factory):
    token = jwt.encode(
        {"sub": str(user_factory.create().id), "exp": datetime.now(timezone.utc) + timedelta(minutes=1)},
        "test-secret",
        algorithm="HS256",
    )

    with pytest.raises(AppHTTPException):
        CODEC.decode(token)
