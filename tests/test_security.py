"""
Tests for password hashing and access tokens.
"""

from datetime import timedelta

import jwt
import pytest

from app.core.config import get_settings
from app.core.errors import InvalidToken
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_is_salted_and_verifies(self):
        first = hash_password("secret1")
        second = hash_password("secret1")
        assert first != second
        assert first != "secret1"
        assert verify_password("secret1", first)
        assert verify_password("secret1", second)

    def test_wrong_password_rejected(self):
        assert not verify_password("secret2", hash_password("secret1"))

    def test_malformed_hash_rejected(self):
        assert not verify_password("secret1", "not-a-bcrypt-hash")


class TestAccessTokens:
    def test_claims_round_trip(self):
        token = create_access_token("user-1", "alice@example.com")
        claims = decode_access_token(token)
        assert claims.sub == "user-1"
        assert claims.email == "alice@example.com"

    def test_expired_token_rejected(self):
        token = create_access_token(
            "user-1", "alice@example.com", expires_delta=timedelta(seconds=-5)
        )
        with pytest.raises(InvalidToken, match="expired"):
            decode_access_token(token)

    def test_foreign_signature_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "user-1", "exp": 9999999999},
            "some-other-secret",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidToken):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidToken):
            decode_access_token("definitely.not.a-token")

    def test_missing_subject_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"email": "alice@example.com", "exp": 9999999999},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidToken):
            decode_access_token(token)
