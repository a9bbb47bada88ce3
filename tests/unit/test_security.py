"""
Unit tests for teamtasks/core/security.py

Tests password hashing and session cookie signing without database.
"""

import pytest
from datetime import timedelta
from jose import jwt

from teamtasks.core.security import (
    verify_password,
    get_password_hash,
    create_session_token,
    decode_session_token,
    generate_session_id,
    SECRET_KEY,
    ALGORITHM,
)


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password(self):
        """Test that password is hashed correctly."""
        password = "MySecurePassword123!"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2b$")  # bcrypt prefix

    def test_verify_correct_password(self):
        hashed = get_password_hash("MySecurePassword123!")

        assert verify_password("MySecurePassword123!", hashed) is True

    def test_verify_incorrect_password(self):
        hashed = get_password_hash("MySecurePassword123!")

        assert verify_password("WrongPassword", hashed) is False
        assert verify_password("", hashed) is False
        assert verify_password("MySecurePassword123", hashed) is False  # Missing !

    def test_missing_hash_never_verifies(self):
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_hashes_are_salted(self):
        assert get_password_hash("same") != get_password_hash("same")


class TestSessionTokens:
    """Test the signed session cookie value."""

    def test_session_ids_are_random(self):
        assert generate_session_id() != generate_session_id()
        assert len(generate_session_id()) >= 32

    def test_round_trip_claims(self):
        token = create_session_token(7, "sid-abc", 3)
        claims = decode_session_token(token)

        assert claims["sub"] == "7"
        assert claims["sid"] == "sid-abc"
        assert claims["tv"] == 3
        assert claims["exp"] > claims["iat"]

    def test_expired_token_is_rejected(self):
        token = create_session_token(7, "sid-abc", 1, expires_delta=timedelta(seconds=-10))
        assert decode_session_token(token) is None

    def test_tampered_token_is_rejected(self):
        token = create_session_token(7, "sid-abc", 1)
        assert decode_session_token(token[:-2] + "xx") is None

    def test_foreign_signature_is_rejected(self):
        token = jwt.encode({"sub": "7", "sid": "s", "tv": 1}, "another-secret", algorithm=ALGORITHM)
        assert decode_session_token(token) is None

    @pytest.mark.parametrize("claims", [
        {"sid": "s", "tv": 1},
        {"sub": "7", "tv": 1},
        {"sub": "7", "sid": "s"},
    ])
    def test_incomplete_claims_are_rejected(self, claims):
        token = jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)
        assert decode_session_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_session_token("not-a-jwt") is None
