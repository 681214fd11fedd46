"""Tests for password hashing, session tokens and the role hierarchy."""

from datetime import timedelta

import jwt
import pytest

from review_pilot.core.security import (
    JWT_ALGORITHM,
    generate_token,
    has_role,
    hash_password,
    is_admin,
    is_manager,
    verify_password,
    verify_token,
)
from review_pilot.models import UserRole


# =============================================================================
# TEST: PASSWORDS
# =============================================================================


class TestPasswords:
    def test_hash_verifies_and_differs_from_plaintext(self):
        hashed = hash_password("Password123")

        assert hashed != "Password123"
        assert verify_password("Password123", hashed)
        assert not verify_password("Password124", hashed)

    def test_missing_hash_never_verifies(self):
        assert not verify_password("Password123", None)
        assert not verify_password("Password123", "")

    def test_malformed_hash_does_not_raise(self):
        assert not verify_password("Password123", "not-a-bcrypt-hash")


# =============================================================================
# TEST: TOKENS
# =============================================================================


class TestTokens:
    def test_round_trip_claims(self):
        token = generate_token(7, "a@example.com", UserRole.MANAGER)

        claims = verify_token(token)

        assert claims is not None
        assert claims.user_id == 7
        assert claims.email == "a@example.com"
        assert claims.role == UserRole.MANAGER

    def test_default_expiry_is_seven_days(self):
        claims = verify_token(generate_token(1, "a@example.com", "user"))

        assert claims.exp - claims.iat == timedelta(days=7)

    def test_expired_token_is_invalid(self):
        token = generate_token(1, "a@example.com", "user", expires_delta=timedelta(seconds=-10))

        assert verify_token(token) is None

    def test_tampered_signature_is_invalid(self):
        token = generate_token(1, "a@example.com", "user")
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        assert verify_token(f"{header}.{payload}.{flipped}") is None

    def test_wrong_secret_is_invalid(self):
        token = generate_token(1, "a@example.com", "user", secret="another-secret")

        assert verify_token(token) is None

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
    def test_garbage_is_invalid(self, garbage):
        assert verify_token(garbage) is None

    def test_failure_reasons_are_indistinguishable(self):
        expired = generate_token(1, "a@example.com", "user", expires_delta=timedelta(seconds=-10))
        forged = generate_token(1, "a@example.com", "user", secret="another-secret")

        assert verify_token(expired) == verify_token(forged) == verify_token("junk")

    def test_token_without_required_claims_is_invalid(self):
        token = jwt.encode({"user_id": 1, "email": "a@example.com", "role": "user"}, "test-secret-key", algorithm=JWT_ALGORITHM)

        assert verify_token(token, secret="test-secret-key") is None


# =============================================================================
# TEST: ROLES
# =============================================================================


class TestRoles:
    @pytest.mark.parametrize(
        "role,required,expected",
        [
            ("user", "user", True),
            ("user", "manager", False),
            ("manager", "user", True),
            ("manager", "admin", False),
            ("admin", "manager", True),
            ("admin", "admin", True),
        ],
    )
    def test_hierarchy(self, role, required, expected):
        assert has_role(role, required) is expected

    def test_unknown_role_ranks_as_user(self):
        assert has_role("superhero", "user")
        assert not has_role("superhero", "manager")

    def test_helpers(self):
        assert is_admin(UserRole.ADMIN)
        assert not is_admin(UserRole.MANAGER)
        assert is_manager(UserRole.MANAGER)
        assert is_manager(UserRole.ADMIN)
        assert not is_manager(UserRole.USER)
