"""Unit tests for password hashing and verification."""

from app.auth.passwords import hash_password, verify_password


class TestHashPassword:
    """Test password hashing."""

    def test_hash_is_bcrypt_string(self):
        hashed = hash_password("mypassword")
        assert isinstance(hashed, str)
        assert hashed.startswith("$2b$12$")

    def test_same_password_different_salts(self):
        """Hashing the same password twice should produce different hashes (different salts)."""
        assert hash_password("samepassword") != hash_password("samepassword")


class TestVerifyPassword:
    """Test password verification."""

    def test_correct_password_verifies(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("testpass123")
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwördü")
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_overlong_password_is_truncated(self):
        """bcrypt only sees 72 bytes; longer input must not raise."""
        long_pass = "a" * 100
        hashed = hash_password(long_pass)
        assert verify_password(long_pass, hashed) is True
        assert verify_password("a" * 72, hashed) is True
        assert verify_password("a" * 71, hashed) is False
