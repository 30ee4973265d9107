# =============================================================================
# tests/test_password_service.py - Program Password Tests
# =============================================================================

import pytest

from app.exceptions import PasswordStoreError, ProgramAuthError, RequestValidationFailed
from core.services.password_service import PasswordService


class TestHashing:
    """bcrypt hashing helpers."""

    def test_hash_is_not_plaintext(self):
        hashed = PasswordService.hash_password("hunter2")

        assert hashed != "hunter2"
        assert hashed.startswith("$2")

    def test_salted(self):
        """The same password hashes differently each time."""
        assert PasswordService.hash_password("hunter2") != PasswordService.hash_password("hunter2")

    def test_check(self):
        hashed = PasswordService.hash_password("hunter2")

        assert PasswordService.check_password("hunter2", hashed) is True
        assert PasswordService.check_password("hunter3", hashed) is False

    def test_malformed_hash_never_matches(self):
        assert PasswordService.check_password("hunter2", "not-a-bcrypt-hash") is False


class TestSetAndVerify:
    """Storing and verifying program passwords."""

    def test_set_then_verify(self, fake_supabase):
        PasswordService.set_password(1, "hunter2")

        rows = fake_supabase.rows("program_passwords")
        assert len(rows) == 1
        assert rows[0]["program_id"] == 1
        assert rows[0]["password_hash"] != "hunter2"

        PasswordService.verify_password(1, "hunter2")

    def test_set_replaces_previous(self, fake_supabase):
        """Setting twice keeps one row; only the newest password works."""
        PasswordService.set_password(1, "first")
        PasswordService.set_password(1, "second")

        assert len(fake_supabase.rows("program_passwords")) == 1
        PasswordService.verify_password(1, "second")
        with pytest.raises(ProgramAuthError):
            PasswordService.verify_password(1, "first")

    def test_wrong_password(self, fake_supabase):
        PasswordService.set_password(1, "hunter2")

        with pytest.raises(ProgramAuthError) as exc_info:
            PasswordService.verify_password(1, "nope")

        assert exc_info.value.status_code == 401

    def test_no_password_set(self, fake_supabase):
        """A program without a password can't be logged into."""
        with pytest.raises(ProgramAuthError):
            PasswordService.verify_password(2, "anything")

    def test_passwords_are_per_program(self, fake_supabase):
        PasswordService.set_password(1, "hunter2")

        with pytest.raises(ProgramAuthError):
            PasswordService.verify_password(2, "hunter2")

    def test_store_failure(self, fake_supabase):
        fake_supabase.fail("program_passwords", "upsert")

        with pytest.raises(PasswordStoreError) as exc_info:
            PasswordService.set_password(1, "hunter2")

        assert exc_info.value.status_code == 500

    def test_overlong_password_rejected(self, fake_supabase):
        """Passwords bcrypt can't hash are a client error, and nothing is stored."""
        with pytest.raises(RequestValidationFailed) as exc_info:
            PasswordService.set_password(1, "x" * 73)

        assert exc_info.value.status_code == 400
        assert fake_supabase.rows("program_passwords") == []

    def test_lookup_failure_is_auth_error(self, fake_supabase):
        """A failed hash lookup is reported as bad credentials, not a crash."""
        fake_supabase.fail("program_passwords", "select")

        with pytest.raises(ProgramAuthError):
            PasswordService.verify_password(1, "hunter2")
