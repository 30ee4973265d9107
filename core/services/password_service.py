# =============================================================================
# core/services/password_service.py - Program Password Auth
# =============================================================================
# Each program has at most one access password, stored as a bcrypt hash in
# the program_passwords table. The hash never leaves this module.
# =============================================================================

import logging
from typing import Any

import bcrypt

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.config import settings
from app.exceptions import PasswordStoreError, ProgramAuthError, RequestValidationFailed
from core.models.program import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)


class PasswordService:
    """Service for setting and verifying program passwords."""

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password with bcrypt at the configured cost."""
        salt = bcrypt.gensalt(rounds=settings.PASSWORD_HASH_ROUNDS)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def check_password(password: str, password_hash: str) -> bool:
        """Compare a password against a stored hash. Malformed hashes never match."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored program password hash is malformed")
            return False

    @staticmethod
    def set_password(program_id: Any, password: str) -> None:
        """
        Set or replace a program's password.

        Raises:
            RequestValidationFailed: If the password is longer than bcrypt accepts
            PasswordStoreError: If hashing or the upsert fails
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise RequestValidationFailed(
                f"password must be at most {MAX_PASSWORD_BYTES} bytes",
                errors=[{"loc": ["password"], "msg": "Too long"}],
            )

        try:
            password_hash = PasswordService.hash_password(password)
        except ValueError as e:
            raise PasswordStoreError(str(e))

        client = SupabaseClient.get_client()

        try:
            (
                client.table("program_passwords")
                .upsert(
                    {"program_id": program_id, "password_hash": password_hash},
                    on_conflict="program_id",
                )
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to store password for program {program_id}: {e}")
            raise PasswordStoreError(str(e))

        logger.info(f"Password set for program {program_id}")

    @staticmethod
    def verify_password(program_id: Any, password: str) -> None:
        """
        Verify a program's password.

        Raises:
            ProgramAuthError: If no password is set, the lookup fails, or it doesn't match
        """
        try:
            password_hash = SupabaseClient.fetch_password_hash(program_id)
        except SupabaseClientError as e:
            logger.error(f"Password lookup failed for program {program_id}: {e}")
            raise ProgramAuthError()

        if not password_hash or not PasswordService.check_password(password, password_hash):
            logger.info(f"Rejected login for program {program_id}")
            raise ProgramAuthError()
