# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized lookups for:
# - Programs (name -> id resolution)
# - Initiatives scoped to a program
# - Metric rows for one or many initiatives
# - Program password hashes
#
# Writes live in the service layer (core/services/); this module only reads.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   program = SupabaseClient.fetch_program_by_name("Green Streets")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and an actionable suggestion so the service layer can
    translate it into an API error.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _first_row(response: Any) -> dict[str, Any] | None:
    """Return the row of a maybe_single() response, tolerating a None response."""
    if response is None:
        return None
    data = response.data
    if isinstance(data, list):
        return data[0] if data else None
    return data


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        program = SupabaseClient.fetch_program_by_name("Green Streets")
        initiative = SupabaseClient.fetch_initiative(program["id"], "Tree Planting")
        rows = SupabaseClient.fetch_metric_rows(initiative["id"])
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Programs
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_program_by_name(cls, program_name: str) -> dict[str, Any] | None:
        """
        Fetch a program by its exact (case-sensitive) name.

        Args:
            program_name: Human-readable program name

        Returns:
            Dict with the program id, or None if no program matches

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("programs")
                .select("id")
                .eq("name", program_name)
                .maybe_single()
                .execute()
            )
            return _first_row(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch program: {e}",
                code="FETCH_PROGRAM_FAILED",
                details={"program_name": program_name}
            )

    # -------------------------------------------------------------------------
    # Initiatives
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_initiative(
        cls,
        program_id: Any,
        initiative_name: str,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch one initiative by name within a program.

        Args:
            program_id: Resolved program id
            initiative_name: Initiative name (unique within the program)
            columns: Column list to select

        Returns:
            Initiative dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("initiatives")
                .select(columns)
                .eq("name", initiative_name)
                .eq("program_id", program_id)
                .maybe_single()
                .execute()
            )
            return _first_row(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch initiative: {e}",
                code="FETCH_INITIATIVE_FAILED",
                details={"program_id": program_id, "initiative_name": initiative_name}
            )

    @classmethod
    def fetch_program_initiatives(cls, program_id: Any) -> list[dict[str, Any]]:
        """
        Fetch the public fields of every initiative owned by a program.

        Returns:
            List of dicts with id, name, description, image_url

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("initiatives")
                .select("id, name, description, image_url")
                .eq("program_id", program_id)
                .execute()
            )
            initiatives = response.data or []
            logger.debug(f"Fetched {len(initiatives)} initiatives for program {program_id}")
            return initiatives

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch initiatives: {e}",
                code="FETCH_INITIATIVES_FAILED",
                details={"program_id": program_id}
            )

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_metric_rows(
        cls,
        initiative_ids: Any | list[Any],
        scoreboard_only: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Fetch metric rows for one initiative or a list of initiatives.

        Args:
            initiative_ids: A single initiative id or a list of ids
            scoreboard_only: Only rows flagged show_in_scoreboard

        Returns:
            List of metric row dicts, in store order

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        query = client.table("metrics").select(
            "id, initiative_id, label, value, ppp, date_recorded, notes, show_in_scoreboard"
        )
        if isinstance(initiative_ids, (list, tuple)):
            if not initiative_ids:
                return []
            query = query.in_("initiative_id", list(initiative_ids))
        else:
            query = query.eq("initiative_id", initiative_ids)
        if scoreboard_only:
            query = query.eq("show_in_scoreboard", True)

        try:
            response = query.order("id").execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch metrics: {e}",
                code="FETCH_METRICS_FAILED",
                details={"initiative_ids": initiative_ids}
            )

    # -------------------------------------------------------------------------
    # Program Passwords
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_password_hash(cls, program_id: Any) -> str | None:
        """
        Fetch the stored password hash for a program.

        Returns:
            The bcrypt hash, or None if no password is set

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("program_passwords")
                .select("password_hash")
                .eq("program_id", program_id)
                .maybe_single()
                .execute()
            )
            row = _first_row(response)
            return row.get("password_hash") if row else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch program password: {e}",
                code="FETCH_PASSWORD_FAILED",
                details={"program_id": program_id}
            )
