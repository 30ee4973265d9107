# =============================================================================
# core/services/program_service.py - Name -> Id Resolution
# =============================================================================
# Every endpoint resolves the program name first; initiative names are only
# unique within a resolved program.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.exceptions import ProgramNotFoundError, InitiativeNotFoundError

logger = logging.getLogger(__name__)


class ProgramService:
    """Resolves human-readable program and initiative names to store rows."""

    @staticmethod
    def resolve_program_id(program_name: str) -> Any:
        """
        Resolve a program name to its id (case-sensitive exact match).

        Raises:
            ProgramNotFoundError: If no program has that name, or the lookup fails
        """
        try:
            program = SupabaseClient.fetch_program_by_name(program_name)
        except SupabaseClientError as e:
            logger.error(f"Program lookup failed for {program_name!r}: {e}")
            raise ProgramNotFoundError(program_name)

        if not program:
            raise ProgramNotFoundError(program_name)

        return program["id"]

    @staticmethod
    def resolve_initiative(
        program_id: Any,
        initiative_name: str,
        program_name: str | None = None,
        columns: str = "*",
    ) -> dict[str, Any]:
        """
        Fetch an initiative by name within an already-resolved program.

        Args:
            program_id: Resolved program id
            initiative_name: Initiative name
            program_name: Program name, for error reporting only
            columns: Columns to select

        Raises:
            InitiativeNotFoundError: If absent, or the lookup fails
        """
        try:
            initiative = SupabaseClient.fetch_initiative(program_id, initiative_name, columns=columns)
        except SupabaseClientError as e:
            logger.error(f"Initiative lookup failed for {initiative_name!r}: {e}")
            raise InitiativeNotFoundError(program_name or str(program_id), initiative_name)

        if not initiative:
            raise InitiativeNotFoundError(program_name or str(program_id), initiative_name)

        return initiative

    @staticmethod
    def initiative_exists(program_id: Any, initiative_name: str) -> bool:
        """Check whether a program already has an initiative with this name."""
        return SupabaseClient.fetch_initiative(program_id, initiative_name, columns="id") is not None
