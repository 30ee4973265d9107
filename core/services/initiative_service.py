# =============================================================================
# core/services/initiative_service.py - Initiative Business Logic
# =============================================================================
# Orchestrates an initiative together with its metric rows and its image:
#
#   create: validate -> resolve program -> upload image -> insert row -> metrics
#   edit:   validate -> resolve -> swap image -> update row -> metrics
#   delete: resolve -> delete metrics -> delete row -> remove image
#
# Create undoes its own side effects on failure (best-effort). Edit does not
# roll back an image swap if the later update or metric sync fails, and the
# metric delete/insert pair is never atomic. Both gaps are surfaced as errors.
# =============================================================================

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.config import settings
from app.exceptions import (
    InitiativeDeleteError,
    InitiativeExistsError,
    InitiativeFetchError,
    InitiativeInsertError,
    InitiativeUpdateError,
    MetricSyncError,
    RequestValidationFailed,
)
from core.models.initiative import ImageUpload, InitiativeUpsertRequest, modes_from_row
from core.services.metric_service import MetricService
from core.services.program_service import ProgramService
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)


# =============================================================================
# Per-initiative locking
# =============================================================================
# Serializes writes to the same (program, initiative name) within this
# process. Separate worker processes are not coordinated.

_locks_guard = threading.Lock()
_initiative_locks: dict[tuple[Any, str], list] = {}


@contextmanager
def initiative_lock(program_id: Any, initiative_name: str) -> Iterator[None]:
    """Hold the in-process lock for one initiative."""
    key = (program_id, initiative_name)

    with _locks_guard:
        entry = _initiative_locks.get(key)
        if entry is None:
            entry = [threading.Lock(), 0]
            _initiative_locks[key] = entry
        entry[1] += 1

    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                _initiative_locks.pop(key, None)


class InitiativeService:
    """
    Service for initiative operations.

    Provides a clean interface between API routes and the store, the image
    bucket and the metric synchronizer.
    """

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @staticmethod
    def create_initiative(
        request: InitiativeUpsertRequest,
        image: ImageUpload | None = None,
        require_image: bool | None = None,
    ) -> dict[str, Any]:
        """
        Create an initiative with its metrics and image.

        Args:
            request: Validated add payload
            image: Uploaded image file, if any
            require_image: Require an image or imageUrl (defaults to
                settings.REQUIRE_INITIATIVE_IMAGE)

        Returns:
            The inserted initiative row

        Raises:
            RequestValidationFailed: Image required but missing (no side effects)
            ProgramNotFoundError: Unknown program (no side effects)
            InitiativeExistsError: Name taken within the program (no side effects)
            ImageUploadError: Upload failed (no rows written)
            InitiativeInsertError: Row or metric insert failed (side effects undone)
        """
        if require_image is None:
            require_image = settings.REQUIRE_INITIATIVE_IMAGE

        if require_image and image is None and not request.image_url:
            raise RequestValidationFailed(
                "An image is required",
                errors=[{"loc": ["image"], "msg": "Field required"}],
            )

        program_id = ProgramService.resolve_program_id(request.program_name)

        with initiative_lock(program_id, request.initiative_name):
            try:
                exists = ProgramService.initiative_exists(program_id, request.initiative_name)
            except SupabaseClientError as e:
                logger.error(f"Duplicate check failed: {e}")
                raise InitiativeInsertError("Failed to insert initiative", str(e))

            if exists:
                raise InitiativeExistsError(request.program_name, request.initiative_name)

            storage_key = None
            image_url = request.image_url
            if image is not None:
                storage_key, image_url = StorageService.upload_image(
                    image.content, image.content_type, image.filename
                )

            initiative = InitiativeService._insert_row(program_id, request, image_url, storage_key)

            try:
                MetricService.replace_metrics(initiative["id"], request.metrics)
            except MetricSyncError as e:
                logger.error(f"Rolling back initiative {initiative['id']} after metric failure")
                InitiativeService._discard_row(initiative["id"])
                StorageService.remove_image(storage_key)
                raise InitiativeInsertError("Failed to insert metrics", e.details.get("error", e.message))

        logger.info(
            f"Created initiative {initiative['id']} "
            f"({request.initiative_name!r} in program {program_id})"
        )
        return initiative

    @staticmethod
    def _insert_row(
        program_id: Any,
        request: InitiativeUpsertRequest,
        image_url: str | None,
        storage_key: str | None,
    ) -> dict[str, Any]:
        """Insert the initiatives row, removing the fresh image if it fails."""
        client = SupabaseClient.get_client()

        data = {
            "name": request.initiative_name,
            "description": request.description,
            "image_url": image_url,
            "program_id": program_id,
            **request.mode_flags(),
        }

        error = "Insert returned no data"
        try:
            response = client.table("initiatives").insert(data).execute()
            if response.data:
                return response.data[0]
        except Exception as e:
            error = str(e)

        logger.error(f"Failed to insert initiative {request.initiative_name!r}: {error}")
        StorageService.remove_image(storage_key)
        raise InitiativeInsertError("Failed to insert initiative", error)

    @staticmethod
    def _discard_row(initiative_id: Any) -> None:
        """
        Best-effort delete of an initiative row and any metric rows.

        Each delete is attempted on its own; the row goes even if its
        metrics could not be cleared.
        """
        try:
            MetricService.delete_metrics(initiative_id)
        except SupabaseClientError as e:
            logger.warning(f"Cleanup of metrics for initiative {initiative_id} failed: {e}")

        client = SupabaseClient.get_client()

        try:
            client.table("initiatives").delete().eq("id", initiative_id).execute()
        except Exception as e:
            logger.warning(f"Cleanup of initiative {initiative_id} failed: {e}")

    # -------------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------------

    @staticmethod
    def edit_initiative(
        request: InitiativeUpsertRequest,
        image: ImageUpload | None = None,
    ) -> dict[str, Any]:
        """
        Update an initiative and replace its full metric set.

        A new image file replaces the stored one; otherwise a supplied
        imageUrl replaces it; otherwise the existing reference is kept.

        Returns:
            The update payload that was written

        Raises:
            ProgramNotFoundError / InitiativeNotFoundError: Lookup failed
            ImageUploadError: New image could not be stored
            InitiativeUpdateError: Row update failed
            MetricSyncError: Metric replacement failed
        """
        program_id = ProgramService.resolve_program_id(request.program_name)

        with initiative_lock(program_id, request.initiative_name):
            initiative = ProgramService.resolve_initiative(
                program_id,
                request.initiative_name,
                program_name=request.program_name,
                columns="id, image_url",
            )
            initiative_id = initiative["id"]
            old_image_url = initiative.get("image_url")

            image_url = old_image_url
            if image is not None:
                _, image_url = StorageService.upload_image(
                    image.content, image.content_type, image.filename
                )
            elif request.image_url:
                image_url = request.image_url

            if image_url != old_image_url:
                StorageService.remove_image_by_url(old_image_url)

            update_data = {
                "description": request.description,
                "image_url": image_url,
                **request.mode_flags(),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }

            client = SupabaseClient.get_client()
            try:
                client.table("initiatives").update(update_data).eq("id", initiative_id).execute()
            except Exception as e:
                logger.error(f"Failed to update initiative {initiative_id}: {e}")
                raise InitiativeUpdateError(initiative_id, str(e))

            MetricService.replace_metrics(initiative_id, request.metrics)

        logger.info(f"Updated initiative {initiative_id}")
        return update_data

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_initiative(program_name: str, initiative_name: str) -> None:
        """
        Delete an initiative, its metric rows and its image.

        Metrics go first; if that fails the initiative row is left intact.

        Raises:
            ProgramNotFoundError / InitiativeNotFoundError: Lookup failed
            InitiativeDeleteError: Metric or row deletion failed
        """
        program_id = ProgramService.resolve_program_id(program_name)

        with initiative_lock(program_id, initiative_name):
            initiative = ProgramService.resolve_initiative(
                program_id,
                initiative_name,
                program_name=program_name,
                columns="id, image_url",
            )
            initiative_id = initiative["id"]

            try:
                MetricService.delete_metrics(initiative_id)
            except SupabaseClientError as e:
                logger.error(f"Failed to delete metrics of initiative {initiative_id}: {e}")
                raise InitiativeDeleteError("Failed to delete metrics", initiative_id, str(e))

            client = SupabaseClient.get_client()
            try:
                client.table("initiatives").delete().eq("id", initiative_id).execute()
            except Exception as e:
                logger.error(f"Failed to delete initiative {initiative_id}: {e}")
                raise InitiativeDeleteError("Failed to delete initiative", initiative_id, str(e))

        StorageService.remove_image_by_url(initiative.get("image_url"))
        logger.info(f"Deleted initiative {initiative_id} ({initiative_name!r})")

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    @staticmethod
    def fetch_initiative(program_name: str, initiative_name: str) -> dict[str, Any]:
        """
        Full detail of one initiative, metrics grouped by category and label.

        Raises:
            ProgramNotFoundError / InitiativeNotFoundError: Lookup failed
            MetricFetchError: Metric query failed
        """
        program_id = ProgramService.resolve_program_id(program_name)
        initiative = ProgramService.resolve_initiative(
            program_id, initiative_name, program_name=program_name
        )

        return {
            "programName": program_name,
            "initiativeName": initiative_name,
            "description": initiative.get("description"),
            "modesOfAction": modes_from_row(initiative),
            "imageUrl": initiative.get("image_url"),
            "updatedAt": initiative.get("updated_at"),
            "metrics": MetricService.fetch_grouped(initiative["id"]),
        }

    @staticmethod
    def fetch_scoreboard(program_name: str) -> dict[str, Any]:
        """
        Public view of every initiative of a program with per-label totals.

        All metric rows are read in one query and reduced per initiative.

        Raises:
            ProgramNotFoundError: Unknown program
            InitiativeFetchError: Initiative query failed
            MetricFetchError: Metric query failed
        """
        program_id = ProgramService.resolve_program_id(program_name)

        try:
            initiatives = SupabaseClient.fetch_program_initiatives(program_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to list initiatives of program {program_id}: {e}")
            raise InitiativeFetchError(program_name, str(e))

        rows = MetricService.fetch_rows([i["id"] for i in initiatives], scoreboard_only=True)
        rows_by_initiative: dict[Any, list[dict[str, Any]]] = {}
        for row in rows:
            rows_by_initiative.setdefault(row.get("initiative_id"), []).append(row)

        return {
            "initiatives": [
                {
                    "name": i.get("name"),
                    "description": i.get("description"),
                    "imageUrl": i.get("image_url"),
                    "metrics": MetricService.aggregate_rows(rows_by_initiative.get(i["id"], [])),
                }
                for i in initiatives
            ]
        }
