# =============================================================================
# core/services/metric_service.py - Metric Sync & Scoreboard Aggregation
# =============================================================================
# Metric rows have no lifecycle of their own. On every write the full set for
# an initiative is replaced: delete all rows, then bulk insert the new ones.
#
# The two steps are separate store calls and are NOT atomic. If the insert
# fails (or the process dies between them) the initiative is left with no
# metrics and the caller gets a MetricSyncError.
# =============================================================================

import logging
from datetime import date
from typing import Any, Iterable

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import parse_int_value
from app.exceptions import MetricSyncError, MetricFetchError
from core.models.initiative import (
    CATEGORY_ORDER,
    Category,
    CategorizedMetrics,
    empty_category_map,
)

logger = logging.getLogger(__name__)

_CATEGORY_VALUES = {category.value for category in Category}


class MetricService:
    """
    Service for an initiative's metric rows.

    Provides the write path (replace_metrics) and the two read shapes:
    grouped detail for editing and per-label totals for the scoreboard.
    """

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    @staticmethod
    def build_metric_rows(
        initiative_id: Any,
        metrics: CategorizedMetrics,
        today: date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Flatten a categorized metrics map into one row per observation.

        Missing dates default to today, missing notes to "", and a missing
        showInScoreboard to True.
        """
        recorded_default = (today or date.today()).isoformat()
        rows: list[dict[str, Any]] = []

        for category, entries in metrics.by_category().items():
            for entry in entries:
                show = True if entry.show_in_scoreboard is None else entry.show_in_scoreboard
                for observation in entry.values:
                    rows.append({
                        "initiative_id": initiative_id,
                        "label": entry.label,
                        "value": observation.value,
                        "ppp": category.value,
                        "date_recorded": observation.date.isoformat() if observation.date else recorded_default,
                        "notes": observation.notes or "",
                        "show_in_scoreboard": show,
                    })

        return rows

    @staticmethod
    def delete_metrics(initiative_id: Any) -> None:
        """
        Delete every metric row of an initiative.

        Raises:
            SupabaseClientError: If the delete fails
        """
        client = SupabaseClient.get_client()

        try:
            client.table("metrics").delete().eq("initiative_id", initiative_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete metrics: {e}",
                code="DELETE_METRICS_FAILED",
                details={"initiative_id": initiative_id}
            )

    @staticmethod
    def replace_metrics(initiative_id: Any, metrics: CategorizedMetrics) -> int:
        """
        Replace the full metric set of an initiative.

        Args:
            initiative_id: Owning initiative
            metrics: The complete new set

        Returns:
            Number of rows inserted

        Raises:
            MetricSyncError: If the delete fails (nothing inserted), or the
                insert fails (initiative now has no metrics)
        """
        try:
            MetricService.delete_metrics(initiative_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to clear metrics for initiative {initiative_id}: {e}")
            raise MetricSyncError("Failed to clear old metrics", initiative_id, str(e))

        rows = MetricService.build_metric_rows(initiative_id, metrics)
        if not rows:
            logger.info(f"Cleared metrics for initiative {initiative_id} (no new rows)")
            return 0

        client = SupabaseClient.get_client()

        try:
            response = client.table("metrics").insert(rows).execute()
        except Exception as e:
            logger.error(
                f"Metric insert failed for initiative {initiative_id}; "
                f"it now has no metrics: {e}"
            )
            raise MetricSyncError("Failed to insert metrics", initiative_id, str(e))

        inserted = len(response.data) if response.data is not None else len(rows)
        if inserted != len(rows):
            logger.error(f"Partial metric insert for initiative {initiative_id}: {inserted}/{len(rows)}")
            raise MetricSyncError(
                "Failed to insert metrics",
                initiative_id,
                f"inserted {inserted} of {len(rows)} rows",
            )

        logger.info(f"Replaced metrics for initiative {initiative_id}: {inserted} rows")
        return inserted

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    @staticmethod
    def fetch_rows(initiative_ids: Any, scoreboard_only: bool = False) -> list[dict[str, Any]]:
        """
        Fetch metric rows for one or many initiatives.

        Raises:
            MetricFetchError: If the query fails
        """
        try:
            return SupabaseClient.fetch_metric_rows(initiative_ids, scoreboard_only=scoreboard_only)
        except SupabaseClientError as e:
            logger.error(f"Failed to fetch metrics for {initiative_ids}: {e}")
            raise MetricFetchError(initiative_ids, str(e))

    @staticmethod
    def group_rows(rows: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
        """
        Group rows by category and label, keeping every observation.

        Labels appear in first-seen order within their category. The
        showInScoreboard flag of a label is taken from its first row.
        """
        grouped = empty_category_map()
        index: dict[tuple[str, str], dict[str, Any]] = {}

        for row in rows:
            category = row.get("ppp")
            if category not in _CATEGORY_VALUES:
                continue

            key = (category, row.get("label"))
            entry = index.get(key)
            if entry is None:
                show = row.get("show_in_scoreboard")
                entry = {
                    "label": row.get("label"),
                    "values": [],
                    "showInScoreboard": True if show is None else bool(show),
                }
                index[key] = entry
                grouped[category].append(entry)

            entry["values"].append({
                "value": row.get("value"),
                "date": row.get("date_recorded"),
                "notes": row.get("notes"),
            })

        return grouped

    @staticmethod
    def aggregate_rows(rows: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
        """
        Reduce rows to per-label totals for the scoreboard.

        Only rows flagged show_in_scoreboard count. Values are summed as
        integers; non-numeric or missing values contribute 0. Labels keep
        first-occurrence order within their category.

        Example:
            Place/Trees 3 + Place/Trees 5 -> {"Place": [{"label": "Trees", "value": 8}], ...}
        """
        totals: dict[str, dict[str, int]] = {category.value: {} for category in CATEGORY_ORDER}

        for row in rows:
            if row.get("show_in_scoreboard") is False:
                continue
            category = row.get("ppp")
            if category not in totals:
                continue
            label = row.get("label")
            labels = totals[category]
            labels[label] = labels.get(label, 0) + parse_int_value(row.get("value"))

        return {
            category: [{"label": label, "value": total} for label, total in labels.items()]
            for category, labels in totals.items()
        }

    @staticmethod
    def aggregate(initiative_id: Any) -> dict[str, list[dict[str, Any]]]:
        """
        Scoreboard totals for one initiative.

        Raises:
            MetricFetchError: If the query fails
        """
        rows = MetricService.fetch_rows(initiative_id, scoreboard_only=True)
        return MetricService.aggregate_rows(rows)

    @staticmethod
    def fetch_grouped(initiative_id: Any) -> dict[str, list[dict[str, Any]]]:
        """
        All metric observations of one initiative, grouped for display.

        Raises:
            MetricFetchError: If the query fails
        """
        return MetricService.group_rows(MetricService.fetch_rows(initiative_id))
