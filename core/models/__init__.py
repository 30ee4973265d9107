# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - initiative.py: Initiative, metric, request and response schemas
# - program.py: Program password schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Initiative Models - initiatives and their categorized metrics
# -----------------------------------------------------------------------------
from .initiative import (
    CATEGORY_ORDER,
    MODE_COLUMNS,
    AggregatedMetric,
    Category,
    CategorizedMetrics,
    ImageUpload,
    InitiativeDeleteRequest,
    InitiativeDetail,
    InitiativeUpsertRequest,
    MessageResponse,
    MetricDetail,
    MetricEntry,
    MetricValue,
    MetricValueOut,
    ModeOfAction,
    ScoreboardInitiative,
    ScoreboardResponse,
    empty_category_map,
    modes_from_row,
)

# -----------------------------------------------------------------------------
# Program Models - per-program password auth
# -----------------------------------------------------------------------------
from .program import (
    ProgramAuthResponse,
    ProgramPasswordRequest,
)

__all__ = [
    # Initiative
    "CATEGORY_ORDER",
    "MODE_COLUMNS",
    "AggregatedMetric",
    "Category",
    "CategorizedMetrics",
    "ImageUpload",
    "InitiativeDeleteRequest",
    "InitiativeDetail",
    "InitiativeUpsertRequest",
    "MessageResponse",
    "MetricDetail",
    "MetricEntry",
    "MetricValue",
    "MetricValueOut",
    "ModeOfAction",
    "ScoreboardInitiative",
    "ScoreboardResponse",
    "empty_category_map",
    "modes_from_row",
    # Program
    "ProgramAuthResponse",
    "ProgramPasswordRequest",
]
