# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for initiatives, metrics and program passwords
# - services/: Name resolution, image storage, metric sync/aggregation,
#   the initiative orchestrator and program password auth
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
