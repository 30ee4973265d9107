# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Impact Dashboard API:
# - fakes.py: In-memory Supabase double (tables + storage bucket)
# - test_models.py: Unit tests for Pydantic model validation
# - test_utils.py: Value coercion and storage key helpers
# - test_metric_service.py: Metric replacement and scoreboard aggregation
# - test_initiative_service.py: Create/edit/delete ordering and cleanup
# - test_password_service.py: Program password hashing and verification
# - test_api.py: Endpoint tests through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
