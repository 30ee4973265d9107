# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database lookups
# - utils.py: Shared utilities (metric value parsing, storage keys)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import build_storage_key, parse_int_value, storage_key_from_url

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "build_storage_key",
    "parse_int_value",
    "storage_key_from_url",
]
