# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - initiatives.py: Scoreboard, initiative detail, add/edit/delete
#
# Program password endpoints live in app/auth/.
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import initiatives

__all__ = [
    "health",
    "initiatives",
]
