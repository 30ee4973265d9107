# =============================================================================
# app/auth/__init__.py - Program Authentication Module
# =============================================================================
# Per-program password auth (bcrypt hashes in the program_passwords table).
#
# Usage:
#   from app.auth import routes as auth_routes
#   app.include_router(auth_routes.router)
# =============================================================================

from app.auth import routes

__all__ = [
    "routes",
]
