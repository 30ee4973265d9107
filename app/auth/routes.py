# =============================================================================
# app/auth/routes.py - Program Password Routes
# =============================================================================
# Each program is protected by a single shared password. These endpoints set
# it and check it. Responses never include the stored hash.
# =============================================================================

import logging

from fastapi import APIRouter

from core.models.program import ProgramAuthResponse, ProgramPasswordRequest
from core.services.password_service import PasswordService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/set-program-password", response_model=ProgramAuthResponse)
async def set_program_password(request: ProgramPasswordRequest) -> ProgramAuthResponse:
    """
    Set or replace a program's access password.

    Raises:
        400: If programId or password is missing
        500: If hashing or storing fails
    """
    PasswordService.set_password(request.program_id, request.password)
    return ProgramAuthResponse(success=True)


@router.post("/program-login", response_model=ProgramAuthResponse)
async def program_login(request: ProgramPasswordRequest) -> ProgramAuthResponse:
    """
    Verify a program's password.

    Raises:
        400: If programId or password is missing
        401: If the password doesn't match or none is set
    """
    PasswordService.verify_password(request.program_id, request.password)
    return ProgramAuthResponse(success=True)
