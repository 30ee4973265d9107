# =============================================================================
# core/models/program.py - Program Schemas
# =============================================================================
# Programs (a.k.a. entities) own initiatives. This subsystem never creates
# or renames programs; it only resolves them by name and manages their
# access password.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field, field_validator

# bcrypt cannot hash more than 72 bytes of password
MAX_PASSWORD_BYTES = 72


class ProgramPasswordRequest(BaseModel):
    """
    Body of POST /set-program-password and POST /program-login.

    Example:
        {"programId": 7, "password": "correct horse battery staple"}
    """

    model_config = ConfigDict(populate_by_name=True)

    program_id: int | str = Field(..., alias="programId")
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class ProgramAuthResponse(BaseModel):
    """Success body for password endpoints. Never carries the hash."""
    success: bool = True
