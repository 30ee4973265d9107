# =============================================================================
# app/routers/initiatives.py - Initiative & Scoreboard Endpoints
# =============================================================================
# Public read endpoints (scoreboard, initiative detail) and the multipart
# add/edit endpoints plus delete.
#
# Images are validated (type allow-list, size cap) here, before anything is
# handed to the service layer.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from app.exceptions import RequestValidationFailed
from core.models.initiative import (
    ImageUpload,
    InitiativeDeleteRequest,
    InitiativeDetail,
    InitiativeUpsertRequest,
    MessageResponse,
    ScoreboardResponse,
)
from core.services.initiative_service import InitiativeService
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

async def _read_image(image: UploadFile | None) -> ImageUpload | None:
    """Read and validate an uploaded image. Returns None when no file was sent."""
    if image is None or not image.filename:
        return None

    upload = ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        content=await image.read(),
    )
    StorageService.validate_image(upload.filename, upload.content_type, upload.size)

    logger.info(f"Received image: {upload.filename} ({upload.size / (1024 * 1024):.2f}MB)")
    return upload


def _require(value: str | None, name: str) -> str:
    if not value:
        raise RequestValidationFailed(
            f"{name} is required",
            errors=[{"loc": ["query", name], "msg": "Field required"}],
        )
    return value


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get("/fetch-scoreboard", response_model=ScoreboardResponse)
async def fetch_scoreboard(
    program_name: Annotated[str | None, Query(alias="programName", description="Program name")] = None,
):
    """
    Public scoreboard for a program.

    Returns every initiative of the program with its metrics summed per
    label. Metrics hidden from the scoreboard are left out.
    """
    program_name = _require(program_name, "programName")
    return InitiativeService.fetch_scoreboard(program_name)


@router.get("/fetch-initiative", response_model=InitiativeDetail)
async def fetch_initiative(
    program_name: Annotated[str | None, Query(alias="programName", description="Program name")] = None,
    initiative_name: Annotated[str | None, Query(alias="initiativeName", description="Initiative name")] = None,
):
    """
    Full detail of one initiative.

    Metrics are grouped by category and label with every recorded value,
    including those hidden from the scoreboard.
    """
    program_name = _require(program_name, "programName")
    initiative_name = _require(initiative_name, "initiativeName")
    return InitiativeService.fetch_initiative(program_name, initiative_name)


# =============================================================================
# Write Endpoints
# =============================================================================

@router.post(
    "/add-initiative",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
)
async def add_initiative(
    program_name: Annotated[str | None, Form(alias="programName")] = None,
    initiative_name: Annotated[str | None, Form(alias="initiativeName")] = None,
    description: Annotated[str | None, Form()] = None,
    modes_of_action: Annotated[str | None, Form(alias="modesOfAction", description="JSON array, e.g. [\"Serve\"]")] = None,
    metrics: Annotated[str | None, Form(description="JSON object keyed by People/Place/Policy")] = None,
    image_url: Annotated[str | None, Form(alias="imageUrl")] = None,
    image: Annotated[UploadFile | None, File(description="JPEG, PNG or GIF image")] = None,
):
    """
    Create an initiative.

    This endpoint:
    1. Parses and validates the form (JSON fields included)
    2. Validates the image
    3. Uploads the image, inserts the initiative and its metrics

    Any failure after step 2 removes whatever was already written.
    """
    request = InitiativeUpsertRequest.from_form(
        programName=program_name,
        initiativeName=initiative_name,
        description=description,
        modesOfAction=modes_of_action,
        metrics=metrics,
        imageUrl=image_url,
    )
    upload = await _read_image(image)

    InitiativeService.create_initiative(request, image=upload)

    return MessageResponse(message="Initiative created successfully")


@router.post("/edit-initiative", response_model=MessageResponse)
async def edit_initiative(
    program_name: Annotated[str | None, Form(alias="programName")] = None,
    initiative_name: Annotated[str | None, Form(alias="initiativeName")] = None,
    description: Annotated[str | None, Form()] = None,
    modes_of_action: Annotated[str | None, Form(alias="modesOfAction")] = None,
    metrics: Annotated[str | None, Form()] = None,
    image_url: Annotated[str | None, Form(alias="imageUrl")] = None,
    image: Annotated[UploadFile | None, File(description="Replacement image (optional)")] = None,
):
    """
    Update an initiative.

    Description, modes and image are overwritten; the metrics map replaces
    the stored metrics entirely (labels left out are removed).
    """
    request = InitiativeUpsertRequest.from_form(
        programName=program_name,
        initiativeName=initiative_name,
        description=description,
        modesOfAction=modes_of_action,
        metrics=metrics,
        imageUrl=image_url,
    )
    upload = await _read_image(image)

    InitiativeService.edit_initiative(request, image=upload)

    return MessageResponse(message="Initiative updated successfully")


@router.delete("/delete-initiative", response_model=MessageResponse)
async def delete_initiative(request: InitiativeDeleteRequest):
    """
    Delete an initiative with its metrics and image.
    """
    InitiativeService.delete_initiative(request.program_name, request.initiative_name)

    return MessageResponse(message="Initiative deleted successfully")
