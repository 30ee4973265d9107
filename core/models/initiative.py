# =============================================================================
# core/models/initiative.py - Initiative & Metric Schemas
# =============================================================================
# These models define the API contract for initiative operations:
# - Category / ModeOfAction: the closed sets used by initiatives and metrics
# - CategorizedMetrics: the {People, Place, Policy} metrics map clients submit
# - InitiativeUpsertRequest: the parsed multipart form for add/edit
# - InitiativeDetail / ScoreboardResponse: what the read endpoints return
#
# Multipart forms carry modesOfAction and metrics as JSON strings. They are
# parsed and validated here, before any store or storage call is made.
# =============================================================================

import datetime as dt
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from app.exceptions import RequestValidationFailed


class Category(str, Enum):
    """
    Metric categories shown on the dashboard.

    Stored in the `ppp` column of the metrics table.
    """
    PEOPLE = "People"
    PLACE = "Place"
    POLICY = "Policy"


class ModeOfAction(str, Enum):
    """Ways an initiative acts. Persisted as one boolean column per mode."""
    SERVE = "Serve"
    EDUCATE = "Educate"
    ADVOCATE = "Advocate"


# Fixed iteration order for flattening and grouping
CATEGORY_ORDER: tuple[Category, ...] = (Category.PEOPLE, Category.PLACE, Category.POLICY)

# Mode -> initiatives table column
MODE_COLUMNS: dict[ModeOfAction, str] = {
    ModeOfAction.SERVE: "mode_serve",
    ModeOfAction.EDUCATE: "mode_educate",
    ModeOfAction.ADVOCATE: "mode_advocate",
}


def empty_category_map() -> dict[str, list]:
    """Return {"People": [], "Place": [], "Policy": []}."""
    return {category.value: [] for category in CATEGORY_ORDER}


def modes_from_row(row: dict[str, Any]) -> list[str]:
    """Rebuild the modesOfAction list from an initiatives row."""
    return [mode.value for mode, column in MODE_COLUMNS.items() if row.get(column)]


# =============================================================================
# Metrics Input
# =============================================================================

class MetricValue(BaseModel):
    """One dated observation of a metric."""

    value: int | float
    date: dt.date | None = None
    notes: str | None = None


class MetricEntry(BaseModel):
    """
    A labelled metric with one or more observations.

    Example:
        {"label": "Trees", "values": [{"value": 3, "date": "2024-04-01"}], "showInScoreboard": true}

    The shorter {"label": "Trees", "value": 3} form is accepted too and is
    treated as a single observation.
    """

    model_config = ConfigDict(populate_by_name=True)

    label: str = Field(..., min_length=1)
    values: list[MetricValue] = Field(default_factory=list)
    show_in_scoreboard: bool | None = Field(default=None, alias="showInScoreboard")

    @model_validator(mode="before")
    @classmethod
    def _single_value_shorthand(cls, data: Any) -> Any:
        if isinstance(data, dict) and "value" in data and "values" not in data:
            data = dict(data)
            observation = {"value": data.pop("value")}
            for key in ("date", "notes"):
                if key in data:
                    observation[key] = data.pop(key)
            data["values"] = [observation]
        return data


class CategorizedMetrics(BaseModel):
    """
    Metrics grouped by category. Unknown categories are rejected.

    Example:
        {"People": [...], "Place": [...], "Policy": [...]}
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    people: list[MetricEntry] = Field(default_factory=list, alias="People")
    place: list[MetricEntry] = Field(default_factory=list, alias="Place")
    policy: list[MetricEntry] = Field(default_factory=list, alias="Policy")

    def by_category(self) -> dict[Category, list[MetricEntry]]:
        """Entries keyed by Category, in CATEGORY_ORDER."""
        return {
            Category.PEOPLE: self.people,
            Category.PLACE: self.place,
            Category.POLICY: self.policy,
        }


# =============================================================================
# Requests
# =============================================================================

@dataclass
class ImageUpload:
    """An image file received with a multipart request."""
    filename: str
    content_type: str | None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class InitiativeUpsertRequest(BaseModel):
    """
    Validated add/edit payload.

    Built from the multipart form via `from_form`, which decodes the JSON
    encoded modesOfAction and metrics fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    program_name: str = Field(..., min_length=1, alias="programName")
    initiative_name: str = Field(..., min_length=1, alias="initiativeName")
    description: str = Field(..., min_length=1)
    modes_of_action: list[ModeOfAction] = Field(..., alias="modesOfAction")
    metrics: CategorizedMetrics
    image_url: str | None = Field(default=None, alias="imageUrl")

    def mode_flags(self) -> dict[str, bool]:
        """Boolean mode columns derived from the submitted mode set."""
        selected = set(self.modes_of_action)
        return {column: mode in selected for mode, column in MODE_COLUMNS.items()}

    @classmethod
    def from_form(cls, **fields: Any) -> "InitiativeUpsertRequest":
        """
        Parse raw form fields into a request.

        Raises:
            RequestValidationFailed: If a field is missing, or a JSON field
                is malformed or doesn't match the expected shape
        """
        data = {key: value for key, value in fields.items() if value not in (None, "")}

        for key in ("modesOfAction", "metrics"):
            if isinstance(data.get(key), str):
                try:
                    data[key] = json.loads(data[key])
                except json.JSONDecodeError as e:
                    raise RequestValidationFailed(
                        f"{key} must be valid JSON",
                        errors=[{"loc": [key], "msg": str(e)}],
                    )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in e.errors()
            ]
            raise RequestValidationFailed("All fields are required", errors=errors)


class InitiativeDeleteRequest(BaseModel):
    """Body of DELETE /delete-initiative."""

    model_config = ConfigDict(populate_by_name=True)

    program_name: str = Field(..., min_length=1, alias="programName")
    initiative_name: str = Field(..., min_length=1, alias="initiativeName")


# =============================================================================
# Responses
# =============================================================================

class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str


class MetricValueOut(BaseModel):
    value: Any = None
    date: str | None = None
    notes: str | None = None


class MetricDetail(BaseModel):
    """All observations recorded under one label."""
    label: str
    values: list[MetricValueOut] = Field(default_factory=list)
    showInScoreboard: bool = True


class InitiativeDetail(BaseModel):
    """Full detail of one initiative, as returned by GET /fetch-initiative."""
    programName: str
    initiativeName: str
    description: str | None = None
    modesOfAction: list[str] = Field(default_factory=list)
    imageUrl: str | None = None
    updatedAt: str | None = None
    metrics: dict[str, list[MetricDetail]] = Field(default_factory=empty_category_map)


class AggregatedMetric(BaseModel):
    """Per-label total shown on the public scoreboard."""
    label: str
    value: int


class ScoreboardInitiative(BaseModel):
    name: str
    description: str | None = None
    imageUrl: str | None = None
    metrics: dict[str, list[AggregatedMetric]] = Field(default_factory=empty_category_map)


class ScoreboardResponse(BaseModel):
    """Response of GET /fetch-scoreboard."""
    initiatives: list[ScoreboardInitiative] = Field(default_factory=list)
