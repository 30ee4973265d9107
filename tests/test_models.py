# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models:
# - Multipart form parsing (JSON-encoded fields)
# - Metric entry shapes and closed category / mode sets
# - Mode flag derivation
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import json
from datetime import date

import pytest
from pydantic import ValidationError

from app.exceptions import RequestValidationFailed
from core.models import (
    MODE_COLUMNS,
    Category,
    CategorizedMetrics,
    ImageUpload,
    InitiativeDeleteRequest,
    InitiativeUpsertRequest,
    MetricEntry,
    ModeOfAction,
    ProgramPasswordRequest,
    modes_from_row,
)


def _form(**overrides):
    fields = {
        "programName": "Green Streets",
        "initiativeName": "Tree Planting",
        "description": "Planting trees",
        "modesOfAction": json.dumps(["Serve"]),
        "metrics": json.dumps({"Place": [{"label": "Trees", "values": [{"value": 3}]}]}),
    }
    fields.update(overrides)
    return fields


# =============================================================================
# Enum Tests
# =============================================================================

class TestEnums:
    """Closed sets of categories and modes."""

    def test_category_values(self):
        """Categories match the stored ppp values."""
        assert [c.value for c in Category] == ["People", "Place", "Policy"]

    def test_every_mode_has_a_column(self):
        """Each mode maps to exactly one initiatives column."""
        assert set(MODE_COLUMNS) == set(ModeOfAction)
        assert MODE_COLUMNS[ModeOfAction.EDUCATE] == "mode_educate"

    def test_modes_from_row(self):
        """Mode list is rebuilt from boolean columns in a fixed order."""
        row = {"mode_serve": True, "mode_educate": False, "mode_advocate": True}
        assert modes_from_row(row) == ["Serve", "Advocate"]


# =============================================================================
# Metric Entry Tests
# =============================================================================

class TestMetricEntry:
    """Tests for MetricEntry parsing."""

    def test_full_shape(self):
        """Values, dates, notes and the scoreboard flag are parsed."""
        entry = MetricEntry.model_validate({
            "label": "Volunteers",
            "values": [{"value": 4, "date": "2024-05-01", "notes": "kickoff"}],
            "showInScoreboard": False,
        })

        assert entry.label == "Volunteers"
        assert entry.values[0].value == 4
        assert entry.values[0].date == date(2024, 5, 1)
        assert entry.values[0].notes == "kickoff"
        assert entry.show_in_scoreboard is False

    def test_single_value_shorthand(self):
        """{label, value} is treated as one observation."""
        entry = MetricEntry.model_validate({"label": "Trees", "value": 7})

        assert len(entry.values) == 1
        assert entry.values[0].value == 7
        assert entry.show_in_scoreboard is None

    def test_numeric_string_value(self):
        """Numeric strings are accepted as numbers."""
        entry = MetricEntry.model_validate({"label": "Trees", "values": [{"value": "2.5"}]})
        assert entry.values[0].value == 2.5

    def test_empty_label_rejected(self):
        """A label is required."""
        with pytest.raises(ValidationError):
            MetricEntry.model_validate({"label": "", "values": []})

    def test_non_numeric_value_rejected(self):
        """Values must be numbers."""
        with pytest.raises(ValidationError):
            MetricEntry.model_validate({"label": "Trees", "values": [{"value": "lots"}]})


class TestCategorizedMetrics:
    """Tests for the category map."""

    def test_missing_categories_default_empty(self):
        """Omitted categories are empty lists."""
        metrics = CategorizedMetrics.model_validate({"People": [{"label": "A", "value": 1}]})

        by_category = metrics.by_category()
        assert list(by_category) == [Category.PEOPLE, Category.PLACE, Category.POLICY]
        assert len(by_category[Category.PEOPLE]) == 1
        assert by_category[Category.PLACE] == []

    def test_unknown_category_rejected(self):
        """Only People, Place and Policy are allowed."""
        with pytest.raises(ValidationError):
            CategorizedMetrics.model_validate({"Planet": []})


# =============================================================================
# Upsert Request Tests
# =============================================================================

class TestInitiativeUpsertRequest:
    """Tests for parsing the add/edit multipart form."""

    def test_from_form(self):
        """JSON fields are decoded and validated."""
        request = InitiativeUpsertRequest.from_form(**_form())

        assert request.program_name == "Green Streets"
        assert request.initiative_name == "Tree Planting"
        assert request.modes_of_action == [ModeOfAction.SERVE]
        assert request.metrics.place[0].label == "Trees"
        assert request.image_url is None

    def test_mode_flags(self):
        """Mode flags are derived from the submitted set."""
        request = InitiativeUpsertRequest.from_form(
            **_form(modesOfAction=json.dumps(["Educate", "Advocate"]))
        )

        assert request.mode_flags() == {
            "mode_serve": False,
            "mode_educate": True,
            "mode_advocate": True,
        }

    def test_empty_mode_set_allowed(self):
        """An empty mode list is valid; all flags are false."""
        request = InitiativeUpsertRequest.from_form(**_form(modesOfAction="[]"))
        assert not any(request.mode_flags().values())

    @pytest.mark.parametrize("missing", ["programName", "initiativeName", "description", "modesOfAction", "metrics"])
    def test_missing_field_rejected(self, missing):
        """Every required field must be present."""
        with pytest.raises(RequestValidationFailed) as exc_info:
            InitiativeUpsertRequest.from_form(**_form(**{missing: None}))

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_blank_field_rejected(self):
        """Empty strings count as missing."""
        with pytest.raises(RequestValidationFailed):
            InitiativeUpsertRequest.from_form(**_form(description=""))

    def test_malformed_json_rejected(self):
        """Broken JSON in a form field is a validation error."""
        with pytest.raises(RequestValidationFailed) as exc_info:
            InitiativeUpsertRequest.from_form(**_form(metrics="{not json"))

        assert "metrics" in exc_info.value.message

    def test_unknown_mode_rejected(self):
        """Modes outside the closed set are rejected."""
        with pytest.raises(RequestValidationFailed):
            InitiativeUpsertRequest.from_form(**_form(modesOfAction=json.dumps(["Serve", "Dance"])))

    def test_metrics_must_be_object(self):
        """A JSON array is not a metrics map."""
        with pytest.raises(RequestValidationFailed):
            InitiativeUpsertRequest.from_form(**_form(metrics="[]"))


# =============================================================================
# Other Requests
# =============================================================================

class TestSimpleRequests:
    """Tests for JSON body models."""

    def test_delete_request_aliases(self):
        """camelCase body keys map onto the model."""
        request = InitiativeDeleteRequest.model_validate(
            {"programName": "Green Streets", "initiativeName": "Tree Planting"}
        )
        assert request.program_name == "Green Streets"

    def test_password_request_requires_password(self):
        """Empty passwords are rejected."""
        with pytest.raises(ValidationError):
            ProgramPasswordRequest.model_validate({"programId": 1, "password": ""})

    def test_password_limit_counts_bytes(self):
        """Passwords are capped at bcrypt's 72 bytes, not 72 characters."""
        ProgramPasswordRequest.model_validate({"programId": 1, "password": "a" * 72})

        with pytest.raises(ValidationError):
            ProgramPasswordRequest.model_validate({"programId": 1, "password": "a" * 73})
        with pytest.raises(ValidationError):
            ProgramPasswordRequest.model_validate({"programId": 1, "password": "é" * 37})

    def test_image_upload_size(self):
        """Upload size is the byte length of the received content."""
        upload = ImageUpload(filename="tree.png", content_type="image/png", content=b"\x89PNG" * 10)
        assert upload.size == 40
