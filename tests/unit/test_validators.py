# =============================================================================
# tests/unit/test_validators.py
# Unit Tests for form validation
# =============================================================================

from aed_core.inventory.validators import validate_aed, validate_monthly_check


class TestValidateAed:

    def test_valid_payload(self, sample_aed_payload):
        assert validate_aed(sample_aed_payload) == {}

    def test_required_fields(self):
        errors = validate_aed({})

        assert errors["Title"] == "Title is required"
        assert errors["SerialNumber"] == "Serial number is required"
        assert "Latitude" in errors

    def test_blank_strings_are_missing(self, sample_aed_payload):
        errors = validate_aed({**sample_aed_payload, "BuildingName": "   "})
        assert set(errors) == {"BuildingName"}

    def test_coordinate_ranges(self, sample_aed_payload):
        errors = validate_aed({**sample_aed_payload, "Latitude": 91, "Longitude": "-181"})

        assert errors["Latitude"] == "Valid latitude (-90 to 90) is required"
        assert errors["Longitude"] == "Valid longitude (-180 to 180) is required"

    def test_nan_coordinates_rejected(self, sample_aed_payload):
        errors = validate_aed({**sample_aed_payload, "Latitude": float("nan"), "Longitude": "nan"})

        assert "Latitude" in errors
        assert "Longitude" in errors

    def test_lifespan_bounds(self, sample_aed_payload):
        errors = validate_aed({
            **sample_aed_payload,
            "BatteryLifespanMonths": 0,
            "PadsLifespanMonths": 121,
        })

        assert errors["BatteryLifespanMonths"] == "Battery lifespan must be 1-120 months"
        assert errors["PadsLifespanMonths"] == "Pads lifespan must be 1-120 months"

    def test_lifespan_edges_accepted(self, sample_aed_payload):
        errors = validate_aed({
            **sample_aed_payload,
            "BatteryLifespanMonths": 1,
            "PadsLifespanMonths": "120",
        })
        assert errors == {}


class TestValidateMonthlyCheck:

    def test_complete_check(self):
        data = {"checkedBy": "Derek Haase", "checkStatus": "Pass", "checkNotes": "OK"}
        assert validate_monthly_check(data) == {}

    def test_missing_inspector_and_notes(self):
        errors = validate_monthly_check({"checkedBy": "", "checkNotes": None})

        assert errors == {
            "checkedBy": "Checked by field is required",
            "checkNotes": "Check notes are required",
        }

    def test_unknown_status(self):
        data = {"checkedBy": "Derek Haase", "checkStatus": "Maybe", "checkNotes": "OK"}
        assert set(validate_monthly_check(data)) == {"checkStatus"}
