"""Tests for dynamic value coercion."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

import pytest
from neo4j.time import DateTime as Neo4jDateTime

from mediatrack.db import values
from mediatrack.db.values import ValueKind, classify
from mediatrack.errors import DecodeError, ValidationError


class TestClassify:
    """Test raw value tagging."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, ValueKind.NULL),
            (3, ValueKind.INT),
            (3.5, ValueKind.FLOAT),
            ("x", ValueKind.STRING),
            (datetime(2024, 1, 1), ValueKind.TEMPORAL),
            (date(2024, 1, 1), ValueKind.TEMPORAL),
            ([1, 2], ValueKind.OTHER),
        ],
    )
    def test_kinds(self, value, kind):
        assert classify(value) is kind

    def test_bool_is_not_a_number(self):
        """bool subclasses int but must not classify as INT."""
        assert classify(True) is ValueKind.OTHER


class TestStrings:
    """Test optional/required string coercion."""

    def test_absent_is_none(self):
        assert values.optional_str({}, "title") is None

    def test_null_is_none(self):
        assert values.optional_str({"title": None}, "title") is None

    def test_empty_string_is_none(self):
        """Empty strings decode as absent."""
        assert values.optional_str({"title": ""}, "title") is None

    def test_present_string(self):
        assert values.optional_str({"title": "Alien"}, "title") == "Alien"

    def test_non_string_rejected(self):
        with pytest.raises(DecodeError) as exc:
            values.optional_str({"title": 12}, "title")
        assert exc.value.field == "title"

    def test_required_missing(self):
        with pytest.raises(DecodeError):
            values.required_str({}, "email")

    def test_required_keeps_empty_string(self):
        assert values.required_str({"email": ""}, "email") == ""


class TestInt32:
    """Test integer narrowing."""

    def test_int(self):
        assert values.optional_int32({"n": 42}, "n") == 42

    def test_float_truncates_toward_zero(self):
        assert values.optional_int32({"n": 7.9}, "n") == 7
        assert values.optional_int32({"n": -7.9}, "n") == -7

    def test_numeric_string(self):
        assert values.optional_int32({"n": " 120 "}, "n") == 120

    def test_non_numeric_string(self):
        with pytest.raises(DecodeError):
            values.optional_int32({"n": "lots"}, "n")

    def test_bounds(self):
        assert values.optional_int32({"n": 2**31 - 1}, "n") == 2**31 - 1
        assert values.optional_int32({"n": -(2**31)}, "n") == -(2**31)

    def test_out_of_range_rejected(self):
        with pytest.raises(DecodeError):
            values.optional_int32({"n": 2**31}, "n")

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(DecodeError):
            values.optional_int32({"n": value}, "n")

    def test_bool_rejected(self):
        with pytest.raises(DecodeError):
            values.optional_int32({"n": True}, "n")

    def test_missing_optional_is_none(self):
        assert values.optional_int32({}, "n") is None

    def test_missing_required_uses_default(self):
        assert values.required_int32({}, "n") == 0
        assert values.required_int32({"n": None}, "n", default=5) == 5


class TestCheckInt32:
    """Write-side range check."""

    @pytest.mark.parametrize("value", [None, 0, 2**31 - 1, -(2**31), "text"])
    def test_accepts_in_range_and_non_numeric(self, value):
        values.check_int32("n", value)

    @pytest.mark.parametrize("value", [2**31, -(2**31) - 1, 2_923_706_026, 1e12])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValidationError) as exc:
            values.check_int32("box_office", value, entity="Movie")
        assert exc.value.field == "box_office"
        assert exc.value.entity == "Movie"


class TestFloats:
    """Test float widening."""

    def test_int_widens(self):
        result = values.optional_float({"score": 4}, "score")
        assert result == 4.0
        assert isinstance(result, float)

    def test_missing_is_none(self):
        assert values.optional_float({}, "score") is None

    def test_string_rejected(self):
        with pytest.raises(DecodeError):
            values.optional_float({"score": "4.5"}, "score")

    def test_required_missing(self):
        with pytest.raises(DecodeError):
            values.required_float({}, "score")


class TestIdentifiers:
    """Test UUID parsing."""

    def test_parse(self):
        text = "6f1c2a4e-3b5d-4c7e-9f10-1a2b3c4d5e6f"
        assert values.required_uuid({"id": text}, "id") == UUID(text)

    def test_malformed_is_decode_error(self):
        with pytest.raises(DecodeError) as exc:
            values.required_uuid({"id": "not-a-uuid"}, "id")
        assert exc.value.field == "id"

    def test_missing_required(self):
        with pytest.raises(DecodeError):
            values.required_uuid({}, "id")

    def test_optional_absent(self):
        assert values.optional_uuid({}, "recommenderId") is None
        assert values.optional_uuid({"recommenderId": ""}, "recommenderId") is None


class TestDatetimes:
    """Test temporal decoding."""

    def test_neo4j_datetime(self):
        stored = Neo4jDateTime(2024, 5, 1, 12, 30, 0)
        assert values.optional_datetime({"at": stored}, "at") == datetime(2024, 5, 1, 12, 30, 0)

    def test_iso_string(self):
        assert values.optional_datetime({"at": "2024-05-01T12:30:00"}, "at") == datetime(2024, 5, 1, 12, 30)

    def test_date_promoted(self):
        assert values.optional_datetime({"at": date(2024, 5, 1)}, "at") == datetime(2024, 5, 1)

    def test_null(self):
        assert values.optional_datetime({"at": None}, "at") is None

    def test_garbage_rejected(self):
        with pytest.raises(DecodeError):
            values.optional_datetime({"at": "yesterday"}, "at")


class TestAsParam:
    """Test parameter conversion."""

    def test_uuid_to_text(self):
        uid = UUID("6f1c2a4e-3b5d-4c7e-9f10-1a2b3c4d5e6f")
        assert values.as_param(uid) == str(uid)

    def test_enum_to_value(self):
        class Color(Enum):
            RED = "red"

        assert values.as_param(Color.RED) == "red"

    def test_passthrough(self):
        assert values.as_param(3) == 3
        assert values.as_param(None) is None
