"""Tests for the error hierarchy."""

import pytest

from mediatrack.errors import (
    ConnectivityError,
    ConstraintViolationError,
    DecodeError,
    MediaTrackError,
    NotFoundError,
    SchemaError,
    ValidationError,
)


@pytest.mark.parametrize(
    "cls", [NotFoundError, ValidationError, ConstraintViolationError, ConnectivityError, DecodeError]
)
def test_subclasses_carry_context(cls):
    err = cls("boom", entity="Movie", identifier="m-1", field="runtime")
    assert isinstance(err, MediaTrackError)
    assert str(err) == "boom"
    assert (err.entity, err.identifier, err.field) == ("Movie", "m-1", "runtime")
    assert cls.__doc__


def test_schema_error_keeps_statement():
    err = SchemaError("failed", statement="CREATE INDEX x")
    assert isinstance(err, MediaTrackError)
    assert err.statement == "CREATE INDEX x"
    assert err.entity is None
