"""Tests for autosource/domain/errors.py."""

from autosource.domain.errors import DataSourceError


def test_error_keeps_operation_and_cause():
    cause = KeyError("x")
    err = DataSourceError("get", cause)
    assert err.operation == "get"
    assert err.cause is cause


def test_error_message_names_operation_and_cause_type():
    assert str(DataSourceError("insert", ValueError("bad"))) == "insert failed: ValueError: bad"


def test_error_without_cause():
    assert str(DataSourceError("find")) == "find failed: unknown error"


def test_error_is_exception():
    assert isinstance(DataSourceError("find"), Exception)
