"""Tests for autosource/domain/models/enums.py."""

from autosource.domain.models.enums import Operator


def test_operator_values_are_strings():
    assert Operator.GTE == "gte"


def test_operator_from_string():
    assert Operator("in") is Operator.IN


def test_operator_has_seven_members():
    assert len(Operator) == 7
