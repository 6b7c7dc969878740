"""Tests for autosource/domain/models/selectors.py."""

import pytest
from pydantic import BaseModel, ValidationError

from autosource.domain.models.enums import Operator
from autosource.domain.models.selectors import Criterion, Selector, field_value


class _Item(BaseModel):
    name: str
    size: int | None = None


# --- field_value ---

def test_field_value_reads_model_attribute():
    assert field_value(_Item(name="a"), "name") == "a"


def test_field_value_reads_mapping_key():
    assert field_value({"name": "a"}, "name") == "a"


def test_field_value_missing_is_none():
    assert field_value(_Item(name="a"), "colour") is None


# --- Criterion ---

def test_criterion_defaults_to_equality():
    assert Criterion(field="name", value="a").op == Operator.EQ


def test_criterion_rejects_empty_field():
    with pytest.raises(ValidationError):
        Criterion(field="", value=1)


def test_criterion_in_requires_collection():
    with pytest.raises(ValidationError):
        Criterion(field="size", op=Operator.IN, value=3)


def test_criterion_in_matches_member():
    assert Criterion(field="size", op=Operator.IN, value=[1, 3]).matches(_Item(name="a", size=3))


def test_criterion_gt_matches_larger_value():
    assert Criterion(field="size", op=Operator.GT, value=2).matches(_Item(name="a", size=3))


def test_criterion_lte_rejects_larger_value():
    assert not Criterion(field="size", op=Operator.LTE, value=2).matches(_Item(name="a", size=3))


def test_criterion_ordering_never_matches_none():
    assert not Criterion(field="size", op=Operator.LT, value=10).matches(_Item(name="a"))


def test_criterion_ne_matches_none_field():
    assert Criterion(field="size", op=Operator.NE, value=1).matches(_Item(name="a"))


def test_criterion_accepts_operator_string():
    assert Criterion(field="size", op="gte", value=1).op == Operator.GTE


# --- Selector ---

def test_empty_selector_matches_everything():
    assert Selector.all().matches(_Item(name="anything"))


def test_where_builds_equality_criteria():
    sel = Selector.where(name="a", size=1)
    assert {(c.field, c.op, c.value) for c in sel.criteria} == {
        ("name", Operator.EQ, "a"),
        ("size", Operator.EQ, 1),
    }


def test_selector_is_conjunction():
    sel = Selector.where(name="a").and_("size", Operator.GT, 1)
    assert sel.matches(_Item(name="a", size=2))
    assert not sel.matches(_Item(name="a", size=1))
    assert not sel.matches(_Item(name="b", size=2))


def test_and_returns_new_selector():
    base = Selector.all()
    base.and_("size", "eq", 1)
    assert base.criteria == ()


def test_ordered_sets_order_fields():
    sel = Selector.all().ordered("size", descending=True)
    assert sel.order_by == "size"
    assert sel.descending is True


def test_fields_include_order_by():
    assert Selector.where(name="a").ordered("size").fields == {"name", "size"}


def test_selector_is_frozen():
    with pytest.raises(ValidationError):
        Selector.all().order_by = "name"  # type: ignore[misc]
