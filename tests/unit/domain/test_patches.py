"""Tests for autosource/domain/models/patches.py."""

import pytest
from pydantic import BaseModel, ConfigDict, ValidationError

from autosource.domain.models.patches import Patch


class _Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0


def test_patch_requires_at_least_one_value():
    with pytest.raises(ValidationError):
        Patch(values={})


def test_of_builds_values():
    assert Patch.of(size=3).values == {"size": 3}


def test_fields_lists_patched_names():
    assert Patch.of(name="b", size=3).fields == {"name", "size"}


def test_apply_replaces_only_patched_fields():
    patched = Patch.of(size=3).apply(_Item(name="a", size=1))
    assert patched == _Item(name="a", size=3)


def test_apply_returns_new_instance():
    original = _Item(name="a")
    Patch.of(size=5).apply(original)
    assert original.size == 0


def test_apply_rejects_unknown_field():
    with pytest.raises(ValueError, match="colour"):
        Patch.of(colour="red").apply(_Item(name="a"))


def test_apply_revalidates_values():
    with pytest.raises(ValidationError):
        Patch.of(size="not a number").apply(_Item(name="a"))
