"""Selector domain models.

Criterion — one field comparison (field, operator, value)
Selector  — conjunction of criteria plus optional ordering

These are backend-neutral values.  Each adapter translates a Selector into
its own filter representation (a Python predicate, a SQL WHERE clause, ...).
"""

from __future__ import annotations

import operator
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import Operator

_COMPARATORS = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
}


def field_value(record: Any, name: str) -> Any:
    """Read a named field from a model instance or a mapping; None if absent."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


class Criterion(BaseModel):
    """A single comparison applied to one field of a record.

    value must be a list, tuple or set when op is IN.  Ordering comparisons
    (GT / GTE / LT / LTE) never match a missing or None field.
    """

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    op: Operator = Operator.EQ
    value: Any = None

    @model_validator(mode="after")
    def _in_requires_collection(self) -> Criterion:
        if self.op == Operator.IN and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError("value must be a collection when op is IN")
        return self

    def matches(self, record: Any) -> bool:
        actual = field_value(record, self.field)
        if self.op == Operator.IN:
            return actual in self.value
        if self.op in (Operator.EQ, Operator.NE):
            return _COMPARATORS[self.op](actual, self.value)
        if actual is None or self.value is None:
            return False
        return _COMPARATORS[self.op](actual, self.value)


class Selector(BaseModel):
    """Conjunction of criteria used by find, find_stream and batch operations.

    An empty selector matches every record.  order_by names the field used for
    the result order; when omitted the adapter's natural order applies.
    """

    model_config = ConfigDict(frozen=True)

    criteria: tuple[Criterion, ...] = ()
    order_by: str | None = None
    descending: bool = False

    @classmethod
    def all(cls) -> Selector:
        return cls()

    @classmethod
    def where(cls, **equals: Any) -> Selector:
        """Named constructor for the common all-fields-equal case."""
        return cls(criteria=tuple(Criterion(field=k, value=v) for k, v in equals.items()))

    def and_(self, field: str, op: Operator | str, value: Any) -> Selector:
        """Return a copy with one more criterion appended."""
        criterion = Criterion(field=field, op=Operator(op), value=value)
        return self.model_copy(update={"criteria": self.criteria + (criterion,)})

    def ordered(self, field: str, descending: bool = False) -> Selector:
        return self.model_copy(update={"order_by": field, "descending": descending})

    @property
    def fields(self) -> set[str]:
        """Every field name the selector refers to."""
        names = {c.field for c in self.criteria}
        if self.order_by is not None:
            names.add(self.order_by)
        return names

    def matches(self, record: Any) -> bool:
        return all(c.matches(record) for c in self.criteria)
