"""Partial-update descriptor.

A Patch names a subset of a record's fields and their new values.  It is
distinct from a full replacement record: fields it does not mention are left
untouched by update_partial and batch_update.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Patch(BaseModel):
    model_config = ConfigDict(frozen=True)

    values: dict[str, Any] = Field(min_length=1)

    @classmethod
    def of(cls, **values: Any) -> Patch:
        return cls(values=values)

    @property
    def fields(self) -> set[str]:
        return set(self.values)

    def apply(self, record: BaseModel) -> BaseModel:
        """Return a re-validated copy of record with the patched fields replaced.

        Raises ValueError for fields the record's model does not declare and
        pydantic.ValidationError when a new value fails validation.
        """
        model = type(record)
        unknown = self.fields - set(model.model_fields)
        if unknown:
            raise ValueError(f"{model.__name__} has no field(s): {', '.join(sorted(unknown))}")
        return model.model_validate({**record.model_dump(), **self.values})
