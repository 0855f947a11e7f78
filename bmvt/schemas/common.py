"""
Shared schema bases.

Inputs arrive from multipart forms as well as JSON, so every input model
strips strings and treats empty ones as absent before field validation.
Outputs are validated from SQL rows and dumped with their wire names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from bmvt.core.validation import blank_to_none


class InputModel(BaseModel):
    """Base for request payloads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def strip_blank_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: blank_to_none(value) for key, value in data.items()}
        return data

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided with a value, for partial updates."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class RowModel(BaseModel):
    """Base for outputs that keep the column names on the wire."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class CamelRowModel(BaseModel):
    """Base for outputs exposed in camelCase, validated from snake_case rows."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def dump(model_cls: type[BaseModel], row: Any) -> dict[str, Any]:
    """Validate one row and serialize it with wire names."""
    return model_cls.model_validate(row).model_dump(mode="json", by_alias=True)


def dump_all(model_cls: type[BaseModel], rows: list[Any]) -> list[dict[str, Any]]:
    return [dump(model_cls, row) for row in rows]
