"""Base model shared by the upstream manifest records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class UpstreamModel(BaseModel):
    """Lenient manifest record.

    Unknown keys are ignored and an explicit ``null`` reads as the field
    default, so one sparse record never rejects a whole manifest.
    """

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data
