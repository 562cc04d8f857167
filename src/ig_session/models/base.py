"""Shared base for records decoded from IG JSON payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class IGModel(BaseModel):
    """Immutable record populated from IG's camelCase JSON.

    Unknown keys are ignored; IG adds fields to responses without bumping
    the endpoint version.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )
