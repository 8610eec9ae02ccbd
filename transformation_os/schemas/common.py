"""Shared schema building blocks."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base model exchanging camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DataEnvelope(BaseModel, Generic[DataT]):
    """Every successful response wraps its payload in ``data``."""

    data: DataT


class UserSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    title: str | None = None


class PaginationMeta(CamelModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


__all__ = ["CamelModel", "DataEnvelope", "PaginationMeta", "UserSummary"]
