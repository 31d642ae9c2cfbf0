"""Producer entity model."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.utils import get_field


class Producer(BaseModel):
    """Producer as transported by sync; catalog fields stay opaque."""

    model_config = ConfigDict(from_attributes=True, extra="allow")

    id: str
    name: str = ""
    region: str = ""
    products: list[dict[str, Any]] = Field(default_factory=list)

    def to_remote(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_remote(cls, row: dict) -> Producer:
        data = dict(row)
        data["id"] = str(row["id"])
        data["name"] = get_field(row, "name", "")
        data["region"] = get_field(row, "region", "")
        data["products"] = list(get_field(row, "products", []))
        return cls(**data)
