"""Generic remote row for key/value records and user profiles."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RemoteRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="allow")

    id: str

    def to_remote(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_remote(cls, row: dict) -> RemoteRecord:
        data = dict(row)
        data["id"] = str(row["id"])
        return cls(**data)
