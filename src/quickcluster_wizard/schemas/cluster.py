"""Cluster creation request handed to the submission sink."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["ClusterRequest"]


class ClusterRequest(BaseModel):
    """Final payload produced by a finished wizard.

    ``model_dump(mode="json")`` renders ``reservation_expiration`` as an
    ISO-8601 timestamp, which is the shape the cluster API expects.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    region_id: int
    product_id: int
    reservation_expiration: datetime
    product_params: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
