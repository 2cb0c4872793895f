"""Region quota and usage schema."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from quickcluster_wizard.schemas.quota import Quota

__all__ = ["Region"]


class Region(BaseModel):
    """A region together with the user's quota and current usage there.

    Attributes:
        id: Region identifier, stored as ``region_id`` in wizard values.
        name: Display name.
        quota: Limit granted to the user (``user_quota``).
        usage_baseline: Resources already committed before the pending
            request (``user_quota_usage``). None until the usage service
            has answered.

    Example:
        ```yaml
        regions:
          - id: 1
            name: rdu2
            user_quota: {num_vcpus: 16, ram_mb: 32768, num_volumes: 10, volumes_gb: 500}
            user_quota_usage: {num_vcpus: 10, ram_mb: 8192}
        ```
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str = ""
    quota: Quota | None = Field(
        default=None,
        validation_alias=AliasChoices("quota", "user_quota"),
    )
    usage_baseline: Quota | None = Field(
        default=None,
        validation_alias=AliasChoices("usage_baseline", "user_quota_usage"),
    )

    @property
    def has_usage(self) -> bool:
        return self.quota is not None and self.usage_baseline is not None
