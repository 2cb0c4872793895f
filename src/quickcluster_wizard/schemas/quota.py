"""Resource quantities used for both region limits and usage."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["Quota", "QUOTA_FIELDS"]


# (field name, display label, unit)
QUOTA_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("num_vcpus", "vCPUs", ""),
    ("ram_mb", "RAM", "MB"),
    ("num_volumes", "Volumes", ""),
    ("volumes_gb", "Volume storage", "GB"),
)


class Quota(BaseModel):
    """Four non-negative resource counters.

    The same type describes a region's user quota, the usage already
    committed in the region, the per-node cost of a flavor and the projected
    total of a pending request.

    Example:
        ```yaml
        user_quota:
          num_vcpus: 16
          ram_mb: 32768
          num_volumes: 10
          volumes_gb: 500
        ```
    """

    model_config = ConfigDict(frozen=True)

    num_vcpus: int = Field(default=0, ge=0)
    ram_mb: int = Field(default=0, ge=0)
    volumes_gb: int = Field(default=0, ge=0)
    num_volumes: int = Field(default=0, ge=0)

    def __add__(self, other: Quota) -> Quota:
        if not isinstance(other, Quota):
            return NotImplemented
        return Quota(
            num_vcpus=self.num_vcpus + other.num_vcpus,
            ram_mb=self.ram_mb + other.ram_mb,
            volumes_gb=self.volumes_gb + other.volumes_gb,
            num_volumes=self.num_volumes + other.num_volumes,
        )

    def scale(self, count: int) -> Quota:
        """Return the usage of ``count`` units of this quota."""
        if count < 0:
            raise ValueError(f"Cannot scale quota by negative count {count}")
        return Quota(
            num_vcpus=self.num_vcpus * count,
            ram_mb=self.ram_mb * count,
            volumes_gb=self.volumes_gb * count,
            num_volumes=self.num_volumes * count,
        )

    def get(self, field_name: str) -> int:
        return int(getattr(self, field_name))

    @classmethod
    def zero(cls) -> Quota:
        return cls()
