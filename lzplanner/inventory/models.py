"""Inventory records and per-environment snapshots."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InventoryRecord(BaseModel):
    """A previously provisioned resource, described by kind and attributes."""

    kind: str = Field(min_length=1)
    attributes: Dict[str, str] = Field(default_factory=dict)
    owner: Optional[str] = Field(
        default=None, description="Legacy deployment unit that provisioned it"
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("attributes", mode="before")
    @classmethod
    def stringify_attributes(cls, v: Any) -> Any:
        """YAML yields ints for rule numbers and ASNs; compare as strings."""
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items() if val is not None}
        return v


@dataclass(frozen=True)
class InventorySnapshot:
    """Every inventory record for one (account, region).

    ``metadata_present`` is False when the snapshot came from a legacy
    template that predates lookup metadata; such a snapshot cannot tell
    resources apart, so the legacy unit is treated as owning everything.
    """

    account_id: str
    region: str
    records: Tuple[InventoryRecord, ...] = ()
    externally_managed: Tuple[InventoryRecord, ...] = ()
    metadata_present: bool = True
    source: Optional[str] = None

    @classmethod
    def from_records(
        cls,
        account_id: str,
        region: str,
        records: Iterable[Any] = (),
        externally_managed: Iterable[Any] = (),
        **kwargs: Any,
    ) -> "InventorySnapshot":
        """Build a snapshot from records or plain dictionaries."""
        return cls(
            account_id=account_id,
            region=region,
            records=tuple(_as_record(r) for r in records),
            externally_managed=tuple(_as_record(r) for r in externally_managed),
            **kwargs,
        )

    @property
    def environment(self) -> Tuple[str, str]:
        return (self.account_id, self.region)


def _as_record(value: Any) -> InventoryRecord:
    if isinstance(value, InventoryRecord):
        return value
    return InventoryRecord.model_validate(value)

