"""
Resource Existence Oracle

Answers whether a logical resource was already provisioned by a legacy
deployment unit, based on an inventory snapshot for a single
(account, region). Resources that already exist stay with their legacy unit;
everything else is carved into new deployment units by the partitioner.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..exceptions import InventoryLookupAmbiguity, InventoryLookupError
from .kinds import REQUIRED_LOOKUP_KEYS, VARIANT_LOOKUP_KEYS, ResourceKind
from .models import InventoryRecord, InventorySnapshot

logger = logging.getLogger(__name__)

KindLike = Union[ResourceKind, str]


class ResourceExistenceOracle:
    """Existence queries against one inventory snapshot.

    Matching is exact equality over the lookup keys relevant to the kind.
    An attribute missing from an inventory record acts as a wildcard, so a
    lookup can match several records; that is reported as an ambiguity
    rather than resolved silently.

    The oracle holds no state besides its snapshot and is bound to the
    snapshot's (account, region).
    """

    def __init__(self, snapshot: InventorySnapshot, enabled: bool = True):
        """
        Args:
            snapshot: Inventory for exactly one (account, region)
            enabled: When False, incremental units are disabled and every
                resource is reported as existing
        """
        self.snapshot = snapshot
        self.enabled = enabled

    @property
    def environment(self) -> Tuple[str, str]:
        return self.snapshot.environment

    def exists(self, kind: KindLike, lookup_keys: Mapping[str, str]) -> bool:
        """
        Return True when the resource is already provisioned.

        Args:
            kind: Resource kind
            lookup_keys: Semantic identity of the resource

        Returns:
            True if exactly one record matches, or if the oracle is
            disabled, or if the snapshot carries no lookup metadata

        Raises:
            InventoryLookupError: If required lookup keys are missing
            InventoryLookupAmbiguity: If more than one record matches
        """
        resource_kind, relevant = self._relevant_keys(kind, lookup_keys)

        if not self.enabled:
            return True
        if not self.snapshot.metadata_present:
            logger.debug(
                f"No lookup metadata for {self.environment}; "
                f"{resource_kind.value} is owned by the legacy unit"
            )
            return True

        if self._matches(self.snapshot.externally_managed, resource_kind, relevant):
            logger.debug(f"{resource_kind.value} {relevant} is externally managed")
            return True

        return self._find(resource_kind, relevant) is not None

    def owner(self, kind: KindLike, lookup_keys: Mapping[str, str]) -> Optional[str]:
        """Legacy unit owning the matching record, if any.

        None when no single inventory record classifies the resource. That
        covers externally managed resources and any lookup against a
        disabled oracle or a metadata-free snapshot.
        """
        resource_kind, relevant = self._relevant_keys(kind, lookup_keys)
        if not self.enabled or not self.snapshot.metadata_present:
            return None
        if self._matches(self.snapshot.externally_managed, resource_kind, relevant):
            return None
        record = self._find(resource_kind, relevant)
        return record.owner if record else None

    def _find(
        self, kind: ResourceKind, relevant: Dict[str, str]
    ) -> Optional[InventoryRecord]:
        matches = self._matches(self.snapshot.records, kind, relevant)
        if len(matches) > 1:
            raise InventoryLookupAmbiguity(
                f"{len(matches)} inventory records match {kind.value} {relevant}",
                kind=kind.value,
                match_count=len(matches),
                context={
                    "lookup": relevant,
                    "account_id": self.snapshot.account_id,
                    "region": self.snapshot.region,
                    "candidates": [
                        {"attributes": dict(record.attributes), "owner": record.owner}
                        for record in matches
                    ],
                },
            )
        return matches[0] if matches else None

    @staticmethod
    def _matches(
        records: Tuple[InventoryRecord, ...],
        kind: ResourceKind,
        relevant: Dict[str, str],
    ) -> List[InventoryRecord]:
        return [
            record
            for record in records
            if record.kind == kind.value
            and all(
                record.attributes.get(key, value) == value
                for key, value in relevant.items()
            )
        ]

    @staticmethod
    def _relevant_keys(
        kind: KindLike, lookup_keys: Mapping[str, str]
    ) -> Tuple[ResourceKind, Dict[str, str]]:
        """Validate the lookup and restrict it to the keys that identify the kind."""
        try:
            resource_kind = kind if isinstance(kind, ResourceKind) else ResourceKind.parse(kind)
        except (KeyError, ValueError):
            raise InventoryLookupError(f"Unknown resource kind '{kind}'", kind=str(kind)) from None

        required = REQUIRED_LOOKUP_KEYS[resource_kind]
        missing = [key for key in required if not lookup_keys.get(key)]
        if missing:
            raise InventoryLookupError(
                f"Lookup for {resource_kind.value} is missing required keys",
                kind=resource_kind.value,
                missing_keys=missing,
            )

        keys = list(required)
        variants = VARIANT_LOOKUP_KEYS.get(resource_kind, ())
        if variants:
            present = [key for key in variants if lookup_keys.get(key)]
            if len(present) != 1:
                raise InventoryLookupError(
                    f"Lookup for {resource_kind.value} needs exactly one of "
                    f"{', '.join(variants)}",
                    kind=resource_kind.value,
                    missing_keys=list(variants) if not present else None,
                )
            keys.extend(present)

        return resource_kind, {key: str(lookup_keys[key]) for key in keys}
