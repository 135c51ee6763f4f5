"""
Inventory snapshot loading.

Snapshots live at ``<inventory_dir>/<account_id>/<region>.(yaml|yml|json)``.
A document is one of:

- a list of ``{kind, attributes, owner}`` records;
- a mapping with ``resources`` and optional ``externally_managed`` lists;
- a CloudFormation template whose ``Resources`` carry lookup attributes in
  ``Metadata.lzaLookup``. A template without any lookup metadata marks the
  snapshot as metadata-free.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import InventoryLoadError
from .models import InventoryRecord, InventorySnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIXES = (".yaml", ".yml", ".json")
LOOKUP_METADATA_KEY = "lzaLookup"


def parse_inventory_document(
    document: Any,
    account_id: str,
    region: str,
    source: Optional[str] = None,
) -> InventorySnapshot:
    """
    Convert a parsed inventory document into a snapshot.

    Raises:
        InventoryLoadError: If the document shape or a record is invalid
    """
    try:
        if document is None:
            return InventorySnapshot(account_id=account_id, region=region, source=source)

        if isinstance(document, list):
            return InventorySnapshot.from_records(
                account_id, region, document, source=source
            )

        if isinstance(document, dict) and "Resources" in document:
            return _parse_template(document, account_id, region, source)

        if isinstance(document, dict):
            unknown = set(document) - {"resources", "externally_managed"}
            if unknown:
                raise InventoryLoadError(
                    f"Unexpected inventory keys: {', '.join(sorted(unknown))}",
                    path=source,
                )
            return InventorySnapshot.from_records(
                account_id,
                region,
                _sequence(document.get("resources"), "resources", source),
                _sequence(document.get("externally_managed"), "externally_managed", source),
                source=source,
            )
    except ValidationError as e:
        raise InventoryLoadError(
            f"Invalid inventory record: {e}", path=source, cause=e
        ) from e

    raise InventoryLoadError(
        f"Unsupported inventory document of type {type(document).__name__}",
        path=source,
    )


def _sequence(value: Any, what: str, source: Optional[str]) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InventoryLoadError(
            f"Inventory '{what}' must be a list, got {type(value).__name__}",
            path=source,
        )
    return value


def _mapping(value: Any, what: str, source: Optional[str]) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InventoryLoadError(
            f"{what} must be a mapping, got {type(value).__name__}", path=source
        )
    return value


def _parse_template(
    template: dict, account_id: str, region: str, source: Optional[str]
) -> InventorySnapshot:
    owner = _mapping(template.get("Metadata"), "Template Metadata", source).get("stackName")
    records: List[InventoryRecord] = []
    metadata_present = False

    resources = _mapping(template.get("Resources"), "Template Resources", source)
    for logical_id, resource in resources.items():
        if not isinstance(resource, dict) or "Type" not in resource:
            raise InventoryLoadError(
                f"Template resource '{logical_id}' has no Type", path=source
            )
        metadata = _mapping(
            resource.get("Metadata"), f"Metadata of template resource '{logical_id}'", source
        )
        lookup = metadata.get(LOOKUP_METADATA_KEY)
        if lookup is None:
            continue
        metadata_present = True
        records.append(
            InventoryRecord(kind=resource["Type"], attributes=lookup, owner=owner)
        )

    if resources and not metadata_present:
        logger.info(
            f"Template {source or owner} has no lookup metadata; "
            "the legacy unit owns every resource"
        )

    return InventorySnapshot(
        account_id=account_id,
        region=region,
        records=tuple(records),
        metadata_present=metadata_present or not resources,
        source=source,
    )


class InventoryLoader:
    """Loads one inventory snapshot per (account, region) from a directory."""

    def __init__(self, inventory_dir: Optional[Path] = None):
        """
        Args:
            inventory_dir: Root directory; None means no prior inventory, so
                every snapshot is empty
        """
        self.inventory_dir = Path(inventory_dir) if inventory_dir else None

    def snapshot_path(self, account_id: str, region: str) -> Optional[Path]:
        if self.inventory_dir is None:
            return None
        for suffix in SNAPSHOT_SUFFIXES:
            path = self.inventory_dir / account_id / f"{region}{suffix}"
            if path.exists():
                return path
        return None

    def load(self, account_id: str, region: str) -> InventorySnapshot:
        """
        Load the snapshot for an (account, region).

        A missing snapshot file yields an empty snapshot: nothing exists yet.

        Raises:
            InventoryLoadError: If the file cannot be read or parsed
        """
        path = self.snapshot_path(account_id, region)
        if path is None:
            logger.debug(f"No inventory snapshot for {account_id}/{region}")
            return InventorySnapshot(account_id=account_id, region=region)

        try:
            with open(path) as f:
                if path.suffix == ".json":
                    document = json.load(f)
                else:
                    document = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InventoryLoadError(
                f"Cannot parse inventory snapshot {path}: {e}", path=str(path), cause=e
            ) from e
        except OSError as e:
            raise InventoryLoadError(
                f"Cannot read inventory snapshot {path}: {e}", path=str(path), cause=e
            ) from e

        snapshot = parse_inventory_document(document, account_id, region, source=str(path))
        logger.info(
            f"Loaded {len(snapshot.records)} inventory records for {account_id}/{region}"
        )
        return snapshot
