"""Prior-state inventory and the resource existence oracle."""

from .kinds import REQUIRED_LOOKUP_KEYS, VARIANT_LOOKUP_KEYS, ResourceKind
from .loader import InventoryLoader, parse_inventory_document
from .models import InventoryRecord, InventorySnapshot
from .oracle import ResourceExistenceOracle

__all__ = [
    "REQUIRED_LOOKUP_KEYS",
    "VARIANT_LOOKUP_KEYS",
    "InventoryLoader",
    "InventoryRecord",
    "InventorySnapshot",
    "ResourceExistenceOracle",
    "ResourceKind",
    "parse_inventory_document",
]
