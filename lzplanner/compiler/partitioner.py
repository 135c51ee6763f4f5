"""
Unit Partitioner

Splits the logical resources of an (account, region) between the legacy
deployment units that already own them and new, narrower deployment units,
one per (VPC, kind group) that has at least one new resource.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..exceptions import InventoryContextError, ResourceOrphanError
from ..inventory.oracle import ResourceExistenceOracle
from .models import DeploymentUnit, KindGroup, LogicalResource, sanitize_unit_name_part

logger = logging.getLogger(__name__)


@dataclass
class LegacyAssignment:
    """A resource left with the legacy unit that provisioned it."""

    resource: LogicalResource
    owner: Optional[str] = None


@dataclass
class PartitionResult:
    """Outcome of partitioning one (account, region)."""

    units: List[DeploymentUnit] = field(default_factory=list)
    legacy: List[LegacyAssignment] = field(default_factory=list)

    @property
    def new_resources(self) -> List[LogicalResource]:
        return [resource for unit in self.units for resource in unit.resources]

    def assignment(self) -> Dict[Tuple[str, str, str], Optional[str]]:
        """Resource key -> unit name, or None for legacy-owned resources."""
        result: Dict[Tuple[str, str, str], Optional[str]] = {
            item.resource.key: None for item in self.legacy
        }
        for unit in self.units:
            for resource in unit.resources:
                result[resource.key] = unit.name
        return result


def vpc_unit_name(
    prefix: str, group: KindGroup, vpc_name: str, account_id: str, region: str
) -> str:
    return (
        f"{prefix}-{group.unit_suffix}-{sanitize_unit_name_part(vpc_name)}"
        f"-{account_id}-{region}"
    )


class UnitPartitioner:
    """Assigns new resources to kind-group units, leaving existing ones alone."""

    def __init__(
        self,
        account_id: str,
        region: str,
        oracle: ResourceExistenceOracle,
        unit_prefix: str = "LandingZone",
    ):
        """
        Args:
            account_id: Account being compiled
            region: Region being compiled
            oracle: Existence oracle bound to the same (account, region)
            unit_prefix: Prefix of generated unit names

        Raises:
            InventoryContextError: If the oracle belongs to another environment
        """
        if oracle.environment != (account_id, region):
            raise InventoryContextError(
                "Existence oracle belongs to a different environment",
                expected=f"{account_id}/{region}",
                actual="/".join(oracle.environment),
            )
        self.account_id = account_id
        self.region = region
        self.oracle = oracle
        self.unit_prefix = unit_prefix

    def partition(
        self, resources: Iterable[LogicalResource], in_scope_vpcs: Sequence[str]
    ) -> PartitionResult:
        """
        Partition resources into new units and legacy assignments.

        Args:
            resources: Logical resources in enumeration order
            in_scope_vpcs: Names of the VPCs deployed in this (account, region),
                in configuration order

        Returns:
            PartitionResult with units ordered by VPC, then kind group

        Raises:
            ResourceOrphanError: If a new resource belongs to a VPC that is
                not in scope
            InventoryLookupAmbiguity: If the inventory cannot classify a resource
        """
        vpc_order = {name: index for index, name in enumerate(in_scope_vpcs)}
        units: Dict[Tuple[str, KindGroup], DeploymentUnit] = {}
        result = PartitionResult()

        for resource in resources:
            if self.oracle.exists(resource.kind, resource.lookup_values):
                result.legacy.append(
                    LegacyAssignment(
                        resource=resource,
                        owner=self.oracle.owner(resource.kind, resource.lookup_values),
                    )
                )
                continue

            if resource.vpc_name not in vpc_order:
                raise ResourceOrphanError(
                    f"New resource {resource.resource_key} belongs to VPC "
                    f"'{resource.vpc_name}', which is not deployed in "
                    f"{self.account_id}/{self.region}",
                    vpc_name=resource.vpc_name,
                    resource_key=resource.resource_key,
                    context={"account_id": self.account_id, "region": self.region},
                )

            group = resource.kind_group
            unit = units.get((resource.vpc_name, group))
            if unit is None:
                unit = DeploymentUnit(
                    name=vpc_unit_name(
                        self.unit_prefix, group, resource.vpc_name, self.account_id, self.region
                    ),
                    account_id=self.account_id,
                    region=self.region,
                    vpc_name=resource.vpc_name,
                    kind_group=group,
                )
                units[(resource.vpc_name, group)] = unit
            unit.add_resource(resource)

        result.units = [
            units[key]
            for key in sorted(units, key=lambda k: (vpc_order[k[0]], k[1]))
        ]
        logger.info(
            f"Partitioned {self.account_id}/{self.region}: "
            f"{len(result.new_resources)} new resources in {len(result.units)} units, "
            f"{len(result.legacy)} left with legacy units"
        )
        return result
