"""
Tests for the Resource Existence Oracle.

Tests cover:
- Exact matching restricted to the keys relevant to a kind
- Wildcard attributes and ambiguity detection
- Required and variant lookup keys
- Disabled incremental mode, metadata-free snapshots, external resources
"""

import pytest

from lzplanner.exceptions import InventoryLookupAmbiguity, InventoryLookupError
from lzplanner.inventory import InventorySnapshot, ResourceExistenceOracle, ResourceKind


def _oracle(records, **kwargs) -> ResourceExistenceOracle:
    enabled = kwargs.pop("enabled", True)
    snapshot = InventorySnapshot.from_records("444444444444", "us-east-1", records, **kwargs)
    return ResourceExistenceOracle(snapshot, enabled=enabled)


class TestExactMatching:
    """Matching over the relevant lookup keys."""

    def test_existing_vpc(self):
        oracle = _oracle([{"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}}])

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Central"})
        assert not oracle.exists(ResourceKind.VPC, {"vpcName": "Spoke"})

    def test_kind_must_match(self):
        oracle = _oracle(
            [{"kind": "AWS::EC2::Subnet", "attributes": {"vpcName": "Central", "subnetName": "a"}}]
        )

        assert not oracle.exists(
            ResourceKind.ROUTE_TABLE, {"vpcName": "Central", "routeTableName": "a"}
        )

    def test_kind_accepts_cloudformation_type_and_member_name(self):
        oracle = _oracle([{"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}}])

        assert oracle.exists("AWS::EC2::VPC", {"vpcName": "Central"})
        assert oracle.exists("vpc", {"vpcName": "Central"})

    def test_irrelevant_lookup_keys_are_ignored(self):
        oracle = _oracle([{"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}}])

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Central", "subnetName": "x"})

    def test_irrelevant_record_attributes_are_ignored(self):
        oracle = _oracle(
            [
                {
                    "kind": "AWS::EC2::VPC",
                    "attributes": {"vpcName": "Central", "cidr": "10.0.0.0/16"},
                }
            ]
        )

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Central"})

    def test_integer_attributes_compare_as_strings(self):
        oracle = _oracle(
            [
                {
                    "kind": "AWS::EC2::NetworkAclEntry",
                    "attributes": {
                        "vpcName": "Central",
                        "naclName": "acl",
                        "ruleNumber": 100,
                        "type": "ingress",
                    },
                }
            ]
        )

        assert oracle.exists(
            ResourceKind.NETWORK_ACL_ENTRY,
            {"vpcName": "Central", "naclName": "acl", "ruleNumber": "100", "type": "ingress"},
        )

    def test_owner(self):
        oracle = _oracle(
            [
                {
                    "kind": "AWS::EC2::VPC",
                    "attributes": {"vpcName": "Central"},
                    "owner": "LandingZone-NetworkVpcStack-444444444444-us-east-1",
                }
            ]
        )

        assert oracle.owner(ResourceKind.VPC, {"vpcName": "Central"}) == (
            "LandingZone-NetworkVpcStack-444444444444-us-east-1"
        )
        assert oracle.owner(ResourceKind.VPC, {"vpcName": "Spoke"}) is None


class TestWildcardsAndAmbiguity:
    """Record attributes missing a key match any value."""

    def test_missing_attribute_is_wildcard(self):
        oracle = _oracle([{"kind": "AWS::EC2::Subnet", "attributes": {"subnetName": "a"}}])

        assert oracle.exists(ResourceKind.SUBNET, {"vpcName": "Central", "subnetName": "a"})
        assert oracle.exists(ResourceKind.SUBNET, {"vpcName": "Spoke", "subnetName": "a"})

    def test_multiple_matches_raise(self):
        oracle = _oracle(
            [
                {"kind": "AWS::EC2::Subnet", "attributes": {"subnetName": "a"}},
                {"kind": "AWS::EC2::Subnet", "attributes": {"vpcName": "Central", "subnetName": "a"}},
            ]
        )

        with pytest.raises(InventoryLookupAmbiguity) as exc_info:
            oracle.exists(ResourceKind.SUBNET, {"vpcName": "Central", "subnetName": "a"})

        assert exc_info.value.context["match_count"] == 2
        assert exc_info.value.error_code == "INVENTORY_LOOKUP_AMBIGUOUS"
        assert exc_info.value.context["candidates"] == [
            {"attributes": {"subnetName": "a"}, "owner": None},
            {"attributes": {"vpcName": "Central", "subnetName": "a"}, "owner": None},
        ]

    def test_non_overlapping_wildcards_do_not_collide(self):
        oracle = _oracle(
            [
                {"kind": "AWS::EC2::Subnet", "attributes": {"vpcName": "Central", "subnetName": "a"}},
                {"kind": "AWS::EC2::Subnet", "attributes": {"vpcName": "Spoke", "subnetName": "a"}},
            ]
        )

        assert oracle.exists(ResourceKind.SUBNET, {"vpcName": "Spoke", "subnetName": "a"})


class TestLookupKeys:
    """Required and variant keys per kind."""

    def test_missing_required_key(self):
        oracle = _oracle([])

        with pytest.raises(InventoryLookupError) as exc_info:
            oracle.exists(ResourceKind.ROUTE, {"vpcName": "Central", "routeTableName": "rt"})

        assert "routeTableEntryName" in exc_info.value.context["missing_keys"]

    def test_required_keys_checked_even_when_disabled(self):
        oracle = _oracle([], enabled=False)

        with pytest.raises(InventoryLookupError):
            oracle.exists(ResourceKind.SUBNET, {"vpcName": "Central"})

    def test_unknown_kind(self):
        with pytest.raises(InventoryLookupError, match="Unknown resource kind"):
            _oracle([]).exists("AWS::S3::Bucket", {"bucketName": "logs"})

    def test_load_balancer_needs_exactly_one_name(self):
        oracle = _oracle([])

        with pytest.raises(InventoryLookupError, match="exactly one of"):
            oracle.exists(ResourceKind.LOAD_BALANCER, {"vpcName": "Central"})
        with pytest.raises(InventoryLookupError, match="exactly one of"):
            oracle.exists(
                ResourceKind.LOAD_BALANCER,
                {"vpcName": "Central", "albName": "a", "nlbName": "b"},
            )

    def test_load_balancer_variants_do_not_cross_match(self):
        oracle = _oracle(
            [
                {
                    "kind": "AWS::ElasticLoadBalancingV2::LoadBalancer",
                    "attributes": {"vpcName": "Central", "albName": "web"},
                }
            ]
        )

        assert oracle.exists(ResourceKind.LOAD_BALANCER, {"vpcName": "Central", "albName": "web"})
        assert not oracle.exists(
            ResourceKind.LOAD_BALANCER, {"vpcName": "Central", "albName": "api"}
        )


class TestExistenceModes:
    """Situations where every resource counts as existing."""

    def test_disabled_oracle_reports_everything_existing(self):
        oracle = _oracle([], enabled=False)

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Central"})

    def test_snapshot_without_metadata(self):
        oracle = _oracle([], metadata_present=False)

        assert oracle.exists(ResourceKind.SUBNET, {"vpcName": "Central", "subnetName": "a"})

    def test_externally_managed(self):
        oracle = _oracle(
            [],
            externally_managed=[{"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Imported"}}],
        )

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Imported"})
        assert not oracle.exists(ResourceKind.VPC, {"vpcName": "Central"})

    def test_environment_is_bound_to_snapshot(self):
        assert _oracle([]).environment == ("444444444444", "us-east-1")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"enabled": False},
            {"metadata_present": False},
            {"externally_managed": [{"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}}]},
        ],
        ids=["disabled", "metadata-free", "externally-managed"],
    )
    def test_no_owner_without_a_classifying_record(self, kwargs):
        duplicates = [
            {"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}, "owner": "Old"},
            {"kind": "AWS::EC2::VPC", "attributes": {"vpcName": "Central"}, "owner": "Older"},
        ]
        oracle = _oracle(duplicates, **kwargs)

        assert oracle.exists(ResourceKind.VPC, {"vpcName": "Central"})
        assert oracle.owner(ResourceKind.VPC, {"vpcName": "Central"}) is None
