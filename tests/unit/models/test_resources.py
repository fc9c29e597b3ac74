"""Tests for ResourceSet normalization and resource models."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from envteardown.aws.provider import Ec2Provider
from envteardown.discovery.discoverer import ResourceDiscoverer
from envteardown.models.resources import FloatingIP, Instance, ResourceKind, ResourceSet, Volume
from envteardown.models.teardown_plan import TeardownPlan
from tests.fixtures.ec2 import (
    create_instance_record,
    create_mock_ec2_client,
    create_mock_sts_client,
    create_volume_record,
)


def _discoverer(**client_kwargs) -> tuple[ResourceDiscoverer, Mock]:
    ec2 = create_mock_ec2_client(**client_kwargs)
    provider = Ec2Provider(ec2_client=ec2, sts_client=create_mock_sts_client())
    return ResourceDiscoverer(provider), ec2


class TestResourceSetNormalization:
    """Empty listings must count as zero, never one."""

    @pytest.mark.parametrize("blank", ["", " ", "   \t"])
    def test_blank_instance_ids_are_dropped(self, blank: str) -> None:
        """Test a matching record with a blank id does not count as an instance."""
        discoverer, _ = _discoverer(instances=[create_instance_record(blank, name="abcd1234-broken")])

        instances = discoverer.find_instances("abcd1234")

        assert instances.count == 0
        assert instances.ids == []
        assert not instances

    @pytest.mark.parametrize("blank", ["", "  "])
    def test_blank_volume_ids_are_dropped(self, blank: str) -> None:
        discoverer, _ = _discoverer(
            instances=[create_instance_record("i-1", name="abcd1234-master")],
            volumes=[create_volume_record(blank, "i-1"), create_volume_record("vol-1", "i-1")],
        )

        volumes = discoverer.find_volumes(discoverer.find_instances("abcd1234"))

        assert volumes.ids == ["vol-1"]
        assert volumes.count == 1

    @pytest.mark.parametrize("public_ip", ["", "  ", None])
    def test_blank_public_ip_is_not_counted(self, public_ip) -> None:
        """Test instances without a usable public address add nothing to the IP count."""
        discoverer, _ = _discoverer(
            instances=[create_instance_record("i-1", name="abcd1234-master", public_ip=public_ip)]
        )

        plan = discoverer.discover("abcd1234")

        assert plan.instance_count == 1
        assert plan.ip_count == 0
        assert plan.public_ips == []

    @pytest.mark.parametrize("public_ip", ["", "   "])
    def test_plan_ignores_blank_public_ip_on_records(self, public_ip: str) -> None:
        plan = TeardownPlan(
            env_filter="abcd1234",
            display_filter="abcd1234",
            instances=ResourceSet.of(ResourceKind.INSTANCE, [Instance(instance_id="i-1", public_ip=public_ip)]),
        )

        assert plan.ip_count == 0

    def test_public_ips_keep_instance_order(self) -> None:
        plan = TeardownPlan(
            env_filter="abcd1234",
            display_filter="abcd1234",
            instances=ResourceSet.of(
                ResourceKind.INSTANCE,
                [
                    Instance(instance_id="i-2", public_ip="54.0.0.2"),
                    Instance(instance_id="i-3"),
                    Instance(instance_id="i-1", public_ip=" 54.0.0.1 "),
                ],
            ),
        )

        assert plan.public_ips == ["54.0.0.2", "54.0.0.1"]
        assert plan.ip_count == 2

    def test_of_drops_items_with_blank_identifiers(self) -> None:
        """Test typed records with blank ids are dropped the same way as strings."""
        resources = ResourceSet.of(
            ResourceKind.INSTANCE,
            [Instance(instance_id="i-1"), Instance(instance_id="  "), Instance(instance_id="i-2")],
        )

        assert resources.ids == ["i-1", "i-2"]

    def test_of_preserves_order(self) -> None:
        """Test items keep discovery order."""
        resources = ResourceSet.of(ResourceKind.VOLUME, [Volume("vol-b", "in-use"), Volume("vol-a", "in-use")])

        assert resources.ids == ["vol-b", "vol-a"]

    def test_not_applicable_sentinel(self) -> None:
        """Test the sentinel is distinguishable from an empty set."""
        sentinel = ResourceSet.not_applicable(ResourceKind.FLOATING_IP)
        empty = ResourceSet.of(ResourceKind.FLOATING_IP, [])

        assert sentinel.count == 0
        assert sentinel.available is False
        assert empty.available is True
        assert sentinel != empty


class TestResourceModels:
    """Test suite for resource records."""

    def test_volume_in_use(self) -> None:
        assert Volume("vol-1", "in-use").in_use is True
        assert Volume("vol-1", "available").in_use is False

    def test_identifiers(self) -> None:
        assert Instance(instance_id="i-1").identifier == "i-1"
        assert Volume("vol-1", "in-use").identifier == "vol-1"
        assert FloatingIP(allocation_id="eipalloc-1").identifier == "eipalloc-1"

    def test_instance_without_public_ip(self) -> None:
        instance = Instance(instance_id="i-1", name="web")

        assert instance.public_ip is None
