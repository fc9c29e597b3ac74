"""Resource discovery for an environment filter."""

from __future__ import annotations

import logging
from typing import Optional

from envteardown.aws.provider import Ec2Provider
from envteardown.discovery.matching import (
    compile_filter,
    instance_matches,
    parse_floating_ip,
    parse_instance,
    parse_records,
    parse_volume,
)
from envteardown.models.resources import FloatingIP, Instance, ResourceKind, ResourceSet, Volume
from envteardown.models.teardown_plan import TeardownPlan
from envteardown.teardown.images import images_differ

logger = logging.getLogger(__name__)


class ResourceDiscoverer:
    """Discovers the resources that belong to one environment.

    All provider calls are read-only. A provider failure raises DiscoveryError
    and no plan is produced; malformed records are skipped.

    Attributes:
        provider: EC2 provider
    """

    def __init__(self, provider: Ec2Provider) -> None:
        self.provider = provider

    def discover(self, env_filter: str, display_filter: Optional[str] = None) -> TeardownPlan:
        """Build a teardown plan for the filter.

        Args:
            env_filter: Pattern matched against instance ids and tags
            display_filter: Filter as shown to the operator (defaults to env_filter)

        Returns:
            Immutable TeardownPlan

        Raises:
            DiscoveryError: If the provider is unreachable or a listing fails
        """
        self.provider.check_connectivity()

        instances = self.find_instances(env_filter)
        logger.info(f"Filter '{display_filter or env_filter}' matched {instances.count} instance(s)")

        volumes = self.find_volumes(instances)
        networking_advanced = self.provider.probe_networking()
        if networking_advanced:
            floating_ips = self.find_floating_ips(instances)
        else:
            logger.info("Advanced networking not in use, skipping floating IPs")
            floating_ips = ResourceSet.not_applicable(ResourceKind.FLOATING_IP)

        images = ResourceSet.of(ResourceKind.IMAGE, (i.image_id for i in instances))

        return TeardownPlan(
            env_filter=env_filter,
            display_filter=display_filter or env_filter,
            instances=instances,
            volumes=volumes,
            floating_ips=floating_ips,
            images=images,
            networking_advanced=networking_advanced,
            images_differ=images_differ(images.ids),
        )

    def find_instances(self, env_filter: str) -> ResourceSet[Instance]:
        pattern = compile_filter(env_filter)
        records = [r for r in self.provider.list_instances() if instance_matches(pattern, r)]
        return ResourceSet.of(ResourceKind.INSTANCE, parse_records(records, parse_instance))

    def find_volumes(self, instances: ResourceSet[Instance]) -> ResourceSet[Volume]:
        """Find in-use volumes attached to the matched instances.

        Detached volumes are never returned, even when they were created for
        one of the instances.
        """
        instance_ids = set(instances.ids)
        if not instance_ids:
            return ResourceSet.of(ResourceKind.VOLUME, [])

        volumes = parse_records(self.provider.list_volumes(), parse_volume)
        attached = [
            v for v in volumes if v.in_use and instance_ids.intersection(v.attached_instance_ids)
        ]
        return ResourceSet.of(ResourceKind.VOLUME, attached)

    def find_floating_ips(self, instances: ResourceSet[Instance]) -> ResourceSet[FloatingIP]:
        instance_ids = set(instances.ids)
        public_ips = {i.public_ip for i in instances if i.public_ip}
        if not instance_ids:
            return ResourceSet.of(ResourceKind.FLOATING_IP, [])

        addresses = parse_records(self.provider.list_floating_ips(), parse_floating_ip)
        matched = [
            a for a in addresses if a.instance_id in instance_ids or (a.public_ip and a.public_ip in public_ips)
        ]
        return ResourceSet.of(ResourceKind.FLOATING_IP, matched)
