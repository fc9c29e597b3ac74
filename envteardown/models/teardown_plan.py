"""Teardown plan model.

The aggregate produced by discovery and consumed read-only by the safety gate,
the confirmation gate and the sequencer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from envteardown.models.resources import FloatingIP, Instance, ResourceKind, ResourceSet, Volume
from envteardown.teardown.images import unique_images


def _empty(kind: ResourceKind) -> ResourceSet:
    return ResourceSet(kind=kind)


@dataclass(frozen=True)
class TeardownPlan:
    """Everything a teardown run would delete.

    Attributes:
        env_filter: Pattern used to match instances
        display_filter: Filter as shown to the operator ("*" for the wildcard)
        instances: Matched instances
        volumes: In-use volumes attached to matched instances
        floating_ips: Elastic IPs of matched instances, or the not-applicable sentinel
        images: Image reference of each matched instance, in instance order
        networking_advanced: True when the floating IP probe succeeded
        images_differ: True when matched instances come from more than one image
    """

    env_filter: str
    display_filter: str
    instances: ResourceSet[Instance] = field(default_factory=lambda: _empty(ResourceKind.INSTANCE))
    volumes: ResourceSet[Volume] = field(default_factory=lambda: _empty(ResourceKind.VOLUME))
    floating_ips: ResourceSet[FloatingIP] = field(default_factory=lambda: _empty(ResourceKind.FLOATING_IP))
    images: ResourceSet[str] = field(default_factory=lambda: _empty(ResourceKind.IMAGE))
    networking_advanced: bool = False
    images_differ: bool = False

    @property
    def instance_count(self) -> int:
        return self.instances.count

    @property
    def volume_count(self) -> int:
        return self.volumes.count

    @property
    def public_ips(self) -> list[str]:
        """Public addresses of matched instances; blank or missing addresses are not counted."""
        return [i.public_ip.strip() for i in self.instances if i.public_ip and i.public_ip.strip()]

    @property
    def ip_count(self) -> int:
        return len(self.public_ips)

    @property
    def instance_names(self) -> list[str]:
        return [i.name for i in self.instances]

    @property
    def unique_images(self) -> list[str]:
        return unique_images(self.images.ids)

    def to_dict(self) -> dict:
        """Convert plan to a plain dictionary for logging."""
        return {
            "env_filter": self.display_filter,
            "instance_ids": self.instances.ids,
            "instance_names": self.instance_names,
            "public_ips": self.public_ips,
            "floating_ip_ids": self.floating_ips.ids if self.floating_ips.available else None,
            "volume_ids": self.volumes.ids,
            "unique_images": self.unique_images,
            "networking_advanced": self.networking_advanced,
            "images_differ": self.images_differ,
        }
