"""Discovered resource models.

Typed records for the resource kinds a teardown touches, plus ResourceSet, the
ordered collection every discovery result is normalized into.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Iterable, Iterator, Optional, Tuple, TypeVar


class ResourceKind(Enum):
    """Resource kinds handled by a teardown."""

    INSTANCE = "instance"
    VOLUME = "volume"
    FLOATING_IP = "floating-ip"
    IMAGE = "image"


@dataclass(frozen=True)
class Instance:
    """EC2 instance matched by the environment filter.

    Attributes:
        instance_id: Instance identifier (i-...)
        name: Value of the Name tag, empty when untagged
        image_id: AMI the instance was launched from
        state: Instance state name (running, stopped, ...)
        public_ip: Public address, None when the instance has none
        private_ip: Private address (optional)
        tags: Instance tags
    """

    instance_id: str
    name: str = ""
    image_id: str = ""
    state: str = ""
    public_ip: Optional[str] = None
    private_ip: Optional[str] = None
    tags: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def identifier(self) -> str:
        return self.instance_id


@dataclass(frozen=True)
class Volume:
    """EBS volume with its attachment state."""

    volume_id: str
    state: str
    attached_instance_ids: Tuple[str, ...] = ()

    @property
    def identifier(self) -> str:
        return self.volume_id

    @property
    def in_use(self) -> bool:
        return self.state == "in-use"


@dataclass(frozen=True)
class FloatingIP:
    """Elastic IP allocation and the instance it is associated with."""

    allocation_id: str
    public_ip: str = ""
    instance_id: Optional[str] = None
    private_ip: Optional[str] = None

    @property
    def identifier(self) -> str:
        return self.allocation_id


T = TypeVar("T")


def _identifier_of(item: Any) -> str:
    if isinstance(item, str):
        return item
    return getattr(item, "identifier", "") or ""


@dataclass(frozen=True)
class ResourceSet(Generic[T]):
    """Ordered, immutable set of discovered resources of one kind.

    Items whose identifier is empty or whitespace are dropped on construction,
    so an empty listing always has a count of zero rather than one.

    A set built with not_applicable() marks a resource kind the provider does
    not support. It has no items, but `available` is False so summaries can
    distinguish it from an empty result.

    Attributes:
        kind: Resource kind held by this set
        items: Normalized items in discovery order
        available: False for the not-applicable sentinel
    """

    kind: ResourceKind
    items: Tuple[T, ...] = ()
    available: bool = True

    @classmethod
    def of(cls, kind: ResourceKind, items: Iterable[T]) -> "ResourceSet[T]":
        """Build a set, dropping items with a blank identifier."""
        kept = tuple(item for item in items if _identifier_of(item).strip())
        return cls(kind=kind, items=kept)

    @classmethod
    def not_applicable(cls, kind: ResourceKind) -> "ResourceSet[T]":
        """Sentinel for a resource kind that is unsupported by the provider."""
        return cls(kind=kind, available=False)

    @property
    def ids(self) -> list[str]:
        return [_identifier_of(item) for item in self.items]

    @property
    def count(self) -> int:
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
