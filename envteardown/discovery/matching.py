"""Environment filter matching and record normalization."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Optional, Pattern

from envteardown.models.resources import FloatingIP, Instance, Volume

logger = logging.getLogger(__name__)

# Matches any EC2 instance id; used when an empty filter is explicitly overridden
WILDCARD_FILTER = r"i-[0-9a-f]{8,17}"

# Instances in these states are already on their way out
SKIPPED_INSTANCE_STATES = frozenset({"terminated", "shutting-down"})


def compile_filter(env_filter: str) -> Pattern[str]:
    """Compile an environment filter.

    The filter is treated as a regular expression; a filter that is not a
    valid expression is matched as a literal substring.
    """
    try:
        return re.compile(env_filter)
    except re.error as e:
        logger.debug(f"Filter '{env_filter}' is not a valid pattern ({e}), matching literally")
        return re.compile(re.escape(env_filter))


def tags_to_dict(tags: Optional[Iterable[dict]]) -> dict[str, str]:
    """Convert an EC2 tag list to a dictionary."""
    return {tag["Key"]: tag.get("Value", "") for tag in tags or [] if "Key" in tag}


def instance_matches(pattern: Pattern[str], record: dict) -> bool:
    """Check whether an instance record matches the filter.

    The filter is searched in the instance id and in every tag value,
    including the Name tag.
    """
    fields = [record.get("InstanceId", "")]
    fields.extend(tags_to_dict(record.get("Tags")).values())
    return any(pattern.search(value) for value in fields if value)


def parse_instance(record: dict) -> Optional[Instance]:
    """Build an Instance from a describe_instances record.

    Returns:
        Instance, or None for malformed or already-terminating records
    """
    instance_id = (record.get("InstanceId") or "").strip()
    if not instance_id:
        logger.debug(f"Skipping malformed instance record: {record!r}")
        return None

    state = record.get("State", {}).get("Name", "")
    if state in SKIPPED_INSTANCE_STATES:
        logger.debug(f"Skipping instance {instance_id} in state {state}")
        return None

    tags = tags_to_dict(record.get("Tags"))
    public_ip = (record.get("PublicIpAddress") or "").strip() or None

    return Instance(
        instance_id=instance_id,
        name=tags.get("Name", ""),
        image_id=record.get("ImageId", "") or "",
        state=state,
        public_ip=public_ip,
        private_ip=record.get("PrivateIpAddress"),
        tags=tags,
    )


def parse_volume(record: dict) -> Optional[Volume]:
    volume_id = (record.get("VolumeId") or "").strip()
    if not volume_id:
        logger.debug(f"Skipping malformed volume record: {record!r}")
        return None

    attached = tuple(
        a["InstanceId"] for a in record.get("Attachments", []) if a.get("InstanceId")
    )
    return Volume(volume_id=volume_id, state=record.get("State", ""), attached_instance_ids=attached)


def parse_floating_ip(record: dict) -> Optional[FloatingIP]:
    allocation_id = (record.get("AllocationId") or "").strip()
    if not allocation_id:
        logger.debug(f"Skipping address without allocation id: {record.get('PublicIp', 'unknown')}")
        return None

    return FloatingIP(
        allocation_id=allocation_id,
        public_ip=record.get("PublicIp", "") or "",
        instance_id=record.get("InstanceId"),
        private_ip=record.get("PrivateIpAddress"),
    )


def parse_records(records: Iterable[dict], parser: Any) -> list:
    """Apply a record parser, dropping records it rejects."""
    parsed = []
    for record in records:
        item = parser(record)
        if item is not None:
            parsed.append(item)
    return parsed
