"""Image consistency checks for matched instances."""

from __future__ import annotations

from typing import Iterable


def unique_images(images: Iterable[str]) -> list[str]:
    """Return distinct non-empty image references in first-seen order."""
    seen: dict[str, None] = {}
    for image in images:
        if image and image.strip():
            seen.setdefault(image.strip(), None)
    return list(seen)


def images_differ(images: Iterable[str]) -> bool:
    """Check whether matched instances were launched from more than one image.

    Different images often have different default login users, which breaks
    per-instance steps such as guest deregistration.
    """
    return len(unique_images(images)) > 1
