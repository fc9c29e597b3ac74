"""Tests for image consistency checks."""

from __future__ import annotations

from envteardown.teardown.images import images_differ, unique_images


class TestImageConsistency:
    """Test suite for images_differ and unique_images."""

    def test_single_image(self) -> None:
        assert images_differ(["img-A", "img-A", "img-A"]) is False

    def test_multiple_images(self) -> None:
        assert images_differ(["img-A", "img-B"]) is True

    def test_empty(self) -> None:
        assert images_differ([]) is False

    def test_blank_references_ignored(self) -> None:
        assert images_differ(["img-A", "", "  "]) is False

    def test_unique_images_keep_first_seen_order(self) -> None:
        assert unique_images(["img-B", "img-A", "img-B"]) == ["img-B", "img-A"]
