"""Read-only discovery of environment resources."""

from __future__ import annotations

__all__ = ["ResourceDiscoverer"]

from envteardown.discovery.discoverer import ResourceDiscoverer
