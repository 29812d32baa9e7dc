"""Coordinator layer: refresh policy and cache-first loading."""

from pricestats.coordinator.policy import RefreshPolicy
from pricestats.coordinator.refresh import (
    DEFAULT_OVERLAYS,
    CoordinatorState,
    RefreshCoordinator,
)

__all__ = [
    "DEFAULT_OVERLAYS",
    "CoordinatorState",
    "RefreshCoordinator",
    "RefreshPolicy",
]
