"""Dependency rule protocol (structural interface).

Every rule satisfies this Protocol. No base classes, no inheritance.
"""

from __future__ import annotations

from typing import Protocol

from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel


class DependencyRule(Protocol):
    """Cross-references resources and records relationship edges."""

    @property
    def name(self) -> str:
        """Rule identifier, e.g. "DP001"."""
        ...

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Add edges and diagnostics to the model.

        Expected-shape problems become diagnostics; never raises for them.
        """
        ...
