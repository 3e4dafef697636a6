"""DP004: links applications to the applications they reference."""

from __future__ import annotations

import logging

from migrator.analyze.dependency.resolution import (
    link,
    report_ambiguous,
    report_missing_source,
    resolve,
)
from migrator.config import SYSTEM_APPLICATION_NAME
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.source import ApplicationDefinition
from migrator.models.types import RelationshipType, ResourceType, Severity

logger = logging.getLogger(__name__)


class ApplicationDependencyRule:
    """Resolves application references by display name.

    The built-in system application is referenced by every application and
    is never part of the model, so it is skipped.
    """

    name = "DP004"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Link every application definition to the applications it references."""
        definitions = model.find_by_type(ResourceType.APPLICATION_DEFINITION)
        if not definitions:
            logger.debug("skipping_rule rule=%s reason=no_applications", self.name)
            return

        logger.debug("running_rule rule=%s applications=%d", self.name, len(definitions))

        candidates: list[tuple[ResourceNode, ApplicationDefinition]] = []
        for node in definitions:
            definition = model.typed_source_of(node, ApplicationDefinition)
            if definition is not None:
                candidates.append((node, definition))

        for app_node in definitions:
            definition = model.typed_source_of(app_node, ApplicationDefinition)
            if definition is None:
                report_missing_source(app_node, self.name, context)
                continue

            for reference in definition.references:
                if reference == SYSTEM_APPLICATION_NAME:
                    continue

                others = [pair for pair in candidates if pair[0] is not app_node]
                resolution = resolve(reference, others, key=lambda pair: pair[1].display_name)

                if resolution.status == "unresolved":
                    logger.warning(
                        "application_reference_missing rule=%s reference=%s application=%s",
                        self.name,
                        reference,
                        definition.display_name,
                    )
                    app_node.add_diagnostic(
                        Severity.WARNING,
                        f"The application {reference!r} referenced by application "
                        f"{definition.display_name!r} could not be found",
                    )
                elif resolution.status == "ambiguous":
                    report_ambiguous(
                        app_node,
                        self.name,
                        reference,
                        len(resolution.matches),
                        "application",
                    )
                else:
                    related_node, _ = resolution.match
                    link(self.name, app_node, related_node, RelationshipType.CALLS_TO)

        logger.debug("rule_completed rule=%s", self.name)
