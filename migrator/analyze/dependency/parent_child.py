"""DP006: records containment as Parent/Child edges."""

from __future__ import annotations

import logging

from migrator.analyze.dependency.resolution import link
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, has_relationship
from migrator.models.types import RelationshipType

logger = logging.getLogger(__name__)


class ParentChildDependencyRule:
    """Closes the containment tree into Parent/Child edge pairs.

    Runs last so children attached by earlier stages are covered too.
    Idempotent: an existing pair is not added again, so re-running the rule
    leaves the edge set unchanged.
    """

    name = "DP006"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        resources = model.find_all_resources()
        if not resources:
            logger.debug("skipping_rule rule=%s reason=empty_model", self.name)
            return

        logger.debug("running_rule rule=%s", self.name)

        created = 0
        for parent in resources:
            for child in parent.children:
                if has_relationship(parent, child.id, RelationshipType.CHILD) and has_relationship(
                    child, parent.id, RelationshipType.PARENT
                ):
                    continue
                link(self.name, parent, child, RelationshipType.CHILD)
                created += 1

        logger.debug("rule_completed rule=%s created=%d", self.name, created)
