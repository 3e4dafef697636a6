"""DP001: links document schemas to the context properties they promote."""

from __future__ import annotations

import logging

from migrator.analyze.dependency.resolution import (
    link,
    report_ambiguous,
    report_missing_source,
    report_unresolved,
    resolve,
)
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.source import ContextProperty, DocumentSchema
from migrator.models.types import RelationshipType, ResourceType

logger = logging.getLogger(__name__)


class SchemaDependencyRule:
    """Resolves promoted properties against property schema fields.

    A resolved promoted property links the document schema to both the
    property schema and the context property (field) itself.
    """

    name = "DP001"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Link every document schema to the context properties it promotes."""
        schemas = model.find_by_type(ResourceType.DOCUMENT_SCHEMA)
        if not schemas:
            logger.debug("skipping_rule rule=%s reason=no_document_schemas", self.name)
            return

        logger.debug("running_rule rule=%s schemas=%d", self.name, len(schemas))

        index = model.index()
        fields = self._context_properties(model)

        for schema_node in schemas:
            schema = model.typed_source_of(schema_node, DocumentSchema)
            if schema is None:
                report_missing_source(schema_node, self.name, context)
                continue

            for promoted in schema.promoted_properties:
                resolution = resolve(
                    promoted.property_type,
                    fields,
                    key=lambda pair: pair[1].full_name,
                )

                if resolution.status == "unresolved":
                    report_unresolved(
                        schema_node,
                        self.name,
                        f"The context property {promoted.property_type!r} promoted by "
                        f"schema {schema.full_name!r} could not be found",
                    )
                elif resolution.status == "ambiguous":
                    report_ambiguous(
                        schema_node,
                        self.name,
                        promoted.property_type,
                        len(resolution.matches),
                        "context property",
                    )
                else:
                    field_node, _ = resolution.match
                    property_schema_node = (
                        index.get(field_node.parent_id) if field_node.parent_id else None
                    )
                    if property_schema_node is not None:
                        link(
                            self.name,
                            schema_node,
                            property_schema_node,
                            RelationshipType.REFERENCES_TO,
                        )
                    link(self.name, schema_node, field_node, RelationshipType.REFERENCES_TO)

        logger.debug("rule_completed rule=%s", self.name)

    def _context_properties(
        self,
        model: ResourceModel,
    ) -> list[tuple[ResourceNode, ContextProperty]]:
        """Context property nodes paired with their parsed fields."""
        pairs: list[tuple[ResourceNode, ContextProperty]] = []
        for node in model.find_by_type(ResourceType.CONTEXT_PROPERTY):
            field_def = model.typed_source_of(node, ContextProperty)
            if field_def is None:
                logger.debug(
                    "candidate_without_source rule=%s key=%s", self.name, node.key
                )
                continue
            pairs.append((node, field_def))
        return pairs
