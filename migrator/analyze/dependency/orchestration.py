"""DP003: links orchestrations to the message types and maps they use."""

from __future__ import annotations

import logging

from migrator.analyze.dependency.resolution import (
    link,
    report_ambiguous,
    report_missing_source,
    report_unresolved,
    resolve,
)
from migrator.config import SYSTEM_TYPE_PREFIX
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.source import (
    MessageDeclaration,
    MessageDefinition,
    Orchestration,
    Transform,
)
from migrator.models.types import RelationshipType, ResourceType, Severity

logger = logging.getLogger(__name__)


class OrchestrationDependencyRule:
    """Resolves message declarations and transform shapes in orchestrations.

    A message declaration whose type resolves to a message type references
    both the message type and the schema that owns it. Platform types
    (``System.*``) cannot be resolved in the model and are recorded as
    informational only.
    """

    name = "DP003"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Link message declarations and orchestrations to their targets."""
        resources = model.find_all_resources()
        if not resources:
            logger.debug("skipping_rule rule=%s reason=empty_model", self.name)
            return

        logger.debug("running_rule rule=%s", self.name)

        index = {node.id: node for node in resources}
        self._resolve_message_schemas(model, resources, index, context)
        self._resolve_transforms(model, resources, context)

        logger.debug("rule_completed rule=%s", self.name)

    def _resolve_message_schemas(
        self,
        model: ResourceModel,
        resources: list[ResourceNode],
        index: dict[str, ResourceNode],
        context: MigrationContext,
    ) -> None:
        message_types: list[tuple[ResourceNode, MessageDefinition]] = []
        for node in resources:
            if node.type == ResourceType.MESSAGE_TYPE:
                definition = model.typed_source_of(node, MessageDefinition)
                if definition is not None:
                    message_types.append((node, definition))

        for declaration_node in resources:
            if declaration_node.type != ResourceType.MESSAGE_DECLARATION:
                continue

            declaration = model.typed_source_of(declaration_node, MessageDeclaration)
            if declaration is None:
                report_missing_source(declaration_node, self.name, context)
                continue

            schema_type = declaration.type_name
            if schema_type.lower().startswith(SYSTEM_TYPE_PREFIX.lower()):
                logger.debug("system_schema_dependency rule=%s type=%s", self.name, schema_type)
                declaration_node.add_diagnostic(
                    Severity.INFO,
                    f"Message declaration {declaration_node.key!r} uses the platform "
                    f"type {schema_type!r}, which is not part of the model",
                )
                continue

            resolution = resolve(schema_type, message_types, key=lambda pair: pair[1].full_name)

            if resolution.status == "unresolved":
                report_unresolved(
                    declaration_node,
                    self.name,
                    f"The schema {schema_type!r} referenced by message declaration "
                    f"{declaration_node.key!r} could not be found",
                )
            elif resolution.status == "ambiguous":
                report_ambiguous(
                    declaration_node,
                    self.name,
                    schema_type,
                    len(resolution.matches),
                    "schema",
                )
            else:
                message_type_node, _ = resolution.match
                link(
                    self.name,
                    declaration_node,
                    message_type_node,
                    RelationshipType.REFERENCES_TO,
                )
                schema_node = (
                    index.get(message_type_node.parent_id)
                    if message_type_node.parent_id
                    else None
                )
                if schema_node is not None:
                    link(self.name, declaration_node, schema_node, RelationshipType.REFERENCES_TO)

    def _resolve_transforms(
        self,
        model: ResourceModel,
        resources: list[ResourceNode],
        context: MigrationContext,
    ) -> None:
        transforms: list[tuple[ResourceNode, Transform]] = []
        for node in resources:
            if node.type == ResourceType.MAP:
                transform = model.typed_source_of(node, Transform)
                if transform is not None:
                    transforms.append((node, transform))

        for service_node in resources:
            if service_node.type != ResourceType.SERVICE_DECLARATION:
                continue

            orchestration = model.typed_source_of(service_node, Orchestration)
            if orchestration is None:
                report_missing_source(service_node, self.name, context)
                continue

            for class_name in orchestration.transform_class_names:
                resolution = resolve(class_name, transforms, key=lambda pair: pair[1].full_name)

                if resolution.status == "unresolved":
                    report_unresolved(
                        service_node,
                        self.name,
                        f"The map {class_name!r} used by orchestration "
                        f"{service_node.key!r} could not be found",
                    )
                elif resolution.status == "ambiguous":
                    report_ambiguous(
                        service_node,
                        self.name,
                        class_name,
                        len(resolution.matches),
                        "map",
                    )
                else:
                    transform_node, _ = resolution.match
                    link(self.name, service_node, transform_node, RelationshipType.REFERENCES_TO)
