"""DP002: links maps to their schemas and to the ports that apply them."""

from __future__ import annotations

import logging
from typing import Union

from migrator.analyze.dependency.resolution import (
    link,
    report_ambiguous,
    report_missing_source,
    report_unresolved,
    resolve,
)
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.source import (
    DocumentSchema,
    PropertySchema,
    ReceivePort,
    SendPort,
    Transform,
)
from migrator.models.types import RelationshipType, ResourceType

logger = logging.getLogger(__name__)

SchemaSource = Union[DocumentSchema, PropertySchema]


class TransformDependencyRule:
    """Resolves map source/target schemas and the ports using each map.

    Edge orientation depends on the schema's role:

    - source schema: map ReferencedBy schema (schema ReferencesTo map)
    - target schema: map ReferencesTo schema (schema ReferencedBy map)
    - port using the map: port ReferencesTo map
    """

    name = "DP002"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Link every map to its schemas and ports."""
        transforms = model.find_by_type(ResourceType.MAP)
        if not transforms:
            logger.debug("skipping_rule rule=%s reason=no_maps", self.name)
            return

        logger.debug("running_rule rule=%s maps=%d", self.name, len(transforms))

        schemas = self._schemas(model)
        receive_ports = self._ports(model, context, ResourceType.RECEIVE_PORT, ReceivePort)
        send_ports = self._ports(model, context, ResourceType.SEND_PORT, SendPort)

        for transform_node in transforms:
            transform = model.typed_source_of(transform_node, Transform)
            if transform is None:
                report_missing_source(transform_node, self.name, context)
                continue

            logger.debug("resolving_source_schemas rule=%s map=%s", self.name, transform.full_name)
            self._resolve_schemas(transform_node, transform, schemas, is_source=True)

            logger.debug("resolving_target_schemas rule=%s map=%s", self.name, transform.full_name)
            self._resolve_schemas(transform_node, transform, schemas, is_source=False)

            logger.debug("resolving_ports rule=%s map=%s", self.name, transform.full_name)
            self._resolve_ports(transform_node, transform, receive_ports, send_ports)

        logger.debug("rule_completed rule=%s", self.name)

    def _resolve_schemas(
        self,
        transform_node: ResourceNode,
        transform: Transform,
        schemas: list[tuple[ResourceNode, SchemaSource]],
        is_source: bool,
    ) -> None:
        """Resolve one side (source or target) of a map's schema list."""
        names = (
            transform.source_schema_type_names
            if is_source
            else transform.target_schema_type_names
        )
        kind = RelationshipType.REFERENCED_BY if is_source else RelationshipType.REFERENCES_TO
        role = "source" if is_source else "target"

        for schema_name in names:
            resolution = resolve(schema_name, schemas, key=lambda pair: pair[1].full_name)

            if resolution.status == "unresolved":
                report_unresolved(
                    transform_node,
                    self.name,
                    f"The {role} schema {schema_name!r} referenced by map "
                    f"{transform_node.key!r} could not be found",
                )
            elif resolution.status == "ambiguous":
                report_ambiguous(
                    transform_node,
                    self.name,
                    schema_name,
                    len(resolution.matches),
                    f"{role} schema",
                )
            else:
                schema_node, _ = resolution.match
                link(self.name, transform_node, schema_node, kind)

    def _resolve_ports(
        self,
        transform_node: ResourceNode,
        transform: Transform,
        receive_ports: list[tuple[ResourceNode, ReceivePort]],
        send_ports: list[tuple[ResourceNode, SendPort]],
    ) -> None:
        """Link the map to every port that applies it in either direction."""
        using_receive = [
            node
            for node, port in receive_ports
            if transform.full_name in port.transforms
            or transform.full_name in port.outbound_transforms
        ]
        if not using_receive:
            logger.debug("map_not_used_by_receive_ports rule=%s map=%s", self.name, transform.full_name)
        for port_node in using_receive:
            link(self.name, port_node, transform_node, RelationshipType.REFERENCES_TO)

        using_send = [
            node
            for node, port in send_ports
            if transform.full_name in port.transforms
            or transform.full_name in port.inbound_transforms
        ]
        if not using_send:
            logger.debug("map_not_used_by_send_ports rule=%s map=%s", self.name, transform.full_name)
        for port_node in using_send:
            link(self.name, port_node, transform_node, RelationshipType.REFERENCES_TO)

    def _schemas(self, model: ResourceModel) -> list[tuple[ResourceNode, SchemaSource]]:
        """Document and property schema nodes paired with their entities."""
        pairs: list[tuple[ResourceNode, SchemaSource]] = []
        for node in model.find_all_resources():
            if node.type == ResourceType.DOCUMENT_SCHEMA:
                schema: SchemaSource | None = model.typed_source_of(node, DocumentSchema)
            elif node.type == ResourceType.PROPERTY_SCHEMA:
                schema = model.typed_source_of(node, PropertySchema)
            else:
                continue
            if schema is not None:
                pairs.append((node, schema))
        return pairs

    def _ports(self, model, context, resource_type, expected):
        """Port nodes paired with their entities.

        Ports are scanned for map references, so a port without its entity
        is a model-integrity error.
        """
        pairs = []
        for node in model.find_by_type(resource_type):
            port = model.typed_source_of(node, expected)
            if port is None:
                report_missing_source(node, self.name, context)
                continue
            pairs.append((node, port))
        return pairs
