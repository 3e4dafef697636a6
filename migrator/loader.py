"""Model document loading.

A model document is a YAML file holding the output of the parse and
convert stages: the resource trees with their parsed entities, and the
target messaging model. Example::

    sources:
      order-schema:
        entity: DocumentSchema
        name: Order
        full_name: Contoso.Schemas.Order
        promoted_properties:
          - property_type: Contoso.Properties.CustomerId

    resources:
      - type: documentschema
        key: app:schemas:order
        name: Order
        source: order-schema
        children:
          - type: messagetype
            key: app:schemas:order:root
            name: Order
            source:
              entity: MessageDefinition
              name: Order
              full_name: Contoso.Schemas.Order

    target:
      message_bus:
        key: bus
        name: Message Bus
        applications:
          - key: app
            name: App
            channels: [...]
            intermediaries: [...]
            endpoints: [...]

A ``source`` is either the handle of an entry under ``sources`` or an
inline entity, registered under the node's id. A handle that is not in
``sources`` is kept as-is; the dependency rules report it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, TypeVar

import yaml

from migrator.core.errors import ModelLoadError
from migrator.models.resource import ResourceModel, ResourceNode, make_resource_id
from migrator.models.source import (
    ApplicationDefinition,
    ContextProperty,
    DistributionList,
    DocumentSchema,
    MessageDeclaration,
    MessageDefinition,
    Orchestration,
    PromotedProperty,
    PropertySchema,
    ReceivePort,
    SendPort,
    SourceObject,
    SourceObjectTable,
    Transform,
)
from migrator.models.target import (
    Application,
    Channel,
    Endpoint,
    Intermediary,
    Message,
    MessageBus,
    MessagingProperties,
    MigrationTarget,
    TargetResourceTemplate,
)
from migrator.models.types import (
    ChannelKind,
    ConversionRating,
    IntermediaryKind,
    MessageExchangePattern,
    ResourceType,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")

# Entity names accepted in the ``entity`` field of a source object
ENTITY_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (
        ApplicationDefinition,
        ContextProperty,
        DistributionList,
        DocumentSchema,
        MessageDeclaration,
        MessageDefinition,
        Orchestration,
        PropertySchema,
        ReceivePort,
        SendPort,
        Transform,
    )
}


@dataclass
class LoadedModel:
    """Everything read from one model document."""

    resources: ResourceModel
    target: MigrationTarget | None


class _Loader:
    """Builds the models from a parsed document, tracking the source name for errors."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.sources = SourceObjectTable()
        self.ids: set[str] = set()

    def fail(self, reason: str) -> ModelLoadError:
        return ModelLoadError(self.source, reason)

    # -- source model --

    def load(self, document: Any) -> LoadedModel:
        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise self.fail("document root must be a mapping")

        for handle, data in (self.mapping(document.get("sources"), "sources") or {}).items():
            self.register_entity(str(handle), data, f"sources.{handle}")

        roots = [
            self.resource(data, f"resources[{i}]")
            for i, data in enumerate(self.sequence(document.get("resources"), "resources"))
        ]

        target_data = document.get("target")
        target = self.target(target_data) if target_data is not None else None

        return LoadedModel(
            resources=ResourceModel(roots=roots, sources=self.sources),
            target=target,
        )

    def resource(self, data: Any, where: str) -> ResourceNode:
        data = self.mapping(data, where)
        resource_type = self.enum(ResourceType, self.required(data, "type", where), f"{where}.type")

        node_id = str(data.get("id") or make_resource_id())
        if node_id in self.ids:
            raise self.fail(f"{where}: duplicate resource id {node_id!r}")
        self.ids.add(node_id)

        key = str(self.required(data, "key", where))
        node = ResourceNode(
            type=resource_type,
            key=key,
            name=str(data.get("name", key)),
            id=node_id,
        )

        source = data.get("source")
        if isinstance(source, dict):
            node.source_ref = self.register_entity(node_id, source, f"{where}.source")
        elif source is not None:
            node.source_ref = str(source)

        for i, child in enumerate(self.sequence(data.get("children"), f"{where}.children")):
            node.add_child(self.resource(child, f"{where}.children[{i}]"))

        return node

    def register_entity(self, handle: str, data: Any, where: str) -> str:
        data = dict(self.mapping(data, where))
        entity_name = self.required(data, "entity", where)
        entity_type = ENTITY_TYPES.get(entity_name)
        if entity_type is None:
            raise self.fail(f"{where}.entity: unknown entity {entity_name!r}")
        del data["entity"]

        # Name lists hold strings
        for f in fields(entity_type):
            if f.type == "list[str]" and f.name in data:
                data[f.name] = [
                    str(item) for item in self.sequence(data[f.name], f"{where}.{f.name}")
                ]

        if entity_type is DocumentSchema:
            data["promoted_properties"] = [
                self.build(PromotedProperty, p, f"{where}.promoted_properties[{i}]")
                for i, p in enumerate(
                    self.sequence(data.get("promoted_properties"), f"{where}.promoted_properties")
                )
            ]

        entity: SourceObject = self.build(entity_type, data, where)
        try:
            return self.sources.register(handle, entity)
        except ValueError as e:
            raise self.fail(f"{where}: {e}") from e

    # -- target model --

    def target(self, data: Any) -> MigrationTarget:
        data = self.mapping(data, "target")
        bus_data = self.mapping(self.required(data, "message_bus", "target"), "target.message_bus")
        where = "target.message_bus"

        bus = MessageBus(
            key=str(self.required(bus_data, "key", where)),
            name=str(bus_data.get("name", bus_data["key"])),
            resources=self.templates(bus_data.get("resources"), f"{where}.resources"),
        )
        for i, app_data in enumerate(self.sequence(bus_data.get("applications"), f"{where}.applications")):
            bus.applications.append(self.application(app_data, f"{where}.applications[{i}]"))

        return MigrationTarget(message_bus=bus)

    def application(self, data: Any, where: str) -> Application:
        data = self.mapping(data, where)
        key = str(self.required(data, "key", where))
        return Application(
            key=key,
            name=str(data.get("name", key)),
            channels=self.objects(data, "channels", where, self.channel),
            intermediaries=self.objects(data, "intermediaries", where, self.intermediary),
            endpoints=self.objects(data, "endpoints", where, self.endpoint),
            messages=self.objects(data, "messages", where, self.message),
            resources=self.templates(data.get("resources"), f"{where}.resources"),
        )

    def objects(
        self,
        data: dict[str, Any],
        name: str,
        where: str,
        build: Callable[[dict[str, Any], str], E],
    ) -> list[E]:
        items = self.sequence(data.get(name), f"{where}.{name}")
        return [
            build(self.mapping(item, f"{where}.{name}[{i}]"), f"{where}.{name}[{i}]")
            for i, item in enumerate(items)
        ]

    def common(self, data: dict[str, Any], where: str) -> dict[str, Any]:
        key = str(self.required(data, "key", where))
        rating = data.get("rating", 0)
        try:
            rating = ConversionRating(int(rating))
        except (TypeError, ValueError) as e:
            raise self.fail(f"{where}.rating: invalid rating {rating!r}") from e
        return {
            "key": key,
            "name": str(data.get("name", key)),
            "properties": MessagingProperties.from_mapping(
                self.mapping(data.get("properties"), f"{where}.properties")
            ),
            "rating": rating,
            "resources": self.templates(data.get("resources"), f"{where}.resources"),
        }

    def channel(self, data: dict[str, Any], where: str) -> Channel:
        return Channel(
            **self.common(data, where),
            kind=self.enum(ChannelKind, data.get("kind", ChannelKind.POINT_TO_POINT.value), f"{where}.kind"),
        )

    def intermediary(self, data: dict[str, Any], where: str) -> Intermediary:
        return Intermediary(
            **self.common(data, where),
            kind=self.enum(
                IntermediaryKind,
                data.get("kind", IntermediaryKind.MESSAGE_PROCESSOR.value),
                f"{where}.kind",
            ),
            input_channel_keys=[str(k) for k in self.sequence(data.get("input_channel_keys"), where)],
            output_channel_keys=[str(k) for k in self.sequence(data.get("output_channel_keys"), where)],
            activator=bool(data.get("activator", False)),
        )

    def endpoint(self, data: dict[str, Any], where: str) -> Endpoint:
        input_key = data.get("input_channel_key")
        output_key = data.get("output_channel_key")
        return Endpoint(
            **self.common(data, where),
            input_channel_key=str(input_key) if input_key is not None else None,
            output_channel_key=str(output_key) if output_key is not None else None,
            activator=bool(data.get("activator", False)),
            exchange_pattern=self.enum(
                MessageExchangePattern,
                data.get("exchange_pattern", MessageExchangePattern.ONE_WAY.value),
                f"{where}.exchange_pattern",
            ),
        )

    def message(self, data: dict[str, Any], where: str) -> Message:
        return Message(**self.common(data, where), message_type=str(data.get("message_type", "")))

    def templates(self, data: Any, where: str) -> list[TargetResourceTemplate]:
        return [
            self.build(TargetResourceTemplate, item, f"{where}[{i}]")
            for i, item in enumerate(self.sequence(data, where))
        ]

    # -- helpers --

    def build(self, cls: type[E], data: Any, where: str) -> E:
        """Construct a dataclass, rejecting unknown and missing fields."""
        data = self.mapping(data, where)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise self.fail(f"{where}: unknown field(s) {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise self.fail(f"{where}: {e}") from e

    def enum(self, enum_cls: type[E], value: Any, where: str) -> E:
        try:
            return enum_cls(value)
        except ValueError as e:
            raise self.fail(f"{where}: unknown {enum_cls.__name__} {value!r}") from e

    def required(self, data: dict[str, Any], name: str, where: str) -> Any:
        if data.get(name) is None:
            raise self.fail(f"{where}: missing required key {name!r}")
        return data[name]

    def mapping(self, value: Any, where: str) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise self.fail(f"{where}: expected a mapping, got {type(value).__name__}")
        return value

    def sequence(self, value: Any, where: str) -> list[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise self.fail(f"{where}: expected a list, got {type(value).__name__}")
        return value


def load_model_string(text: str, source: str = "<string>") -> LoadedModel:
    """Load a model document from YAML text.

    Raises:
        ModelLoadError: If the text is not valid YAML or not a valid model.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ModelLoadError(source, f"invalid YAML: {e}") from e

    loaded = _Loader(source).load(document)
    logger.info(
        "model_loaded source=%s resources=%d sources=%d target=%s",
        source,
        len(loaded.resources.find_all_resources()),
        len(loaded.resources.sources),
        loaded.target is not None,
    )
    return loaded


def load_model(path: str | Path) -> LoadedModel:
    """Load a model document from a YAML file.

    Raises:
        ModelLoadError: If the file cannot be read or is not a valid model.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ModelLoadError(path, e.strerror or str(e)) from e
    return load_model_string(text, source=str(path))
