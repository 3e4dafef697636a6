"""Parse-stage entities referenced by resource nodes.

These are the already-deserialized artifacts of the legacy platform. The
analyze stage only reads them. Resource nodes reach them through a handle
into the ``SourceObjectTable``, which the parse stage owns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class PromotedProperty:
    """A property promoted by a document schema into the message context."""

    property_type: str  # fully-qualified context property name
    xpath: str = ""


@dataclass
class DocumentSchema:
    """A document (message) schema."""

    name: str
    full_name: str
    promoted_properties: list[PromotedProperty] = field(default_factory=list)


@dataclass
class ContextProperty:
    """A field declared by a property schema."""

    name: str
    namespace: str

    @property
    def full_name(self) -> str:
        """Fully-qualified name used by promoted property references."""
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass
class PropertySchema:
    """A property schema declaring context properties."""

    name: str
    full_name: str


@dataclass
class MessageDefinition:
    """A root message type exposed by a document schema."""

    name: str
    full_name: str


@dataclass
class Transform:
    """A map between one or more source and target schemas."""

    name: str
    full_name: str
    source_schema_type_names: list[str] = field(default_factory=list)
    target_schema_type_names: list[str] = field(default_factory=list)


@dataclass
class ReceivePort:
    """A receive port and the maps it applies."""

    name: str
    transforms: list[str] = field(default_factory=list)
    outbound_transforms: list[str] = field(default_factory=list)


@dataclass
class SendPort:
    """A send port and the maps it applies."""

    name: str
    transforms: list[str] = field(default_factory=list)
    inbound_transforms: list[str] = field(default_factory=list)


@dataclass
class DistributionList:
    """A send port group."""

    name: str
    send_ports: list[str] = field(default_factory=list)


@dataclass
class ApplicationDefinition:
    """An application definition and the applications it references."""

    display_name: str
    references: list[str] = field(default_factory=list)


@dataclass
class Orchestration:
    """An orchestration (service declaration) body."""

    name: str
    full_name: str
    transform_class_names: list[str] = field(default_factory=list)


@dataclass
class MessageDeclaration:
    """A message variable declared inside an orchestration."""

    name: str
    type_name: str


SourceObject = Union[
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
]


class SourceObjectTable:
    """Handle table for parse-stage entities.

    Resource nodes store a handle, never the entity itself, so the lifetime
    of the parsed entities stays with the parse stage.
    """

    def __init__(self) -> None:
        self._objects: dict[str, SourceObject] = {}

    def register(self, handle: str, obj: SourceObject) -> str:
        """Store an entity under a handle and return the handle.

        Raises:
            ValueError: If the handle is already taken.
        """
        if handle in self._objects:
            raise ValueError(f"Source handle already registered: {handle}")
        self._objects[handle] = obj
        return handle

    def resolve(self, handle: str | None) -> SourceObject | None:
        """Return the entity for a handle, or None if unknown."""
        if handle is None:
            return None
        return self._objects.get(handle)

    def __contains__(self, handle: object) -> bool:
        return handle in self._objects

    def __len__(self) -> int:
        return len(self._objects)
