"""Core type definitions: resource kinds, relationship kinds, severities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ResourceType(Enum):
    """Kind of an analyzable resource in the source model.

    Closed set. Adding a resource kind means adding a member here and a row
    to ``migrator.config.RESOURCE_TYPES``.
    """

    APPLICATION_DEFINITION = "applicationdefinition"
    CONTEXT_PROPERTY = "contextproperty"
    DISTRIBUTION_LIST = "distributionlist"
    DOCUMENT_SCHEMA = "documentschema"
    MAP = "map"
    MESSAGE_DECLARATION = "messagedeclaration"
    MESSAGE_TYPE = "messagetype"
    PROPERTY_SCHEMA = "propertyschema"
    RECEIVE_PORT = "receiveport"
    SEND_PORT = "sendport"
    SERVICE_DECLARATION = "servicedeclaration"


class RelationshipType(Enum):
    """Kind of a relationship edge between two resources.

    Every kind has exactly one complement, see ``complement``.
    """

    REFERENCES_TO = "ReferencesTo"
    REFERENCED_BY = "ReferencedBy"
    PARENT = "Parent"  # target is the parent of the edge owner
    CHILD = "Child"  # target is a child of the edge owner
    CALLS_TO = "CallsTo"
    CALLED_BY = "CalledBy"

    @property
    def complement(self) -> RelationshipType:
        """The kind recorded on the other end of the edge."""
        return _COMPLEMENTS[self]


_COMPLEMENTS: dict[RelationshipType, RelationshipType] = {
    RelationshipType.REFERENCES_TO: RelationshipType.REFERENCED_BY,
    RelationshipType.REFERENCED_BY: RelationshipType.REFERENCES_TO,
    RelationshipType.PARENT: RelationshipType.CHILD,
    RelationshipType.CHILD: RelationshipType.PARENT,
    RelationshipType.CALLS_TO: RelationshipType.CALLED_BY,
    RelationshipType.CALLED_BY: RelationshipType.CALLS_TO,
}


class Severity(Enum):
    """Severity of a diagnostic message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MessagingObjectType(Enum):
    """Variant tag of a messaging object in the target model."""

    CHANNEL = "channel"
    INTERMEDIARY = "intermediary"
    ENDPOINT = "endpoint"
    MESSAGE = "message"


class IntermediaryKind(Enum):
    """Sub-kind of an intermediary."""

    MESSAGE_ROUTER = "messagerouter"
    MESSAGE_PROCESSOR = "messageprocessor"
    PROCESS_MANAGER = "processmanager"
    MESSAGE_SUBSCRIBER = "messagesubscriber"
    AGGREGATOR = "aggregator"
    SPLITTER = "splitter"


class ChannelKind(Enum):
    """Sub-kind of a channel."""

    POINT_TO_POINT = "pointtopoint"
    PUBLISH_SUBSCRIBE = "publishsubscribe"
    TRIGGER = "trigger"


class MessageExchangePattern(Enum):
    """How an endpoint exchanges messages."""

    ONE_WAY = "one-way"
    REQUEST_REPLY = "request-reply"


class ConversionRating(IntEnum):
    """Conversion quality score of a messaging object, 0 (unrated) to 5."""

    NONE = 0
    POOR = 1
    PARTIAL = 2
    FAIR = 3
    GOOD = 4
    FULL = 5


@dataclass(frozen=True)
class ResourceTypeDef:
    """Immutable definition of a resource kind.

    Drives the friendly names used when reporting the dependency graph.
    """

    resource_type: ResourceType
    friendly_name: str
