"""Target integration model: message bus, applications, messaging objects.

A messaging object is one of a closed set of variants (``Channel``,
``Intermediary``, ``Endpoint``, ``Message``). Channel references between
them are plain string keys; resolving them to objects is the job of the
route walker and the scenario decoder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from migrator.config import ROUTE_LABEL_KEY, SCENARIO_NAME_KEY
from migrator.models.types import (
    ChannelKind,
    ConversionRating,
    IntermediaryKind,
    MessageExchangePattern,
    MessagingObjectType,
)


@dataclass
class MessagingProperties:
    """Recognized configuration of a messaging object.

    ``route_label`` marks a channel as part of a traceable route.
    Unrecognized keys are kept in ``extra``.
    """

    route_label: str | None = None
    scenario_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def traceable(self) -> bool:
        """True if the owning channel is on a traceable route."""
        return self.route_label is not None

    @classmethod
    def from_mapping(cls, values: dict[str, Any] | None) -> MessagingProperties:
        """Split a raw property map into recognized fields and extras."""
        values = dict(values or {})
        route_label = values.pop(ROUTE_LABEL_KEY, None)
        scenario_name = values.pop(SCENARIO_NAME_KEY, None)
        return cls(
            route_label=str(route_label) if route_label is not None else None,
            scenario_name=str(scenario_name) if scenario_name is not None else None,
            extra=values,
        )

    def to_mapping(self) -> dict[str, Any]:
        """Inverse of ``from_mapping``."""
        result = dict(self.extra)
        if self.route_label is not None:
            result[ROUTE_LABEL_KEY] = self.route_label
        if self.scenario_name is not None:
            result[SCENARIO_NAME_KEY] = self.scenario_name
        return result


@dataclass
class TargetResourceTemplate:
    """A template to render for a messaging object during conversion."""

    resource_type: str
    template_key: str
    resource_name: str = ""
    output_path: str = ""


@dataclass
class MessagingObject:
    """Fields shared by every messaging object variant."""

    key: str
    name: str
    properties: MessagingProperties = field(default_factory=MessagingProperties)
    rating: ConversionRating = ConversionRating.NONE
    resources: list[TargetResourceTemplate] = field(default_factory=list)

    @property
    def type(self) -> MessagingObjectType:
        raise NotImplementedError


@dataclass
class Channel(MessagingObject):
    """A channel, addressed by key from intermediary and endpoint refs."""

    kind: ChannelKind = ChannelKind.POINT_TO_POINT

    @property
    def type(self) -> MessagingObjectType:
        return MessagingObjectType.CHANNEL


@dataclass
class Intermediary(MessagingObject):
    """A router, processor or process manager between channels."""

    kind: IntermediaryKind = IntermediaryKind.MESSAGE_PROCESSOR
    input_channel_keys: list[str] = field(default_factory=list)
    output_channel_keys: list[str] = field(default_factory=list)
    activator: bool = False

    @property
    def type(self) -> MessagingObjectType:
        return MessagingObjectType.INTERMEDIARY


@dataclass
class Endpoint(MessagingObject):
    """An adapter at the edge of the bus. Has at most one input and output."""

    input_channel_key: str | None = None
    output_channel_key: str | None = None
    activator: bool = False
    exchange_pattern: MessageExchangePattern = MessageExchangePattern.ONE_WAY

    @property
    def type(self) -> MessagingObjectType:
        return MessagingObjectType.ENDPOINT


@dataclass
class Message(MessagingObject):
    """A message definition. Rated but never routed."""

    message_type: str = ""

    @property
    def type(self) -> MessagingObjectType:
        return MessagingObjectType.MESSAGE


# Nodes that participate in routing.
MessagingNode = Union[Channel, Intermediary, Endpoint]


@dataclass
class Application:
    """A target application on the message bus."""

    key: str
    name: str
    channels: list[Channel] = field(default_factory=list)
    intermediaries: list[Intermediary] = field(default_factory=list)
    endpoints: list[Endpoint] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    resources: list[TargetResourceTemplate] = field(default_factory=list)


@dataclass
class MessageBus:
    """The message bus and the applications deployed on it."""

    key: str
    name: str
    applications: list[Application] = field(default_factory=list)
    resources: list[TargetResourceTemplate] = field(default_factory=list)

    def all_channels(self) -> list[Channel]:
        """Channels of every application, in application order."""
        return [c for app in self.applications for c in app.channels]

    def all_intermediaries(self) -> list[Intermediary]:
        """Intermediaries of every application, in application order."""
        return [i for app in self.applications for i in app.intermediaries]

    def all_endpoints(self) -> list[Endpoint]:
        """Endpoints of every application, in application order."""
        return [e for app in self.applications for e in app.endpoints]


@dataclass
class MigrationTarget:
    """Root of the target model."""

    message_bus: MessageBus

    def find_channel(self, key: str) -> Channel | None:
        """First channel with this key on the bus."""
        for channel in self.message_bus.all_channels():
            if channel.key == key:
                return channel
        return None
