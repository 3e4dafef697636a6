"""Scenario route walking over the target messaging model.

Conversion generators need the ordered list of messaging objects a message
passes through, starting from the object that activates a scenario. A route
follows output channel keys to the channel, then to whatever is attached to
the channel's other end. Only route-traceable channels are followed.
"""

from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Optional, Sequence, Union

from migrator.core.context import MigrationContext
from migrator.models.target import Channel, Endpoint, Intermediary, Message

logger = logging.getLogger(__name__)


class RouteStep(NamedTuple):
    """One step of a walked route.

    ``input_channel`` is the channel the object was reached through, None
    for the object that starts the route.
    """

    messaging_object: Union[Intermediary, Endpoint]
    input_channel: Optional[Channel]


def output_channel_keys(obj: Union[Channel, Intermediary, Endpoint, Message]) -> list[str]:
    """Output channel keys of a messaging object, in declaration order.

    Raises:
        TypeError: If ``obj`` is not a messaging object variant.
    """
    if isinstance(obj, Intermediary):
        return list(obj.output_channel_keys)
    if isinstance(obj, Endpoint):
        return [obj.output_channel_key] if obj.output_channel_key else []
    if isinstance(obj, (Channel, Message)):
        return []
    raise TypeError(f"Not a messaging object: {type(obj).__name__}")


def find_channel(channels: Iterable[Channel], key: str) -> Channel | None:
    """First channel with the given key."""
    return next((c for c in channels if c.key == key), None)


def find_intermediary_on(
    intermediaries: Iterable[Intermediary],
    channel_key: str,
) -> Intermediary | None:
    """First intermediary that reads from the channel."""
    return next((i for i in intermediaries if channel_key in i.input_channel_keys), None)


def find_endpoint_on(endpoints: Iterable[Endpoint], channel_key: str) -> Endpoint | None:
    """First endpoint that reads from the channel."""
    return next((e for e in endpoints if e.input_channel_key == channel_key), None)


def channel_not_found_message(channel_key: str, scenario: str) -> str:
    return f"Channel {channel_key!r} in scenario {scenario!r}: channel not found in target model"


def nothing_attached_message(channel_key: str, scenario: str) -> str:
    return (
        f"Channel {channel_key!r} in scenario {scenario!r}: "
        f"no messaging object attached to channel"
    )


class ScenarioRouteWalker:
    """Walks scenario routes, reporting dangling references to the context.

    A failed lookup never aborts the walk: the error goes to the pipeline
    error list and the walk carries on with the next sibling channel.
    A channel key is followed at most once per walk, so routes that loop
    back on themselves terminate.
    """

    def __init__(self, context: MigrationContext) -> None:
        if context is None:
            raise ValueError("context is required")
        self.context = context

    def walk_process_manager_route(
        self,
        rule: str,
        scenario: str,
        activating_intermediary: Intermediary,
        intermediaries: Sequence[Intermediary],
        channels: Sequence[Channel],
    ) -> list[RouteStep]:
        """Walk from a process manager through intermediaries only.

        Args:
            rule: Name of the rule walking the route, for tracing.
            scenario: Name of the scenario the route represents.
            activating_intermediary: The intermediary that starts the route.
            intermediaries: Intermediaries that may be on the route.
            channels: Channels that may be on the route.

        Returns:
            The route, starting with ``(activating_intermediary, None)``.

        Raises:
            ValueError: If ``activating_intermediary`` is None.
        """
        if activating_intermediary is None:
            raise ValueError("activating_intermediary is required")

        logger.debug(
            "walking_process_manager_route rule=%s scenario=%s start=%s",
            rule,
            scenario,
            activating_intermediary.name,
        )

        route = [RouteStep(activating_intermediary, None)]
        route.extend(
            self._walk(
                rule,
                scenario,
                activating_intermediary.output_channel_keys,
                intermediaries,
                channels,
                endpoints=None,
                visited=set(),
            )
        )
        return route

    def walk_receive_route(
        self,
        rule: str,
        scenario: str,
        initiating_endpoint: Endpoint,
        intermediaries: Sequence[Intermediary],
        channels: Sequence[Channel],
    ) -> list[RouteStep]:
        """Walk from a receive endpoint through the intermediaries behind it.

        Raises:
            ValueError: If ``initiating_endpoint`` is None.
        """
        if initiating_endpoint is None:
            raise ValueError("initiating_endpoint is required")

        logger.debug(
            "walking_receive_route rule=%s scenario=%s start=%s",
            rule,
            scenario,
            initiating_endpoint.name,
        )

        route = [RouteStep(initiating_endpoint, None)]
        route.extend(
            self._walk(
                rule,
                scenario,
                output_channel_keys(initiating_endpoint),
                intermediaries,
                channels,
                endpoints=None,
                visited=set(),
            )
        )
        return route

    def walk_send_route(
        self,
        rule: str,
        scenario: str,
        activating_intermediary: Intermediary,
        intermediaries: Sequence[Intermediary],
        channels: Sequence[Channel],
        endpoints: Sequence[Endpoint],
    ) -> list[RouteStep]:
        """Walk from an intermediary to the send endpoints it feeds.

        A branch ends at the first endpoint reached.

        Raises:
            ValueError: If ``activating_intermediary`` is None.
        """
        if activating_intermediary is None:
            raise ValueError("activating_intermediary is required")

        logger.debug(
            "walking_send_route rule=%s scenario=%s start=%s",
            rule,
            scenario,
            activating_intermediary.name,
        )

        route = [RouteStep(activating_intermediary, None)]
        route.extend(
            self._walk(
                rule,
                scenario,
                activating_intermediary.output_channel_keys,
                intermediaries,
                channels,
                endpoints=endpoints,
                visited=set(),
            )
        )
        return route

    def _walk(
        self,
        rule: str,
        scenario: str,
        channel_keys: Sequence[str],
        intermediaries: Sequence[Intermediary],
        channels: Sequence[Channel],
        endpoints: Sequence[Endpoint] | None,
        visited: set[str],
    ) -> list[RouteStep]:
        """Follow each channel key depth-first, in order.

        Endpoints are only looked up when ``endpoints`` is given.
        """
        logger.debug("checking_channels rule=%s keys=%s", rule, list(channel_keys))

        steps: list[RouteStep] = []
        for channel_key in channel_keys:
            if channel_key in visited:
                logger.debug("channel_already_walked rule=%s channel=%s", rule, channel_key)
                continue
            visited.add(channel_key)

            channel = find_channel(channels, channel_key)
            if channel is None:
                message = channel_not_found_message(channel_key, scenario)
                logger.error("channel_not_found rule=%s channel=%s", rule, channel_key)
                self.context.add_error(message, origin=rule)
                continue

            if not channel.properties.traceable:
                logger.debug("ignoring_channel rule=%s channel=%s", rule, channel.name)
                continue

            intermediary = find_intermediary_on(intermediaries, channel_key)
            if intermediary is not None:
                logger.debug(
                    "found_intermediary rule=%s intermediary=%s channel=%s",
                    rule,
                    intermediary.name,
                    channel.name,
                )
                steps.append(RouteStep(intermediary, channel))
                steps.extend(
                    self._walk(
                        rule,
                        scenario,
                        intermediary.output_channel_keys,
                        intermediaries,
                        channels,
                        endpoints,
                        visited,
                    )
                )
                continue

            endpoint = find_endpoint_on(endpoints, channel_key) if endpoints is not None else None
            if endpoint is not None:
                logger.debug(
                    "found_endpoint rule=%s endpoint=%s channel=%s",
                    rule,
                    endpoint.name,
                    channel.name,
                )
                steps.append(RouteStep(endpoint, channel))
                continue

            message = nothing_attached_message(channel_key, scenario)
            logger.error("nothing_attached_to_channel rule=%s channel=%s", rule, channel_key)
            self.context.add_error(message, origin=rule)

        return steps
