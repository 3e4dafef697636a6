"""Scenario decoding of the target model for reporting.

Every application on the message bus is decoded into the scenarios it
activates. A scenario is a tree of stages rooted at its activator; each
stage is a messaging object reached from its parent through a traceable
channel. Conversion ratings and resource templates are rolled up per
application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from migrator.convert.walker import (
    channel_not_found_message,
    find_channel,
    nothing_attached_message,
    output_channel_keys,
)
from migrator.core.context import MigrationContext
from migrator.models.target import (
    Application,
    Channel,
    Endpoint,
    Intermediary,
    MigrationTarget,
    TargetResourceTemplate,
)
from migrator.models.types import MessageExchangePattern

logger = logging.getLogger(__name__)

# Origin recorded on errors raised while decoding
DECODER_ORIGIN = "scenario-decoder"


@dataclass
class ScenarioStage:
    """A node in a scenario tree.

    A revisit stage marks a join or loop-back to an object already placed
    in the scenario; it is a leaf and is never expanded.
    """

    name: str
    stage_type: str
    messaging_object: Intermediary | Endpoint
    input_channel: Channel | None = None
    following_stages: list[ScenarioStage] = field(default_factory=list)
    revisit: bool = False

    @classmethod
    def for_object(
        cls,
        messaging_object: Intermediary | Endpoint,
        input_channel: Channel | None = None,
        revisit: bool = False,
    ) -> ScenarioStage:
        return cls(
            name=messaging_object.name,
            stage_type=type(messaging_object).__name__,
            messaging_object=messaging_object,
            input_channel=input_channel,
            revisit=revisit,
        )

    def walk(self) -> list[ScenarioStage]:
        """This stage and every stage below it, depth-first."""
        stages = [self]
        for stage in self.following_stages:
            stages.extend(stage.walk())
        return stages


@dataclass
class TargetScenario:
    """One end-to-end message flow, rooted at its activator."""

    name: str
    activator: ScenarioStage


@dataclass
class TargetApplication:
    """A decoded application with its scenarios and rollups."""

    application: Application
    scenarios: list[TargetScenario] = field(default_factory=list)
    average_conversion_rating: float = 0.0
    resources: list[TargetResourceTemplate] = field(default_factory=list)


class TargetScenarioModeller:
    """Decodes the target model into per-application scenario trees.

    Dangling channel references are reported to the context and the branch
    is dropped; decoding always completes.
    """

    def __init__(self, context: MigrationContext) -> None:
        if context is None:
            raise ValueError("context is required")
        self.context = context

    def decode(self, target: MigrationTarget) -> list[TargetApplication]:
        """Decode every application on the message bus.

        Args:
            target: The target model after conversion.

        Returns:
            One TargetApplication per bus application, in bus order.

        Raises:
            ValueError: If target is None.
        """
        if target is None:
            raise ValueError("target is required")

        applications: list[TargetApplication] = []
        for application in target.message_bus.applications:
            decoded = TargetApplication(application=application)
            decoded.scenarios = self._decode_scenarios(application, target)
            decoded.average_conversion_rating = rollup_conversion_rating(application)
            decoded.resources = rollup_resources(application)
            logger.debug(
                "application_decoded application=%s scenarios=%d",
                application.name,
                len(decoded.scenarios),
            )
            applications.append(decoded)

        return applications

    def _decode_scenarios(
        self,
        application: Application,
        target: MigrationTarget,
    ) -> list[TargetScenario]:
        scenarios = [
            TargetScenario(name=name, activator=ScenarioStage.for_object(obj))
            for name, obj in find_activators(application)
        ]

        for scenario in scenarios:
            visited = {scenario.activator.messaging_object.key}
            self._expand(scenario.name, scenario.activator, target, visited)

        return scenarios

    def _expand(
        self,
        scenario: str,
        stage: ScenarioStage,
        target: MigrationTarget,
        visited: set[str],
    ) -> None:
        """Attach the stages that follow ``stage``, then expand each of them."""
        channels = target.message_bus.all_channels()

        for channel_key in output_channel_keys(stage.messaging_object):
            if channel_key in visited:
                self._mark_revisit(scenario, stage, target, channel_key)
                continue
            visited.add(channel_key)

            channel = find_channel(channels, channel_key)
            if channel is None:
                logger.error("channel_not_found scenario=%s channel=%s", scenario, channel_key)
                self.context.add_error(
                    channel_not_found_message(channel_key, scenario),
                    origin=DECODER_ORIGIN,
                )
                continue

            if not channel.properties.traceable:
                logger.debug("ignoring_channel scenario=%s channel=%s", scenario, channel.name)
                continue

            next_object = find_next_object(target, channel_key)
            if next_object is None:
                logger.error("nothing_attached_to_channel scenario=%s channel=%s", scenario, channel_key)
                self.context.add_error(
                    nothing_attached_message(channel_key, scenario),
                    origin=DECODER_ORIGIN,
                )
                continue

            if next_object.key in visited:
                logger.debug("stage_already_visited scenario=%s key=%s", scenario, next_object.key)
                stage.following_stages.append(ScenarioStage.for_object(next_object, channel, revisit=True))
                continue
            visited.add(next_object.key)

            stage.following_stages.append(ScenarioStage.for_object(next_object, channel))

        for following in stage.following_stages:
            if not following.revisit:
                self._expand(scenario, following, target, visited)

    def _mark_revisit(
        self,
        scenario: str,
        stage: ScenarioStage,
        target: MigrationTarget,
        channel_key: str,
    ) -> None:
        """Attach a leaf for a channel already followed, if it leads anywhere.

        Errors for the channel were reported when it was first followed.
        """
        channel = find_channel(target.message_bus.all_channels(), channel_key)
        if channel is None or not channel.properties.traceable:
            return
        next_object = find_next_object(target, channel_key)
        if next_object is None:
            return
        logger.debug("stage_already_visited scenario=%s key=%s", scenario, next_object.key)
        stage.following_stages.append(ScenarioStage.for_object(next_object, channel, revisit=True))


def find_activators(application: Application) -> list[tuple[str, Intermediary | Endpoint]]:
    """Scenario names and activating objects of an application.

    Endpoints activate a scenario when flagged as activators or when they
    are request-reply, and only when they carry a scenario name. An
    endpoint matching both produces one scenario. Activating intermediaries
    without a scenario name are named after themselves.
    """
    activators: list[tuple[str, Intermediary | Endpoint]] = []
    seen: set[str] = set()

    for endpoint in application.endpoints:
        scenario_name = endpoint.properties.scenario_name
        if endpoint.activator and scenario_name is not None:
            activators.append((scenario_name, endpoint))
            seen.add(endpoint.key)

    for endpoint in application.endpoints:
        scenario_name = endpoint.properties.scenario_name
        if (
            endpoint.exchange_pattern == MessageExchangePattern.REQUEST_REPLY
            and scenario_name is not None
            and endpoint.key not in seen
        ):
            activators.append((scenario_name, endpoint))
            seen.add(endpoint.key)

    for intermediary in application.intermediaries:
        if intermediary.activator:
            activators.append((intermediary.properties.scenario_name or intermediary.name, intermediary))

    return activators


def find_next_object(target: MigrationTarget, channel_key: str) -> Intermediary | Endpoint | None:
    """The messaging object reading from a channel, across all applications.

    Non-activating intermediaries are preferred over endpoints.
    """
    bus = target.message_bus
    for intermediary in bus.all_intermediaries():
        if channel_key in intermediary.input_channel_keys and not intermediary.activator:
            return intermediary
    for endpoint in bus.all_endpoints():
        if endpoint.input_channel_key == channel_key:
            return endpoint
    return None


def rollup_conversion_rating(application: Application) -> float:
    """Average rating of the rated objects as a percentage (rating 5 = 100)."""
    rated = [
        int(obj.rating)
        for obj in (
            *application.channels,
            *application.intermediaries,
            *application.endpoints,
            *application.messages,
        )
        if int(obj.rating) > 0
    ]
    if not rated:
        return 0.0
    return 20.0 * sum(rated) / len(rated)


def rollup_resources(application: Application) -> list[TargetResourceTemplate]:
    """Application resources followed by those of its messaging objects."""
    resources = list(application.resources)
    for group in (
        application.channels,
        application.endpoints,
        application.intermediaries,
        application.messages,
    ):
        for obj in group:
            resources.extend(obj.resources)
    return resources
