"""DP005: links distribution lists (send port groups) to their send ports."""

from __future__ import annotations

import logging

from migrator.analyze.dependency.resolution import (
    link,
    report_missing_source,
    resolve,
)
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.source import DistributionList, SendPort
from migrator.models.types import RelationshipType, ResourceType, Severity

logger = logging.getLogger(__name__)


class DistributionListDependencyRule:
    """Resolves send port group members by send port name.

    Two applications analyzed together may both define a send port with
    the same name; such a member stays unlinked with a warning.
    """

    name = "DP005"

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        """Link every distribution list to its member send ports."""
        resources = model.find_all_resources()
        if not resources:
            logger.debug("skipping_rule rule=%s reason=empty_model", self.name)
            return

        logger.debug("running_rule rule=%s", self.name)

        send_ports: list[tuple[ResourceNode, SendPort]] = []
        for node in resources:
            if node.type == ResourceType.SEND_PORT:
                port = model.typed_source_of(node, SendPort)
                if port is not None:
                    send_ports.append((node, port))

        for list_node in resources:
            if list_node.type != ResourceType.DISTRIBUTION_LIST:
                continue

            distribution_list = model.typed_source_of(list_node, DistributionList)
            if distribution_list is None:
                report_missing_source(list_node, self.name, context)
                continue

            for member in distribution_list.send_ports:
                resolution = resolve(member, send_ports, key=lambda pair: pair[1].name)

                if resolution.status == "unresolved":
                    logger.warning(
                        "distribution_list_send_port_missing rule=%s send_port=%s list=%s",
                        self.name,
                        member,
                        list_node.key,
                    )
                    list_node.add_diagnostic(
                        Severity.WARNING,
                        f"The send port {member!r} in send port group "
                        f"{list_node.name!r} ({list_node.key}) could not be found",
                    )
                elif resolution.status == "ambiguous":
                    logger.warning(
                        "distribution_list_send_port_ambiguous rule=%s send_port=%s list=%s matches=%d",
                        self.name,
                        member,
                        list_node.key,
                        len(resolution.matches),
                    )
                    list_node.add_diagnostic(
                        Severity.WARNING,
                        f"The send port {member!r} in send port group "
                        f"{list_node.name!r} ({list_node.key}) matches "
                        f"{len(resolution.matches)} send ports and has not been linked",
                    )
                else:
                    port_node, _ = resolution.match
                    link(self.name, list_node, port_node, RelationshipType.CALLS_TO)

        logger.debug("rule_completed rule=%s", self.name)
