"""Resource type registry and analysis constants.

This table drives how resources are named in reports. Adding a
new resource kind means adding a ``ResourceType`` member and one row here.
"""

from __future__ import annotations

from migrator.models.types import ResourceType, ResourceTypeDef

# Property keys recognized on messaging objects
ROUTE_LABEL_KEY: str = "routeLabel"
SCENARIO_NAME_KEY: str = "scenario"

# The platform's built-in application, referenced by every application
SYSTEM_APPLICATION_NAME: str = "BizTalk.System"

# Message types in this namespace are platform types, never in the model
SYSTEM_TYPE_PREFIX: str = "System."

# Dependency rules in execution order. Later rules read edges written by
# earlier ones.
DEPENDENCY_RULE_ORDER: tuple[str, ...] = (
    "DP001",
    "DP002",
    "DP003",
    "DP004",
    "DP005",
    "DP006",
)

REPORT_FORMATS: tuple[str, ...] = ("json", "yaml")

RESOURCE_TYPES: dict[ResourceType, ResourceTypeDef] = {
    # -- Schemas --
    ResourceType.DOCUMENT_SCHEMA: ResourceTypeDef(
        resource_type=ResourceType.DOCUMENT_SCHEMA,
        friendly_name="Document Schema",
    ),
    ResourceType.MESSAGE_TYPE: ResourceTypeDef(
        resource_type=ResourceType.MESSAGE_TYPE,
        friendly_name="Message Type",
    ),
    ResourceType.PROPERTY_SCHEMA: ResourceTypeDef(
        resource_type=ResourceType.PROPERTY_SCHEMA,
        friendly_name="Property Schema",
    ),
    ResourceType.CONTEXT_PROPERTY: ResourceTypeDef(
        resource_type=ResourceType.CONTEXT_PROPERTY,
        friendly_name="Context Property",
    ),
    # -- Maps --
    ResourceType.MAP: ResourceTypeDef(
        resource_type=ResourceType.MAP,
        friendly_name="Map",
    ),
    # -- Orchestrations --
    ResourceType.SERVICE_DECLARATION: ResourceTypeDef(
        resource_type=ResourceType.SERVICE_DECLARATION,
        friendly_name="Orchestration",
    ),
    ResourceType.MESSAGE_DECLARATION: ResourceTypeDef(
        resource_type=ResourceType.MESSAGE_DECLARATION,
        friendly_name="Message Declaration",
    ),
    # -- Bindings --
    ResourceType.RECEIVE_PORT: ResourceTypeDef(
        resource_type=ResourceType.RECEIVE_PORT,
        friendly_name="Receive Port",
    ),
    ResourceType.SEND_PORT: ResourceTypeDef(
        resource_type=ResourceType.SEND_PORT,
        friendly_name="Send Port",
    ),
    ResourceType.DISTRIBUTION_LIST: ResourceTypeDef(
        resource_type=ResourceType.DISTRIBUTION_LIST,
        friendly_name="Send Port Group",
    ),
    # -- Applications --
    ResourceType.APPLICATION_DEFINITION: ResourceTypeDef(
        resource_type=ResourceType.APPLICATION_DEFINITION,
        friendly_name="Application Definition",
    ),
}


def friendly_name(resource_type: ResourceType) -> str:
    """Display name of a resource kind."""
    return RESOURCE_TYPES[resource_type].friendly_name
