"""Resource graph model shared by all dependency rules.

ResourceNode trees come from the parse stage. Dependency rules add
relationship edges and diagnostics to the nodes; nothing is ever removed.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Iterable, TypeVar

from migrator.models.source import SourceObject, SourceObjectTable
from migrator.models.types import RelationshipType, ResourceType, Severity

T = TypeVar("T")


def make_resource_id() -> str:
    """Generate a fresh resource id. Ids are never reused."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RelationshipEdge:
    """A directed edge from the owning node to ``target_id``.

    Frozen so edges can be compared and counted.
    """

    target_id: str
    kind: RelationshipType


@dataclass(frozen=True)
class Diagnostic:
    """A report message attached to a resource node."""

    severity: Severity
    text: str


@dataclass
class ResourceNode:
    """An analyzable artifact in the source model."""

    type: ResourceType
    key: str
    name: str
    id: str = field(default_factory=make_resource_id)
    source_ref: str | None = None  # handle into SourceObjectTable, not owned
    parent_id: str | None = None
    children: list[ResourceNode] = field(default_factory=list)
    relationships: list[RelationshipEdge] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add_child(self, child: ResourceNode) -> ResourceNode:
        """Append a nested node and record this node as its parent."""
        child.parent_id = self.id
        self.children.append(child)
        return child

    def add_diagnostic(self, severity: Severity, text: str) -> None:
        """Append a diagnostic message."""
        self.diagnostics.append(Diagnostic(severity=severity, text=text))

    def diagnostics_of(self, severity: Severity) -> list[Diagnostic]:
        """Diagnostics with the given severity, in insertion order."""
        return [d for d in self.diagnostics if d.severity == severity]


def add_relationship(node: ResourceNode, edge: RelationshipEdge) -> None:
    """Append an edge to a node. No deduplication."""
    node.relationships.append(edge)


def has_relationship(node: ResourceNode, target_id: str, kind: RelationshipType) -> bool:
    """True if the node already carries an edge of ``kind`` to ``target_id``."""
    return RelationshipEdge(target_id=target_id, kind=kind) in node.relationships


def add_relationship_pair(
    source: ResourceNode,
    target: ResourceNode,
    kind: RelationshipType,
) -> None:
    """Add ``kind`` from source to target and its complement back.

    This is the only way rules create edges, so the graph never holds a
    single-direction edge.
    """
    add_relationship(source, RelationshipEdge(target_id=target.id, kind=kind))
    add_relationship(target, RelationshipEdge(target_id=source.id, kind=kind.complement))


def find_all_resources(roots: ResourceNode | Iterable[ResourceNode]) -> list[ResourceNode]:
    """Flatten resource trees depth-first (pre-order), preserving child order.

    Args:
        roots: A single root node or an iterable of roots.

    Returns:
        Every node reachable through ``children``, roots included.
    """
    if isinstance(roots, ResourceNode):
        roots = [roots]

    result: list[ResourceNode] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        result.append(node)
        stack.extend(reversed(node.children))
    return result


class ResourceModel:
    """The analyzed source model: resource trees plus their parsed entities.

    Holds the root nodes and the ``SourceObjectTable`` the nodes' handles
    point into.
    """

    def __init__(
        self,
        roots: list[ResourceNode] | None = None,
        sources: SourceObjectTable | None = None,
    ) -> None:
        self.roots: list[ResourceNode] = roots if roots is not None else []
        self.sources: SourceObjectTable = sources if sources is not None else SourceObjectTable()

    def find_all_resources(self) -> list[ResourceNode]:
        """All nodes in the model, depth-first."""
        return find_all_resources(self.roots)

    def find_by_type(self, resource_type: ResourceType) -> list[ResourceNode]:
        """All nodes of one type, depth-first."""
        return [r for r in self.find_all_resources() if r.type == resource_type]

    def find_by_id(self, resource_id: str) -> ResourceNode | None:
        """Node with the given id, or None."""
        for node in self.find_all_resources():
            if node.id == resource_id:
                return node
        return None

    def index(self) -> dict[str, ResourceNode]:
        """Map of id to node for every node in the model."""
        return {node.id: node for node in self.find_all_resources()}

    def source_of(self, node: ResourceNode) -> SourceObject | None:
        """Parsed entity behind a node, or None if the handle is missing."""
        return self.sources.resolve(node.source_ref)

    def typed_source_of(self, node: ResourceNode, expected: type[T]) -> T | None:
        """Parsed entity behind a node if it has the expected type, else None."""
        obj = self.sources.resolve(node.source_ref)
        if isinstance(obj, expected):
            return obj
        return None
