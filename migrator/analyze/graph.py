"""Resource dependency graph projection and querying.

Projects the relationship edges written by the dependency rules onto a
networkx multigraph, supporting neighborhood queries, upstream/downstream
reachability and verification of the edge-pair invariant.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import networkx as nx

from migrator.core.errors import ReportWriteError
from migrator.models.resource import ResourceModel
from migrator.models.types import RelationshipType

# Edge kinds that point from a dependent resource to what it depends on
DEPENDENCY_KINDS: frozenset[RelationshipType] = frozenset(
    {RelationshipType.REFERENCES_TO, RelationshipType.CALLS_TO}
)


@dataclass(frozen=True)
class SymmetryViolation:
    """An edge whose complement is missing (or present a different number of times)."""

    source_id: str
    target_id: str
    kind: RelationshipType
    count: int
    complement_count: int


class ResourceGraph:
    """Directed multigraph over resource ids, one edge per relationship.

    Node attributes: ``type``, ``key``, ``name``. Edge attribute: ``kind``.
    """

    def __init__(self) -> None:
        """Initialize an empty resource graph."""
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()

    @classmethod
    def from_model(cls, model: ResourceModel) -> ResourceGraph:
        """Build a graph from every node and edge in a model."""
        graph = cls()
        graph.build_from_model(model)
        return graph

    def build_from_model(self, model: ResourceModel) -> None:
        """Rebuild the graph from a model.

        Edge targets that are not in the model are still added as bare
        nodes so that dangling edges stay visible to ``verify_symmetry``.

        Args:
            model: Analyzed resource model.
        """
        self._graph.clear()

        resources = model.find_all_resources()
        for node in resources:
            self._graph.add_node(
                node.id,
                type=node.type.value,
                key=node.key,
                name=node.name,
            )

        for node in resources:
            for edge in node.relationships:
                self._graph.add_edge(node.id, edge.target_id, kind=edge.kind)

    def get_neighborhood(
        self,
        resource_ids: list[str],
        depth: int = 1,
    ) -> dict[str, dict[str, Any]]:
        """Return related resources within N hops, grouped by edge kind.

        Args:
            resource_ids: Ids of the resources to inspect.
            depth: Number of hops to traverse (default 1).

        Returns:
            Dictionary mapping resource ids to their neighborhoods.
        """
        result: dict[str, dict[str, Any]] = {}

        for resource_id in resource_ids:
            if resource_id not in self._graph:
                continue

            by_kind: dict[str, list[str]] = {}
            for _, target, data in self._graph.out_edges(resource_id, data=True):
                by_kind.setdefault(data["kind"].value, []).append(target)

            result[resource_id] = {"relationships": by_kind}

            if depth > 1:
                lengths = nx.single_source_shortest_path_length(
                    self._graph, resource_id, cutoff=depth
                )
                direct = set(self._graph.successors(resource_id))
                result[resource_id]["extended_neighbors"] = sorted(
                    set(lengths) - {resource_id} - direct
                )

        return result

    def downstream_dependencies(self, resource_id: str) -> set[str]:
        """All resources this resource depends on, transitively.

        Only ReferencesTo and CallsTo edges are followed.
        """
        if resource_id not in self._graph:
            return set()
        descendants: set[str] = nx.descendants(self._dependency_view(), resource_id)
        return descendants

    def blast_radius(self, resource_id: str) -> set[str]:
        """All resources that depend on this resource, transitively.

        If this resource is changed or removed, these resources are affected.
        """
        if resource_id not in self._graph:
            return set()
        ancestors: set[str] = nx.ancestors(self._dependency_view(), resource_id)
        return ancestors

    def _dependency_view(self) -> nx.DiGraph:
        view = nx.DiGraph()
        view.add_nodes_from(self._graph.nodes)
        for source, target, data in self._graph.edges(data=True):
            if data["kind"] in DEPENDENCY_KINDS:
                view.add_edge(source, target)
        return view

    def verify_symmetry(self) -> list[SymmetryViolation]:
        """Check that every edge is matched by its complement.

        Edges are counted with multiplicity: ``k`` copies of A -kind-> B
        require exactly ``k`` copies of B -complement-> A.

        Returns:
            One violation per unmatched (source, target, kind), empty if the
            graph is symmetric.
        """
        counts: Counter[tuple[str, str, RelationshipType]] = Counter(
            (source, target, data["kind"])
            for source, target, data in self._graph.edges(data=True)
        )

        violations: list[SymmetryViolation] = []
        for (source, target, kind), count in counts.items():
            complement_count = counts.get((target, source, kind.complement), 0)
            if complement_count != count:
                violations.append(
                    SymmetryViolation(
                        source_id=source,
                        target_id=target,
                        kind=kind,
                        count=count,
                        complement_count=complement_count,
                    )
                )
        return violations

    def save(self, path: str) -> None:
        """Save the graph to a JSON file.

        Args:
            path: Path to the output JSON file.

        Raises:
            ReportWriteError: If the file cannot be written.
        """
        data = {
            "nodes": {
                node_id: dict(attrs) for node_id, attrs in self._graph.nodes(data=True)
            },
            "edges": [
                {"source": source, "target": target, "kind": attrs["kind"].value}
                for source, target, attrs in self._graph.edges(data=True)
            ],
        }
        output_path = Path(path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise ReportWriteError(output_path, e.strerror or str(e)) from e

    @property
    def node_count(self) -> int:
        """Return the number of resource nodes."""
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        """Return the number of relationship edges."""
        return self._graph.number_of_edges()

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._graph
