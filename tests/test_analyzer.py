"""Tests for the rule runner and the resource graph projection."""

from __future__ import annotations

import json
import random
import threading
from pathlib import Path

import pytest

from migrator.analyze.analyzer import RULE_TYPES, DependencyRulesAnalyzer, default_rules
from migrator.analyze.graph import ResourceGraph
from migrator.config import DEPENDENCY_RULE_ORDER
from migrator.core.context import MigrationContext
from migrator.core.errors import AnalysisCancelledError, ReportWriteError
from migrator.models.resource import (
    RelationshipEdge,
    ResourceModel,
    ResourceNode,
    add_relationship,
    add_relationship_pair,
)
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
    Transform,
)
from migrator.models.types import RelationshipType, ResourceType

NAMES = ["A", "B", "C"]


class RecordingRule:
    """Rule double that records its calls and can trigger cancellation."""

    def __init__(self, name: str, calls: list[str], on_run: threading.Event | None = None) -> None:
        self.name = name
        self.calls = calls
        self.on_run = on_run

    def analyze(self, model: ResourceModel, context: MigrationContext) -> None:
        self.calls.append(self.name)
        if self.on_run is not None:
            self.on_run.set()


def add_node(
    model: ResourceModel,
    rng: random.Random,
    resource_type: ResourceType,
    key: str,
    entity: SourceObject,
    parent: ResourceNode | None = None,
) -> ResourceNode:
    """Add a node; one in ten loses its entity."""
    node = ResourceNode(type=resource_type, key=key, name=key)
    if rng.random() > 0.1:
        node.source_ref = model.sources.register(f"h-{node.id}", entity)
    if parent is not None:
        parent.add_child(node)
    else:
        model.roots.append(node)
    return node


def make_random_model(seed: int) -> ResourceModel:
    """Build a model with random, often ambiguous or dangling, references."""
    rng = random.Random(seed)
    model = ResourceModel()

    def some(pool: list[str]) -> list[str]:
        return rng.sample(pool, rng.randint(0, len(pool)))

    schema_names = [f"Ns.S{n}" for n in NAMES]
    map_names = [f"Ns.M{n}" for n in NAMES]
    port_names = [f"P{n}" for n in NAMES]
    field_names = [f"Ns.Props.{n}" for n in NAMES]

    for i in range(rng.randint(1, 4)):
        props = add_node(model, rng, ResourceType.PROPERTY_SCHEMA, f"props{i}", PropertySchema(f"props{i}", "Ns.Props"))
        for name in some(NAMES):
            add_node(model, rng, ResourceType.CONTEXT_PROPERTY, f"props{i}:{name}", ContextProperty(name, "Ns.Props"), props)

    for i in range(rng.randint(1, 5)):
        full_name = rng.choice(schema_names)
        schema = add_node(
            model,
            rng,
            ResourceType.DOCUMENT_SCHEMA,
            f"schema{i}",
            DocumentSchema(
                name=full_name,
                full_name=full_name,
                promoted_properties=[PromotedProperty(p) for p in some(field_names)],
            ),
        )
        add_node(model, rng, ResourceType.MESSAGE_TYPE, f"schema{i}:root", MessageDefinition(full_name, full_name), schema)

    for i in range(rng.randint(0, 4)):
        add_node(
            model,
            rng,
            ResourceType.MAP,
            f"map{i}",
            Transform(
                name=f"map{i}",
                full_name=rng.choice(map_names),
                source_schema_type_names=some(schema_names),
                target_schema_type_names=some(schema_names),
            ),
        )

    for i in range(rng.randint(0, 3)):
        add_node(model, rng, ResourceType.RECEIVE_PORT, f"rp{i}", ReceivePort(f"rp{i}", some(map_names), some(map_names)))
        add_node(model, rng, ResourceType.SEND_PORT, f"sp{i}", SendPort(rng.choice(port_names), some(map_names), some(map_names)))

    for i in range(rng.randint(0, 2)):
        add_node(model, rng, ResourceType.DISTRIBUTION_LIST, f"dl{i}", DistributionList(f"dl{i}", some(port_names)))

    for i in range(rng.randint(0, 3)):
        orch = add_node(
            model,
            rng,
            ResourceType.SERVICE_DECLARATION,
            f"orch{i}",
            Orchestration(f"orch{i}", f"Ns.Orch{i}", some(map_names)),
        )
        for j in range(rng.randint(0, 3)):
            type_name = rng.choice(schema_names + ["System.String"])
            add_node(model, rng, ResourceType.MESSAGE_DECLARATION, f"orch{i}:m{j}", MessageDeclaration(f"m{j}", type_name), orch)

    for i in range(rng.randint(1, 4)):
        add_node(
            model,
            rng,
            ResourceType.APPLICATION_DEFINITION,
            f"app{i}",
            ApplicationDefinition(rng.choice(NAMES), some(NAMES + ["BizTalk.System"])),
        )

    return model


class TestDependencyRulesAnalyzer:
    """Tests for rule ordering and cancellation."""

    def test_default_rule_order(self) -> None:
        """Default rules run DP001 through DP006."""
        assert [rule.name for rule in default_rules()] == ["DP001", "DP002", "DP003", "DP004", "DP005", "DP006"]

    def test_default_rules_follow_configured_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """default_rules reads its order from the configuration table."""
        monkeypatch.setattr("migrator.analyze.analyzer.DEPENDENCY_RULE_ORDER", ("DP006", "DP001"))

        assert [rule.name for rule in default_rules()] == ["DP006", "DP001"]

    def test_every_configured_rule_is_registered(self) -> None:
        """Each name in the rule order maps to a rule class."""
        assert set(DEPENDENCY_RULE_ORDER) == set(RULE_TYPES)

    def test_runs_rules_in_order(self) -> None:
        """Every rule runs once, in the configured order."""
        calls: list[str] = []
        rules = [RecordingRule(name, calls) for name in ("first", "second", "third")]

        completed = DependencyRulesAnalyzer(rules).analyze(ResourceModel(), MigrationContext())

        assert calls == ["first", "second", "third"]
        assert completed == calls

    def test_cancel_before_start(self) -> None:
        """A set event stops the run before the first rule."""
        event = threading.Event()
        event.set()
        calls: list[str] = []
        analyzer = DependencyRulesAnalyzer([RecordingRule("first", calls)], cancel_event=event)

        with pytest.raises(AnalysisCancelledError) as exc_info:
            analyzer.analyze(ResourceModel(), MigrationContext())

        assert calls == []
        assert exc_info.value.rule_name == "first"
        assert exc_info.value.completed == []

    def test_cancel_between_rules(self) -> None:
        """Cancellation is observed at the next rule boundary."""
        event = threading.Event()
        calls: list[str] = []
        rules = [
            RecordingRule("first", calls, on_run=event),
            RecordingRule("second", calls),
        ]

        with pytest.raises(AnalysisCancelledError) as exc_info:
            DependencyRulesAnalyzer(rules, cancel_event=event).analyze(ResourceModel(), MigrationContext())

        assert calls == ["first"]
        assert exc_info.value.rule_name == "second"
        assert exc_info.value.completed == ["first"]

    def test_requires_model(self) -> None:
        """A missing model is a precondition violation."""
        with pytest.raises(ValueError):
            DependencyRulesAnalyzer().analyze(None, MigrationContext())  # type: ignore[arg-type]


class TestSymmetry:
    """Edge-pair invariant over generated models."""

    @pytest.mark.parametrize("seed", range(25))
    def test_rules_keep_graph_symmetric(self, seed: int) -> None:
        """After all rules, every edge has its complement the same number of times."""
        model = make_random_model(seed)

        DependencyRulesAnalyzer().analyze(model, MigrationContext())

        assert ResourceGraph.from_model(model).verify_symmetry() == []

    @pytest.mark.parametrize("seed", range(10))
    def test_every_child_connected(self, seed: int) -> None:
        """Parent/Child closure covers every declared child."""
        model = make_random_model(seed)

        DependencyRulesAnalyzer().analyze(model, MigrationContext())

        for node in model.find_all_resources():
            for child in node.children:
                assert RelationshipEdge(child.id, RelationshipType.CHILD) in node.relationships
                assert RelationshipEdge(node.id, RelationshipType.PARENT) in child.relationships

    def test_detects_one_sided_edge(self) -> None:
        """A hand-written single edge is reported."""
        a = ResourceNode(type=ResourceType.MAP, key="a", name="a")
        b = ResourceNode(type=ResourceType.MAP, key="b", name="b")
        add_relationship(a, RelationshipEdge(b.id, RelationshipType.CALLS_TO))

        violations = ResourceGraph.from_model(ResourceModel(roots=[a, b])).verify_symmetry()

        assert len(violations) == 1
        assert violations[0].source_id == a.id
        assert violations[0].complement_count == 0


def make_chain() -> tuple[ResourceModel, list[ResourceNode]]:
    """port -> map -> schema, linked with ReferencesTo pairs."""
    port = ResourceNode(type=ResourceType.SEND_PORT, key="port", name="port")
    transform = ResourceNode(type=ResourceType.MAP, key="map", name="map")
    schema = ResourceNode(type=ResourceType.DOCUMENT_SCHEMA, key="schema", name="schema")
    add_relationship_pair(port, transform, RelationshipType.REFERENCES_TO)
    add_relationship_pair(transform, schema, RelationshipType.REFERENCES_TO)
    return ResourceModel(roots=[port, transform, schema]), [port, transform, schema]


class TestResourceGraph:
    """Tests for graph queries and export."""

    def test_counts(self) -> None:
        """Nodes and both edge directions are projected."""
        model, _ = make_chain()
        graph = ResourceGraph.from_model(model)

        assert graph.node_count == 3
        assert graph.edge_count == 4

    def test_downstream_and_blast_radius(self) -> None:
        """Dependencies follow ReferencesTo edges only."""
        model, (port, transform, schema) = make_chain()
        graph = ResourceGraph.from_model(model)

        assert graph.downstream_dependencies(port.id) == {transform.id, schema.id}
        assert graph.blast_radius(schema.id) == {port.id, transform.id}
        assert graph.downstream_dependencies(schema.id) == set()
        assert graph.blast_radius("unknown") == set()

    def test_neighborhood(self) -> None:
        """Neighborhood groups direct edges by kind."""
        model, (port, transform, schema) = make_chain()
        graph = ResourceGraph.from_model(model)

        result = graph.get_neighborhood([transform.id, "unknown"], depth=2)

        assert list(result) == [transform.id]
        relationships = result[transform.id]["relationships"]
        assert relationships["ReferencesTo"] == [schema.id]
        assert relationships["ReferencedBy"] == [port.id]

    def test_save(self, tmp_path: Path) -> None:
        """Saved JSON holds nodes and kind-tagged edges."""
        model, (port, _, _) = make_chain()
        path = tmp_path / "out" / "graph.json"

        ResourceGraph.from_model(model).save(str(path))

        data = json.loads(path.read_text())
        assert data["nodes"][port.id]["key"] == "port"
        assert {e["kind"] for e in data["edges"]} == {"ReferencesTo", "ReferencedBy"}

    def test_save_failure(self, tmp_path: Path) -> None:
        """A path that cannot be written raises ReportWriteError."""
        model, _ = make_chain()

        with pytest.raises(ReportWriteError) as exc_info:
            ResourceGraph.from_model(model).save(str(tmp_path))
        assert exc_info.value.path == str(tmp_path)
