"""Tests for the resource graph model and the target model types."""

from __future__ import annotations

import pytest

from migrator.config import RESOURCE_TYPES, friendly_name
from migrator.core.context import MigrationContext
from migrator.models.resource import (
    RelationshipEdge,
    ResourceModel,
    ResourceNode,
    add_relationship,
    add_relationship_pair,
    find_all_resources,
    has_relationship,
)
from migrator.models.source import ContextProperty, DocumentSchema, SourceObjectTable, Transform
from migrator.models.target import Channel, Endpoint, Intermediary, MessagingProperties
from migrator.models.types import (
    MessagingObjectType,
    RelationshipType,
    ResourceType,
    Severity,
)


def make_node(key: str, resource_type: ResourceType = ResourceType.MAP) -> ResourceNode:
    """Create a resource node named after its key."""
    return ResourceNode(type=resource_type, key=key, name=key)


class TestRelationshipType:
    """Tests for relationship kind complements."""

    @pytest.mark.parametrize(
        "kind,complement",
        [
            (RelationshipType.REFERENCES_TO, RelationshipType.REFERENCED_BY),
            (RelationshipType.PARENT, RelationshipType.CHILD),
            (RelationshipType.CALLS_TO, RelationshipType.CALLED_BY),
        ],
    )
    def test_complement_pairs(self, kind: RelationshipType, complement: RelationshipType) -> None:
        """Each kind maps to its counterpart and back."""
        assert kind.complement == complement
        assert complement.complement == kind

    def test_every_kind_has_complement(self) -> None:
        """Complement is an involution over the whole enum."""
        for kind in RelationshipType:
            assert kind.complement.complement == kind
            assert kind.complement != kind


class TestRelationships:
    """Tests for edge creation helpers."""

    def test_pair_adds_both_directions(self) -> None:
        """add_relationship_pair writes the edge and its complement."""
        a = make_node("a")
        b = make_node("b")

        add_relationship_pair(a, b, RelationshipType.REFERENCES_TO)

        assert a.relationships == [RelationshipEdge(b.id, RelationshipType.REFERENCES_TO)]
        assert b.relationships == [RelationshipEdge(a.id, RelationshipType.REFERENCED_BY)]

    def test_add_relationship_keeps_duplicates(self) -> None:
        """Plain add appends without deduplication."""
        a = make_node("a")
        edge = RelationshipEdge("x", RelationshipType.CALLS_TO)

        add_relationship(a, edge)
        add_relationship(a, edge)

        assert len(a.relationships) == 2

    def test_has_relationship(self) -> None:
        """Membership check matches on target and kind."""
        a = make_node("a")
        b = make_node("b")
        add_relationship_pair(a, b, RelationshipType.CALLS_TO)

        assert has_relationship(a, b.id, RelationshipType.CALLS_TO)
        assert not has_relationship(a, b.id, RelationshipType.CALLED_BY)
        assert has_relationship(b, a.id, RelationshipType.CALLED_BY)


class TestResourceNode:
    """Tests for node containment and diagnostics."""

    def test_ids_are_unique(self) -> None:
        """Every node gets a fresh id."""
        ids = {make_node(str(i)).id for i in range(50)}
        assert len(ids) == 50

    def test_add_child_sets_parent(self) -> None:
        """Attaching a child records the parent id."""
        parent = make_node("p")
        child = parent.add_child(make_node("c"))

        assert child.parent_id == parent.id
        assert parent.children == [child]

    def test_diagnostics_by_severity(self) -> None:
        """Diagnostics are filtered by severity in insertion order."""
        node = make_node("n")
        node.add_diagnostic(Severity.WARNING, "first")
        node.add_diagnostic(Severity.INFO, "note")
        node.add_diagnostic(Severity.WARNING, "second")

        assert [d.text for d in node.diagnostics_of(Severity.WARNING)] == ["first", "second"]
        assert [d.text for d in node.diagnostics_of(Severity.ERROR)] == []


class TestFindAllResources:
    """Tests for depth-first flattening."""

    def test_preorder_and_child_order(self) -> None:
        """Parents come before children, siblings keep their order."""
        root = make_node("root")
        a = root.add_child(make_node("a"))
        a.add_child(make_node("a1"))
        a.add_child(make_node("a2"))
        root.add_child(make_node("b"))

        keys = [n.key for n in find_all_resources(root)]

        assert keys == ["root", "a", "a1", "a2", "b"]

    def test_multiple_roots(self) -> None:
        """Roots are flattened in order."""
        first = make_node("first")
        first.add_child(make_node("child"))
        second = make_node("second")

        keys = [n.key for n in find_all_resources([first, second])]

        assert keys == ["first", "child", "second"]

    def test_empty(self) -> None:
        """No roots gives an empty list."""
        assert find_all_resources([]) == []


class TestResourceModel:
    """Tests for model lookups and source handles."""

    def test_find_by_id_and_type(self) -> None:
        """Lookups walk the whole tree."""
        root = make_node("schema", ResourceType.DOCUMENT_SCHEMA)
        child = root.add_child(make_node("root", ResourceType.MESSAGE_TYPE))
        model = ResourceModel(roots=[root])

        assert model.find_by_id(child.id) is child
        assert model.find_by_id("missing") is None
        assert model.find_by_type(ResourceType.MESSAGE_TYPE) == [child]
        assert model.index()[root.id] is root

    def test_typed_source_of(self) -> None:
        """A handle resolves only to the expected entity type."""
        sources = SourceObjectTable()
        sources.register("m1", Transform(name="Map", full_name="Ns.Map"))
        node = make_node("map")
        node.source_ref = "m1"
        model = ResourceModel(roots=[node], sources=sources)

        assert model.typed_source_of(node, Transform) is not None
        assert model.typed_source_of(node, DocumentSchema) is None

    def test_missing_handle_resolves_to_none(self) -> None:
        """Unknown or absent handles resolve to None."""
        model = ResourceModel()
        node = make_node("n")

        assert model.source_of(node) is None
        node.source_ref = "nope"
        assert model.source_of(node) is None

    def test_duplicate_handle_rejected(self) -> None:
        """Registering the same handle twice is an error."""
        sources = SourceObjectTable()
        sources.register("h", Transform(name="a", full_name="a"))

        with pytest.raises(ValueError, match="already registered"):
            sources.register("h", Transform(name="b", full_name="b"))

    def test_context_property_full_name(self) -> None:
        """Full name joins namespace and name."""
        assert ContextProperty(name="Id", namespace="Ns.Props").full_name == "Ns.Props.Id"
        assert ContextProperty(name="Id", namespace="").full_name == "Id"


class TestResourceTypeRegistry:
    """Tests for the resource type table."""

    def test_every_type_registered(self) -> None:
        """Each ResourceType has exactly one row."""
        assert set(RESOURCE_TYPES) == set(ResourceType)
        for resource_type, definition in RESOURCE_TYPES.items():
            assert definition.resource_type == resource_type

    def test_friendly_name(self) -> None:
        """Friendly names come from the table."""
        assert friendly_name(ResourceType.DISTRIBUTION_LIST) == "Send Port Group"
        assert friendly_name(ResourceType.SERVICE_DECLARATION) == "Orchestration"


class TestMessagingProperties:
    """Tests for the typed messaging property bag."""

    def test_from_mapping_splits_known_keys(self) -> None:
        """Route label and scenario name become fields, the rest stays extra."""
        props = MessagingProperties.from_mapping(
            {"routeLabel": "route", "scenario": "Orders", "retries": 3}
        )

        assert props.route_label == "route"
        assert props.scenario_name == "Orders"
        assert props.extra == {"retries": 3}
        assert props.traceable

    def test_round_trip_mapping(self) -> None:
        """to_mapping restores the original keys."""
        raw = {"routeLabel": "r", "scenario": "s", "other": "x"}
        assert MessagingProperties.from_mapping(raw).to_mapping() == raw

    def test_untraceable_without_route_label(self) -> None:
        """A channel without a route label is not traceable."""
        assert not MessagingProperties.from_mapping({"scenario": "s"}).traceable


class TestMessagingObjects:
    """Tests for the messaging object variants."""

    def test_variant_types(self) -> None:
        """Each variant reports its own type tag."""
        assert Channel(key="c", name="c").type == MessagingObjectType.CHANNEL
        assert Intermediary(key="i", name="i").type == MessagingObjectType.INTERMEDIARY
        assert Endpoint(key="e", name="e").type == MessagingObjectType.ENDPOINT


class TestMigrationContext:
    """Tests for the pipeline error list."""

    def test_errors_are_append_only_snapshot(self) -> None:
        """The errors property is a snapshot; failed follows the list."""
        context = MigrationContext()
        assert not context.failed

        context.add_error("boom", origin="DP001")
        snapshot = context.errors
        context.add_error("again")

        assert len(snapshot) == 1
        assert len(context) == 2
        assert context.failed
        assert str(snapshot[0]) == "error: boom"
        assert snapshot[0].origin == "DP001"
