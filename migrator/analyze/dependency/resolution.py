"""Name resolution policy shared by every dependency rule.

A reference resolves to exactly one candidate or not at all:

- zero matches -> unresolved, warning on the referencing node
- one match    -> resolved, the rule creates the edge pair
- many matches -> ambiguous, warning on the referencing node, no edge

A referencing node without its parsed entity is a model-integrity error,
reported on the node and on the pipeline error list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Literal, TypeVar

from migrator.config import friendly_name
from migrator.core.context import MigrationContext
from migrator.models.resource import ResourceNode, add_relationship_pair
from migrator.models.types import RelationshipType, Severity

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Resolution(Generic[T]):
    """Outcome of resolving one named reference against a candidate set."""

    reference: str
    matches: list[T]

    @property
    def status(self) -> Literal["resolved", "unresolved", "ambiguous"]:
        if not self.matches:
            return "unresolved"
        if len(self.matches) > 1:
            return "ambiguous"
        return "resolved"

    @property
    def resolved(self) -> bool:
        """True if exactly one candidate matched."""
        return len(self.matches) == 1

    @property
    def match(self) -> T:
        """The single matching candidate.

        Raises:
            LookupError: If the reference is unresolved or ambiguous.
        """
        if not self.resolved:
            raise LookupError(f"Reference {self.reference!r} is {self.status}")
        return self.matches[0]


def resolve(
    reference: str,
    candidates: Iterable[T],
    key: Callable[[T], str],
) -> Resolution[T]:
    """Match a reference against candidates by exact key equality."""
    return Resolution(
        reference=reference,
        matches=[c for c in candidates if key(c) == reference],
    )


def report_missing_source(
    node: ResourceNode,
    rule_name: str,
    context: MigrationContext,
) -> None:
    """Record a model-integrity failure for a node without its parsed entity."""
    message = (
        f"Unable to find the source object for {friendly_name(node.type)} "
        f"{node.name!r} with key {node.key!r}"
    )
    logger.error(
        "missing_source_object rule=%s type=%s key=%s",
        rule_name,
        node.type.value,
        node.key,
    )
    node.add_diagnostic(Severity.ERROR, message)
    context.add_error(message, origin=rule_name)


def report_unresolved(node: ResourceNode, rule_name: str, message: str) -> None:
    """Attach an unresolved-reference warning to the referencing node."""
    logger.debug("reference_not_resolved rule=%s key=%s", rule_name, node.key)
    node.add_diagnostic(Severity.WARNING, message)


def report_ambiguous(
    node: ResourceNode,
    rule_name: str,
    reference: str,
    count: int,
    what: str,
) -> None:
    """Attach an ambiguity warning to the referencing node."""
    logger.debug(
        "reference_ambiguous rule=%s key=%s reference=%s matches=%d",
        rule_name,
        node.key,
        reference,
        count,
    )
    node.add_diagnostic(
        Severity.WARNING,
        f"The {what} {reference!r} referenced by {node.key!r} matches {count} "
        f"resources and has not been linked",
    )


def link(
    rule_name: str,
    source: ResourceNode,
    target: ResourceNode,
    kind: RelationshipType,
) -> None:
    """Create an edge pair and trace it."""
    add_relationship_pair(source, target, kind)
    logger.debug(
        "relationship_created rule=%s source=%s target=%s kind=%s",
        rule_name,
        source.key,
        target.key,
        kind.value,
    )
