"""Analyze stage runner: applies the dependency rules in their fixed order."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from migrator.analyze.dependency import (
    ApplicationDependencyRule,
    DependencyRule,
    DistributionListDependencyRule,
    OrchestrationDependencyRule,
    ParentChildDependencyRule,
    SchemaDependencyRule,
    TransformDependencyRule,
)
from migrator.config import DEPENDENCY_RULE_ORDER
from migrator.core.context import MigrationContext
from migrator.core.errors import AnalysisCancelledError
from migrator.models.resource import ResourceModel

logger = logging.getLogger(__name__)

# Rule classes by rule name
RULE_TYPES: dict[str, type] = {
    rule.name: rule
    for rule in (
        SchemaDependencyRule,
        TransformDependencyRule,
        OrchestrationDependencyRule,
        ApplicationDependencyRule,
        DistributionListDependencyRule,
        ParentChildDependencyRule,
    )
}


def default_rules() -> list[DependencyRule]:
    """The six dependency rules in execution order."""
    return [RULE_TYPES[name]() for name in DEPENDENCY_RULE_ORDER]


class DependencyRulesAnalyzer:
    """Runs dependency rules strictly in order over one resource model.

    Later rules read edges written by earlier ones, so the order is fixed.
    Cancellation is checked between rules only; a rule that has started
    always completes.
    """

    def __init__(
        self,
        rules: Sequence[DependencyRule] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.rules: list[DependencyRule] = list(rules) if rules is not None else default_rules()
        self.cancel_event = cancel_event

    def analyze(self, model: ResourceModel, context: MigrationContext) -> list[str]:
        """Apply every rule to the model.

        Args:
            model: Resource model produced by the parse stage.
            context: Pipeline error collector shared with later stages.

        Returns:
            Names of the rules that ran, in order.

        Raises:
            ValueError: If model or context is None.
            AnalysisCancelledError: If the cancel event is set before a rule.
        """
        if model is None:
            raise ValueError("model is required")
        if context is None:
            raise ValueError("context is required")

        logger.info("analysis_started rules=%d", len(self.rules))

        completed: list[str] = []
        for rule in self.rules:
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.warning("analysis_cancelled before=%s completed=%d", rule.name, len(completed))
                raise AnalysisCancelledError(rule.name, completed)

            errors_before = len(context)
            rule.analyze(model, context)
            completed.append(rule.name)
            logger.info(
                "rule_finished rule=%s new_errors=%d",
                rule.name,
                len(context) - errors_before,
            )

        logger.info("analysis_completed rules=%d errors=%d", len(completed), len(context))
        return completed
