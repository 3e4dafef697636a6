"""Analyze and report stages over a loaded model document."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from migrator.analyze.analyzer import DependencyRulesAnalyzer
from migrator.analyze.graph import ResourceGraph
from migrator.core.context import MigrationContext
from migrator.loader import LoadedModel
from migrator.report.scenarios import TargetApplication, TargetScenarioModeller

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    The run failed if anything reached the pipeline error list. Warnings
    and unresolved references never fail a run.
    """

    loaded: LoadedModel
    context: MigrationContext
    rules_run: list[str] = field(default_factory=list)
    applications: list[TargetApplication] = field(default_factory=list)
    graph: ResourceGraph | None = None

    @property
    def failed(self) -> bool:
        return self.context.failed


def run_pipeline(
    loaded: LoadedModel,
    cancel_event: threading.Event | None = None,
) -> PipelineResult:
    """Run the dependency rules, then decode target scenarios.

    Args:
        loaded: Model document read by the loader.
        cancel_event: Checked between dependency rules.

    Returns:
        PipelineResult with the shared error list.

    Raises:
        AnalysisCancelledError: If cancelled between rules.
    """
    context = MigrationContext()
    result = PipelineResult(loaded=loaded, context=context)

    analyzer = DependencyRulesAnalyzer(cancel_event=cancel_event)
    result.rules_run = analyzer.analyze(loaded.resources, context)
    result.graph = ResourceGraph.from_model(loaded.resources)

    violations = result.graph.verify_symmetry()
    if violations:
        logger.warning("asymmetric_relationships count=%d", len(violations))

    if loaded.target is not None:
        result.applications = TargetScenarioModeller(context).decode(loaded.target)
    else:
        logger.debug("no_target_model scenarios_skipped=true")

    logger.info(
        "pipeline_completed rules=%d applications=%d errors=%d",
        len(result.rules_run),
        len(result.applications),
        len(context),
    )
    return result
