"""Report stage: scenario decoding and report output."""

from migrator.report.scenarios import (
    ScenarioStage,
    TargetApplication,
    TargetScenario,
    TargetScenarioModeller,
)
from migrator.report.writer import ReportWriter

__all__ = [
    "ReportWriter",
    "ScenarioStage",
    "TargetApplication",
    "TargetScenario",
    "TargetScenarioModeller",
]
