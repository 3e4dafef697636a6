"""Report building and output.

The report lists every analyzed resource with its diagnostics and
relationships, the decoded target applications with their scenario trees,
and the pipeline error list. Ordering is deterministic:

- resources and applications by name
- relationships by kind, then related resource type, then related name
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from migrator.config import REPORT_FORMATS, friendly_name
from migrator.core.context import MigrationContext
from migrator.core.errors import ReportWriteError
from migrator.models.resource import ResourceModel, ResourceNode
from migrator.models.target import TargetResourceTemplate
from migrator.models.types import RelationshipType, Severity
from migrator.report.scenarios import ScenarioStage, TargetApplication

logger = logging.getLogger(__name__)

_KIND_ORDER: dict[RelationshipType, int] = {kind: i for i, kind in enumerate(RelationshipType)}


class ReportWriter:
    """Builds the report document and writes it as JSON or YAML."""

    def __init__(self, report_format: str = "json") -> None:
        if report_format not in REPORT_FORMATS:
            raise ValueError(
                f"Unsupported report format {report_format!r}, "
                f"expected one of {', '.join(REPORT_FORMATS)}"
            )
        self.report_format = report_format

    def build(
        self,
        model: ResourceModel,
        applications: list[TargetApplication],
        context: MigrationContext,
    ) -> dict[str, Any]:
        """Assemble the report document.

        Args:
            model: Analyzed resource model.
            applications: Decoded target applications (may be empty).
            context: Pipeline error collector.

        Returns:
            Report as plain dicts and lists, ready for serialization.
        """
        resources = model.find_all_resources()
        index = {node.id: node for node in resources}

        counts = {severity.value: 0 for severity in Severity}
        for node in resources:
            for diagnostic in node.diagnostics:
                counts[diagnostic.severity.value] += 1

        return {
            "summary": {
                "resources": len(resources),
                "relationships": sum(len(node.relationships) for node in resources),
                "diagnostics": counts,
                "applications": len(applications),
                "scenarios": sum(len(app.scenarios) for app in applications),
                "errors": len(context),
            },
            "resources": [
                self._resource(node, index)
                for node in sorted(resources, key=lambda n: (n.name, n.key))
            ],
            "applications": [
                self._application(app)
                for app in sorted(applications, key=lambda a: (a.application.name, a.application.key))
            ],
            "errors": [str(error) for error in context],
        }

    def render(self, report: dict[str, Any]) -> str:
        """Serialize a report document in the configured format."""
        if self.report_format == "yaml":
            return yaml.safe_dump(report, sort_keys=False, default_flow_style=False)
        return json.dumps(report, indent=2)

    def write(self, report: dict[str, Any], path: str | Path) -> Path:
        """Write a report document to a file, creating parent directories.

        Raises:
            ReportWriteError: If the file cannot be written.
        """
        output_path = Path(path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(self.render(report), encoding="utf-8")
        except OSError as e:
            raise ReportWriteError(output_path, e.strerror or str(e)) from e

        logger.info("report_written path=%s format=%s", output_path, self.report_format)
        return output_path

    def _resource(self, node: ResourceNode, index: dict[str, ResourceNode]) -> dict[str, Any]:
        relationships = []
        for edge in node.relationships:
            related = index.get(edge.target_id)
            relationships.append(
                {
                    "kind": edge.kind.value,
                    "target_id": edge.target_id,
                    "target_type": friendly_name(related.type) if related else "",
                    "target_name": related.name if related else "",
                    "_order": _KIND_ORDER[edge.kind],
                }
            )
        relationships.sort(key=lambda r: (r["_order"], r["target_type"], r["target_name"]))
        for relationship in relationships:
            del relationship["_order"]

        return {
            "id": node.id,
            "type": friendly_name(node.type),
            "key": node.key,
            "name": node.name,
            "diagnostics": [
                {"severity": d.severity.value, "text": d.text} for d in node.diagnostics
            ],
            "relationships": relationships,
        }

    def _application(self, app: TargetApplication) -> dict[str, Any]:
        return {
            "key": app.application.key,
            "name": app.application.name,
            "average_conversion_rating": round(app.average_conversion_rating, 2),
            "scenarios": [
                {"name": scenario.name, "activator": _stage(scenario.activator)}
                for scenario in app.scenarios
            ],
            "resources": [
                _template(t)
                for t in sorted(app.resources, key=lambda t: (t.resource_name, t.template_key))
            ],
        }


def _stage(stage: ScenarioStage) -> dict[str, Any]:
    return {
        "name": stage.name,
        "stage_type": stage.stage_type,
        "key": stage.messaging_object.key,
        "input_channel": stage.input_channel.key if stage.input_channel else None,
        "revisit": stage.revisit,
        "following_stages": [_stage(s) for s in stage.following_stages],
    }


def _template(template: TargetResourceTemplate) -> dict[str, Any]:
    return {
        "resource_type": template.resource_type,
        "template_key": template.template_key,
        "resource_name": template.resource_name,
        "output_path": template.output_path,
    }
