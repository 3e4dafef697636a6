"""Error hierarchy for the migrator.

Expected-shape problems in the analyzed model (unresolved references,
ambiguous matches, dangling routes) are never raised. They are recorded as
diagnostics and on the pipeline error list. Exceptions are reserved for
failures the caller has to handle at the process boundary.
"""

from __future__ import annotations

from pathlib import Path


class MigratorError(Exception):
    """Base error for the migrator.

    All migrator-specific errors inherit from this.
    """

    pass


# =============================================================================
# Loading Errors
# =============================================================================


class ModelLoadError(MigratorError):
    """The model document could not be loaded.

    Attributes:
        source: The file (or "<string>") that failed to load
        reason: Human-readable error description

    Recovery: Never recoverable - fix the model document.
    """

    def __init__(self, source: str | Path, reason: str) -> None:
        self.source = str(source)
        self.reason = reason
        super().__init__(f"Failed to load model from {self.source}: {reason}")


# =============================================================================
# Analysis Errors
# =============================================================================


class AnalysisCancelledError(MigratorError):
    """Cancellation was observed between two dependency rules.

    Attributes:
        rule_name: The rule that would have run next
        completed: Names of the rules that finished before cancellation

    Recovery: Re-run the analyze stage; rules already applied have mutated
    the model, so start again from a freshly loaded model.
    """

    def __init__(self, rule_name: str, completed: list[str]) -> None:
        self.rule_name = rule_name
        self.completed = completed
        super().__init__(
            f"Analysis cancelled before rule {rule_name} "
            f"({len(completed)} rule(s) completed)"
        )


# =============================================================================
# Report Errors
# =============================================================================


class ReportWriteError(MigratorError):
    """A report or graph file could not be written.

    Attributes:
        path: Destination path
        reason: Human-readable error description

    Recovery: Sometimes recoverable - depends on cause (permission vs format).
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")
