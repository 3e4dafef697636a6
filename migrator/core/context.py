"""Pipeline-level error collection.

A single ``MigrationContext`` is created per pipeline run and passed
explicitly to every dependency rule, the route walker and the scenario
decoder. Its error list is append-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from migrator.models.types import Severity


@dataclass(frozen=True)
class ErrorMessage:
    """An entry on the pipeline error list."""

    message: str
    severity: Severity = Severity.ERROR
    origin: str | None = None  # rule or component that reported it

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


@dataclass
class MigrationContext:
    """Shared state of one pipeline run."""

    _errors: list[ErrorMessage] = field(default_factory=list)

    def add_error(self, message: str, origin: str | None = None) -> ErrorMessage:
        """Append an error to the pipeline error list."""
        error = ErrorMessage(message=message, origin=origin)
        self._errors.append(error)
        return error

    @property
    def errors(self) -> tuple[ErrorMessage, ...]:
        """Snapshot of the error list."""
        return tuple(self._errors)

    @property
    def failed(self) -> bool:
        """True if any error was reported. Warnings never fail a run."""
        return len(self._errors) > 0

    def __iter__(self) -> Iterator[ErrorMessage]:
        return iter(tuple(self._errors))

    def __len__(self) -> int:
        return len(self._errors)
