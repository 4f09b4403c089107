"""
Non-fatal diagnostics.

Conditions that do not abort a run (a mapped address missing from the log, a
rule fingerprint with no node, a cyclic topology) are logged and collected
here so callers can inspect or print them after the report is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity level for a diagnostic."""
    WARNING = "warning"
    INFO = "info"


# Diagnostic codes
ADDR_NOT_IN_LOG = "ADDR_NOT_IN_LOG"
UNKNOWN_FINGERPRINT = "UNKNOWN_FINGERPRINT"
CYCLIC_TOPOLOGY = "CYCLIC_TOPOLOGY"
PRIMARY_CYCLE_BROKEN = "PRIMARY_CYCLE_BROKEN"


@dataclass(frozen=True)
class DiagnosticIssue:
    """A single non-fatal issue."""

    code: str
    message: str
    severity: Severity = Severity.WARNING
    location: str = ""  # e.g. "node:12" or "rule:0"

    def __str__(self):
        prefix = f"[{self.severity.value.upper()}]"
        loc = f" ({self.location})" if self.location else ""
        return f"{prefix}{loc} {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "location": self.location,
        }


@dataclass
class Diagnostics:
    """Ordered collection of diagnostics for one report run."""

    issues: list[DiagnosticIssue] = field(default_factory=list)

    def warn(self, code: str, message: str, location: str = "") -> DiagnosticIssue:
        """Record a warning and emit it through the module logger."""
        issue = DiagnosticIssue(code=code, message=message, location=location)
        self.issues.append(issue)
        logger.warning(message)
        return issue

    def info(self, code: str, message: str, location: str = "") -> DiagnosticIssue:
        issue = DiagnosticIssue(
            code=code, message=message, severity=Severity.INFO, location=location
        )
        self.issues.append(issue)
        logger.info(message)
        return issue

    def warnings(self) -> list[DiagnosticIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    def by_code(self, code: str) -> list[DiagnosticIssue]:
        return [i for i in self.issues if i.code == code]

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self):
        return iter(self.issues)
