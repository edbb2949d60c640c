# flowlint/exceptions.py
from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from flowlint.checks.findings import Finding


class FlowlintError(Exception):
    """Base class for every error raised by flowlint."""


class ParseError(FlowlintError):
    """The input could not be decoded into a workflow document."""

    def __init__(self, message: str, source: str = "<input>"):
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


class ConfigError(FlowlintError):
    """Invalid rule configuration."""


class WorkflowInvalid(FlowlintError):
    """
    Raised by ValidationReport.raise_for_fatal() when a report holds fatal findings.
    The concrete subclass follows the category of the first fatal finding.
    """

    def __init__(self, findings: Sequence["Finding"]):
        self.findings = list(findings)
        first = self.findings[0].message if self.findings else "workflow is invalid"
        extra = len(self.findings) - 1
        msg = first if extra <= 0 else f"{first} (+{extra} more fatal finding(s))"
        super().__init__(msg)


class StructuralError(WorkflowInvalid):
    pass


class ReferentialError(WorkflowInvalid):
    pass


class ReachabilityError(WorkflowInvalid):
    pass
