# flowlint/checks/aggregate.py

from itertools import chain
from typing import Iterable

from flowlint.checks.findings import Finding, ValidationReport


def aggregate(
    structural: Iterable[Finding] = (),
    referential: Iterable[Finding] = (),
    reachability: Iterable[Finding] = (),
    production: Iterable[Finding] = (),
) -> ValidationReport:
    """Merge checker output in fixed category order; `passed` is derived by the report."""
    return ValidationReport(findings=tuple(chain(structural, referential, reachability, production)))
