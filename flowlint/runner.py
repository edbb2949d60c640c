# flowlint/runner.py
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from flowlint.checks.findings import ValidationReport
from flowlint.config import RuleConfig
from flowlint.exceptions import ParseError
from flowlint.pipeline import validate_file
from flowlint.utils.io import list_files, read_json, to_path
from flowlint.utils.logger import get_logger

logger = get_logger("runner")


@dataclass(frozen=True)
class FileResult:
    """Outcome for one file: a report, or the reason it could not be validated."""
    path: Path
    report: Optional[ValidationReport] = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.report is not None and self.report.passed

    def ok(self, strict: bool = False) -> bool:
        if not self.passed:
            return False
        return not (strict and self.report.warnings)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"file": str(self.path), "passed": self.passed}
        if self.report is not None:
            d["findings"] = self.report.to_dict()["findings"]
        else:
            d["error"] = self.error
        return d


def _looks_like_workflow(path: Path) -> bool:
    """Scanned JSON without a "nodes" key (reports, settings) is not a workflow."""
    try:
        data = read_json(path)
    except (OSError, ValueError):
        # let the validator report unreadable / malformed files
        return True
    return isinstance(data, dict) and "nodes" in data


def discover(paths: Iterable[Any], pattern: str = "*.json") -> List[Path]:
    """
    Expand the given paths into workflow files, in order, without duplicates.
    Files are taken as given; directories are scanned recursively.
    """
    found: List[Path] = []
    seen = set()
    for raw in paths:
        p = to_path(raw)
        if p.is_dir():
            candidates = []
            for f in list_files(p, pattern, recursive=True):
                if _looks_like_workflow(f):
                    candidates.append(f)
                else:
                    logger.info("[skip] %s does not look like a workflow JSON (missing 'nodes')", f)
        else:
            candidates = [p]
        for c in candidates:
            if c not in seen:
                seen.add(c)
                found.append(c)
    logger.debug("discovered %d workflow file(s)", len(found))
    return found


def validate_one(path: Path, cfg: Optional[RuleConfig] = None) -> FileResult:
    try:
        report = validate_file(path, cfg)
    except ParseError as e:
        logger.warning("parse error in %s: %s", path, e.message)
        return FileResult(path=path, error=e.message)
    except OSError as e:
        logger.warning("cannot read %s: %s", path, e)
        return FileResult(path=path, error=f"cannot read file: {e.strerror or e}")
    logger.info(
        "%s: %s (%d fatal, %d warning(s))",
        path, "pass" if report.passed else "FAIL", len(report.fatal), len(report.warnings),
    )
    return FileResult(path=path, report=report)


def validate_many(
    paths: List[Path],
    cfg: Optional[RuleConfig] = None,
    workers: int = 1,
) -> List[FileResult]:
    """
    Validate each file independently, optionally on a thread pool.
    Workers share nothing but the result collector, which is guarded by a lock.
    Results come back in the order of `paths`.
    """
    collected: Dict[int, FileResult] = {}
    lock = threading.Lock()

    def _task(i: int, p: Path) -> None:
        res = validate_one(p, cfg)
        with lock:
            collected[i] = res

    if workers <= 1 or len(paths) <= 1:
        for i, p in enumerate(paths):
            _task(i, p)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_task, i, p) for i, p in enumerate(paths)]
            for fut in futures:
                fut.result()

    return [collected[i] for i in range(len(paths))]


def summarize(results: List[FileResult], strict: bool = False) -> Dict[str, int]:
    return {
        "files": len(results),
        "passed": sum(1 for r in results if r.ok(strict)),
        "failed": sum(1 for r in results if not r.ok(strict)),
        "errors": sum(1 for r in results if r.error is not None),
        "fatal": sum(len(r.report.fatal) for r in results if r.report is not None),
        "warnings": sum(len(r.report.warnings) for r in results if r.report is not None),
    }
