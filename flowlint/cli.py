#!/usr/bin/env python3
# flowlint/cli.py

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from flowlint.checks.findings import RULES
from flowlint.config import DEFAULT_CONFIG, load_config
from flowlint.exceptions import ConfigError
from flowlint.runner import FileResult, discover, summarize, validate_many
from flowlint.utils.io import write_json
from flowlint.utils.logger import init_logger

app = typer.Typer(help="flowlint CLI - Validate n8n-style workflow graphs before they ship")


def _print_result(res: FileResult, strict: bool) -> None:
    status = "PASS" if res.ok(strict) else "FAIL"
    print(f"{status} {res.path}")
    if res.error is not None:
        print(f"  [PARSE] {res.error}")
        return
    for f in res.report.findings:
        node = f" node={f.node_id}" if f.node_id is not None else ""
        print(f"  [{f.severity.value.upper()}] {f.category.value}{node} {f.message}")


@app.command()
def validate(
    paths: List[Path] = typer.Argument(..., exists=True, readable=True, help="Workflow JSON files or folders to scan"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help="YAML/JSON rule configuration"),
    pattern: str = typer.Option("*.json", "--pattern", help="Glob used when scanning folders"),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Validate files in parallel with N threads"),
    fmt: str = typer.Option("text", "--format", "-f", help="Output format: text | json"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path"),
    csv: Optional[Path] = typer.Option(None, "--csv", help="Write a per-file CSV summary to this path"),
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as failures"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write logs to a rotating file in this folder"),
):
    """
    Validate workflow files: structure, references, reachability and production patterns.
    Exit code is 0 when every file passes, 1 otherwise.
    """
    fmt = fmt.lower()
    if fmt not in ("text", "json"):
        raise typer.BadParameter(f"Invalid format '{fmt}'. Choose one of: text, json")

    init_logger(level=logging.DEBUG if verbose else None, log_dir=log_dir)

    try:
        cfg = load_config(config) if config is not None else DEFAULT_CONFIG
    except ConfigError as e:
        raise typer.BadParameter(str(e), param_hint="--config")

    files = discover(paths, pattern=pattern)
    if not files:
        raise typer.BadParameter("no workflow files found", param_hint="PATHS")

    results = validate_many(files, cfg, workers=workers)
    summary = summarize(results, strict=strict)
    all_ok = summary["failed"] == 0

    payload = {
        "passed": all_ok,
        "summary": summary,
        "files": [r.to_dict() for r in results],
    }

    if fmt == "json":
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        for res in results:
            _print_result(res, strict)
        print(
            f"{summary['files']} file(s): {summary['passed']} passed, {summary['failed']} failed "
            f"({summary['fatal']} fatal, {summary['warnings']} warning(s), {summary['errors']} unreadable)"
        )

    if report is not None:
        write_json(report, payload)
        if fmt == "text":
            print(f"[ok] wrote report to {report}")

    if csv is not None:
        import pandas as pd

        rows = [{
            "file": str(r.path),
            "passed": r.ok(strict),
            "fatal": len(r.report.fatal) if r.report is not None else 0,
            "warnings": len(r.report.warnings) if r.report is not None else 0,
            "error": r.error or "",
        } for r in results]
        csv.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows, columns=["file", "passed", "fatal", "warnings", "error"]).to_csv(csv, index=False)
        if fmt == "text":
            print(f"[ok] wrote {csv}")

    if not all_ok:
        raise typer.Exit(code=1)


@app.command()
def rules():
    """
    List the rule codes flowlint reports (usable in `disabled_rules`).
    """
    for r in RULES.values():
        print(f"{r.code:<26} {r.severity.value:<8} {r.category.value:<19} {r.summary}")


def main():
    app()


if __name__ == "__main__":
    main()
