# flowlint/pipeline.py

from typing import Any, Optional

from flowlint.checks.aggregate import aggregate
from flowlint.checks.findings import ValidationReport
from flowlint.checks.production import production_check
from flowlint.checks.reachability import reachability_check
from flowlint.checks.referential import referential_check
from flowlint.checks.structural import structural_check
from flowlint.config import DEFAULT_CONFIG, RuleConfig
from flowlint.exceptions import ParseError
from flowlint.model.builder import build_document, parse_document
from flowlint.model.document import WorkflowDocument
from flowlint.utils.graph import build_graph
from flowlint.utils.io import PathLike, read_text
from flowlint.utils.logger import get_logger

logger = get_logger("pipeline")


def validate_document(doc: WorkflowDocument, cfg: Optional[RuleConfig] = None) -> ValidationReport:
    """
    Run all four checkers over a parsed document and aggregate the result.
    No checker suppresses another: a structural error still gets referential,
    reachability and production findings reported alongside it.
    """
    cfg = cfg or DEFAULT_CONFIG
    G = build_graph(doc)
    report = aggregate(
        structural=structural_check(doc),
        referential=referential_check(doc),
        reachability=reachability_check(doc, cfg, G),
        production=production_check(doc, cfg),
    )
    logger.debug(
        "validated %d nodes: %d fatal, %d warning(s)",
        len(doc.nodes), len(report.fatal), len(report.warnings),
    )
    return report


def validate_workflow(workflow: Any, cfg: Optional[RuleConfig] = None, source: str = "<input>") -> ValidationReport:
    """Validate a decoded workflow (dict) or an already built WorkflowDocument."""
    doc = workflow if isinstance(workflow, WorkflowDocument) else build_document(workflow, source=source)
    return validate_document(doc, cfg)


def validate_text(text: str, cfg: Optional[RuleConfig] = None, source: str = "<input>") -> ValidationReport:
    return validate_document(parse_document(text, source=source), cfg)


def validate_file(path: PathLike, cfg: Optional[RuleConfig] = None) -> ValidationReport:
    """Read, parse and validate one file. ParseError covers bad encoding and bad JSON."""
    try:
        text = read_text(path)
    except UnicodeDecodeError as e:
        raise ParseError(f"file is not valid UTF-8 ({e.reason} at byte {e.start})", str(path)) from e
    return validate_text(text, cfg, source=str(path))
