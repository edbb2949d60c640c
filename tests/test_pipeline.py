# tests/test_pipeline.py

import json

import pytest

from flowlint.checks.aggregate import aggregate
from flowlint.checks.findings import CATEGORY_ORDER, Category, Finding, Severity, ValidationReport
from flowlint.exceptions import ParseError, ReachabilityError, ReferentialError, StructuralError, WorkflowInvalid
from flowlint.model.builder import build_document
from flowlint.pipeline import validate_file, validate_text, validate_workflow


def trigger(id="A", **kw):
    return {"id": id, "name": f"Trigger {id}", "type": "trigger", **kw}


def action(id, **kw):
    return {"id": id, "name": f"Action {id}", "type": "action", **kw}


def link(src, *dsts):
    return {src: {"main": [[{"node": d, "type": "main", "index": 0} for d in dsts]]}}


def _by_rule(report, rule):
    return [f for f in report.findings if f.rule == rule]


# ---------- scenarios ----------

def test_scenario_a_valid_linear_graph():
    report = validate_workflow({"nodes": [trigger("A"), action("B")], "connections": link("A", "B")})
    assert report.passed
    assert report.fatal == []
    assert _by_rule(report, "orphan-node") == []


def test_scenario_b_orphaned_node():
    report = validate_workflow({"nodes": [trigger("A"), action("B"), action("C")], "connections": link("A", "B")})
    assert report.passed
    orphans = _by_rule(report, "orphan-node")
    assert [f.node_id for f in orphans] == ["C"]
    assert orphans[0].severity is Severity.WARNING


def test_scenario_c_dangling_connection():
    report = validate_workflow({"nodes": [trigger("A")], "connections": link("A", "B")})
    assert not report.passed
    assert len(report.fatal) == 1
    assert report.fatal[0].rule == "dangling-target"
    assert report.fatal[0].node_id == "B"


def test_scenario_d_missing_credentials_on_trigger():
    report = validate_workflow({"nodes": [trigger("A")], "connections": {}})
    assert report.passed
    creds = _by_rule(report, "missing-credentials")
    assert len(creds) == 1
    assert creds[0].category is Category.PRODUCTION
    assert creds[0].node_id == "A"


def test_scenario_e_duplicate_ids():
    report = validate_workflow({"nodes": [trigger("X"), action("X")], "connections": {}})
    assert not report.passed
    assert len(report.fatal) == 1
    assert report.fatal[0].rule == "duplicate-id"
    assert "'X'" in report.fatal[0].message


# ---------- properties ----------

def test_validation_is_idempotent():
    wf = {
        "nodes": [trigger("A"), action("B"), action("C"), action("B"), {"id": "D", "position": "x"}],
        "connections": {**link("A", "B", "Z"), **link("C", "C")},
    }
    doc = build_document(wf)
    assert validate_workflow(doc) == validate_workflow(doc)
    assert validate_workflow(wf).to_dict() == validate_workflow(wf).to_dict()


def test_findings_follow_category_order_and_nothing_is_suppressed():
    wf = {
        "nodes": [trigger("A"), action("A"), action("C")],
        "connections": link("A", "Nope"),
    }
    report = validate_workflow(wf)
    cats = [f.category for f in report.findings]
    assert cats == sorted(cats, key=CATEGORY_ORDER.index)
    assert {Category.STRUCTURAL, Category.REFERENTIAL, Category.REACHABILITY, Category.PRODUCTION} <= set(cats)

    grouped = report.by_category()
    assert list(grouped) == list(CATEGORY_ORDER)
    assert [f.rule for f in grouped[Category.STRUCTURAL]] == ["duplicate-id"]
    assert [f.node_id for f in grouped[Category.REACHABILITY]] == ["C"]


def test_empty_workflow_reports_structural_only_fatal():
    report = validate_workflow({"nodes": []})
    assert not report.passed
    assert [f.rule for f in report.findings] == ["empty-workflow"]


# ---------- report ----------

def test_aggregate_concatenates_in_fixed_order():
    s = Finding.of("missing-field", "s")
    r = Finding.of("self-loop", "r")
    p = Finding.of("missing-version-tag", "p")
    report = aggregate(production=[p], structural=[s], referential=[r])
    assert report.findings == (s, r, p)
    assert not report.passed


def test_passed_is_derived_from_fatal_findings():
    assert ValidationReport().passed
    assert ValidationReport(findings=[Finding.of("orphan-node", "o", "C")]).passed
    assert not ValidationReport(findings=[Finding.of("dangling-target", "d", "B")]).passed


def test_report_serialization():
    report = validate_workflow({"nodes": [trigger("A")], "connections": link("A", "B")})
    data = report.to_dict()
    assert data["passed"] is False
    json.dumps(data)
    dangling = [f for f in data["findings"] if f["rule"] == "dangling-target"][0]
    assert dangling == {
        "severity": "fatal",
        "category": "referential",
        "message": dangling["message"],
        "nodeId": "B",
        "rule": "dangling-target",
    }
    graph_level = [f for f in data["findings"] if f["rule"] == "no-error-path"][0]
    assert "nodeId" not in graph_level


@pytest.mark.parametrize("wf, exc", [
    ({"nodes": []}, StructuralError),
    ({"nodes": [trigger("A")], "connections": link("A", "B")}, ReferentialError),
    ({"nodes": [action("A")]}, ReachabilityError),
])
def test_raise_for_fatal(wf, exc):
    report = validate_workflow(wf)
    with pytest.raises(exc) as info:
        report.raise_for_fatal()
    assert isinstance(info.value, WorkflowInvalid)
    assert info.value.findings == report.fatal


def test_raise_for_fatal_is_silent_on_pass():
    validate_workflow({"nodes": [trigger("A")]}).raise_for_fatal()


# ---------- parse errors ----------

def test_parse_error_short_circuits():
    with pytest.raises(ParseError):
        validate_workflow({"nodes": "A"})
    with pytest.raises(ParseError):
        validate_text("not json")


def test_validate_file(tmp_path):
    good = tmp_path / "wf.json"
    good.write_text(json.dumps({"nodes": [trigger("A"), action("B")], "connections": link("A", "B")}), encoding="utf-8")
    assert validate_file(good).passed

    bad = tmp_path / "latin1.json"
    bad.write_bytes(b'{"nodes": [{"name": "Caf\xe9"}]}')
    with pytest.raises(ParseError) as info:
        validate_file(bad)
    assert info.value.source == str(bad)
    assert "UTF-8" in info.value.message


def test_name_equal_to_another_id_does_not_rewire_edges():
    wf = {
        "nodes": [
            {"id": "A", "name": "B", "type": "trigger"},
            {"id": "B", "name": "Act", "type": "action"},
        ],
        "connections": link("A", "B"),
    }
    report = validate_workflow(wf)
    assert _by_rule(report, "self-loop") == []
    assert _by_rule(report, "orphan-node") == []
