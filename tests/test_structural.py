# tests/test_structural.py

import pytest

from flowlint.checks.findings import Category, Severity
from flowlint.checks.structural import position_ok, structural_check
from flowlint.model.builder import build_document


def _node(id="a", name="A", type="action", **kw):
    n = {"id": id, "name": name, "type": type}
    n.update(kw)
    return n


def _check(*nodes):
    return structural_check(build_document({"nodes": list(nodes)}))


def test_clean_nodes_have_no_findings():
    assert _check(_node("a", "A", "trigger"), _node("b", "B", position=[10, 20.5])) == []


def test_empty_workflow_is_fatal():
    findings = structural_check(build_document({"nodes": []}))
    assert len(findings) == 1
    assert findings[0].rule == "empty-workflow"
    assert findings[0].severity is Severity.FATAL
    assert findings[0].category is Category.STRUCTURAL


def test_one_finding_per_missing_field():
    findings = _check({"id": "a"}, {"name": "B", "type": "  "})
    assert [f.rule for f in findings] == ["missing-field"] * 4
    messages = [f.message for f in findings]
    assert "'name'" in messages[0] and "'type'" in messages[1]
    assert "'id'" in messages[2] and "'type'" in messages[3]
    assert findings[0].node_id == "a"
    assert findings[2].node_id is None


@pytest.mark.parametrize(
    "position, ok",
    [
        ([0, 0], True),
        ((1.5, -2), True),
        ({"x": 1, "y": 2, "z": 3}, True),
        (["0", 0], False),
        ([1, 2, 3], False),
        ([True, 1], False),
        ({"x": 1}, False),
        ("100,200", False),
    ],
)
def test_position_validation(position, ok):
    assert position_ok(position) is ok


def test_bad_position_is_fatal():
    findings = _check(_node(position=["left", "top"]))
    assert [f.rule for f in findings] == ["invalid-position"]
    assert findings[0].is_fatal


def test_missing_position_is_fine():
    assert _check(_node()) == []


def test_duplicate_id_reported_once_naming_both_nodes():
    findings = _check(_node("X", "First"), _node("Y", "Other"), _node("X", "Second"))
    assert len(findings) == 1
    f = findings[0]
    assert f.rule == "duplicate-id"
    assert f.node_id == "X"
    assert f.is_fatal
    assert "'First'" in f.message and "'Second'" in f.message


def test_each_duplicated_id_gets_its_own_finding():
    findings = _check(_node("X", "1"), _node("X", "2"), _node("Y", "3"), _node("Y", "4"), _node("X", "5"))
    assert [(f.rule, f.node_id) for f in findings] == [("duplicate-id", "X"), ("duplicate-id", "Y")]


def test_numeric_and_string_ids_collide():
    findings = _check(_node(1, "One"), _node("1", "Also one"))
    assert [f.node_id for f in findings] == ["1"]
