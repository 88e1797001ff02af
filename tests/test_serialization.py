"""
Tests for Graph and AST Serialization

Graphs arrive from the authoring surface as JSON and are persisted
verbatim, so:
- Roundtrip-safe: graph → JSON → graph retains meaning and edge order
- Rejecting: malformed documents fail with a clear ValueError
"""

import json

import pytest

from iseql import compile_graph, graph
from iseql.examples import BDPE_EXPECTED, BDPE_QUERY, UP_QUERY
from iseql.ir import (
    CardinalityBound,
    ConstraintKind,
    NodeKind,
    ast_to_dict,
    graph_from_dict,
    graph_from_json,
    graph_to_dict,
    graph_to_json,
    validate_json,
)
from iseql.compiler import build_ast


BDPE_WIRE = {
    "nodes": [
        {
            "id": "n1",
            "type": "predicate",
            "predicate": "hasPkg",
            "arguments": {"person": "p1", "package": "pkg1"},
            "position": {"x": 100, "y": 100},
            "label": "P1 has package",
        },
        {
            "id": "n2",
            "type": "predicate",
            "predicate": "hasPkg",
            "arguments": {"person": "p2", "package": "pkg1"},
            "position": {"x": 300, "y": 100},
            "label": "P2 has package",
        },
    ],
    "edges": [
        {
            "id": "e1",
            "source": "n1",
            "target": "n2",
            "constraint": {"type": "BEFORE", "delta": 0},
        }
    ],
}


class TestGraphFromDict:
    def test_wire_shape(self):
        g = graph_from_dict(BDPE_WIRE)
        assert g == BDPE_QUERY

    def test_from_json_compiles(self):
        g = graph_from_json(json.dumps(BDPE_WIRE))
        assert compile_graph(g).query == BDPE_EXPECTED

    def test_advanced_constraint_fields(self):
        data = {
            "nodes": [{"id": "a", "predicate": "x"}, {"id": "b", "predicate": "y"}],
            "edges": [{
                "id": "e1",
                "source": "a",
                "target": "b",
                "constraint": {
                    "type": "LEFT_OVERLAP",
                    "rho": 2,
                    "overlapPercentage": 30,
                    "cardinality": {"left": {"min": 1}, "right": {"min": 0, "max": 3}},
                },
            }],
        }
        c = graph_from_dict(data).edges[0].constraint
        assert c.kind == ConstraintKind.LEFT_OVERLAP
        assert c.rho == 2
        assert c.overlap_percentage == 30
        assert c.cardinality.left == CardinalityBound(min=1)
        assert c.cardinality.right == CardinalityBound(min=0, max=3)

    def test_node_type_defaults_to_predicate(self):
        g = graph_from_dict({"nodes": [{"id": "a", "predicate": "x"}], "edges": []})
        assert g.nodes[0].kind == NodeKind.PREDICATE

    def test_compound_node(self):
        g = graph_from_dict({
            "nodes": [{"id": "q", "type": "compound", "compoundQuery": "saved-7"}],
            "edges": [],
        })
        assert g.nodes[0].kind == NodeKind.COMPOUND
        assert g.nodes[0].compound_query == "saved-7"

    def test_missing_field(self):
        with pytest.raises(ValueError) as e:
            graph_from_dict({"nodes": [{"predicate": "x"}], "edges": []})
        assert "Missing required field" in str(e.value)

    def test_unknown_constraint_type(self):
        data = {
            "nodes": [{"id": "a", "predicate": "x"}],
            "edges": [{"id": "e1", "source": "a", "target": "a", "constraint": {"type": "NEVER"}}],
        }
        with pytest.raises(ValueError) as e:
            graph_from_dict(data)
        assert "Invalid data format" in str(e.value)

    @pytest.mark.parametrize(
        "constraint",
        [
            {"type": "BEFORE", "delta": "5"},
            {"type": "DURING", "epsilon": [3]},
            {"type": "LEFT_OVERLAP", "overlapPercentage": True},
            {"type": "BEFORE", "cardinality": {"left": {"min": "1"}}},
        ],
    )
    def test_non_numeric_parameters_are_rejected(self, constraint):
        data = {
            "nodes": [{"id": "a", "predicate": "x"}, {"id": "b", "predicate": "y"}],
            "edges": [{"id": "e1", "source": "a", "target": "b", "constraint": constraint}],
        }
        with pytest.raises(ValueError) as e:
            graph_from_dict(data)
        assert "Invalid data format" in str(e.value)
        assert "must be a number" in str(e.value)

    def test_integral_and_float_parameters_are_kept(self):
        data = {
            "nodes": [{"id": "a", "predicate": "x"}, {"id": "b", "predicate": "y"}],
            "edges": [{
                "id": "e1", "source": "a", "target": "b",
                "constraint": {"type": "DURING", "delta": 0, "epsilon": 2.5},
            }],
        }
        c = graph_from_dict(data).edges[0].constraint
        assert (c.delta, c.epsilon) == (0, 2.5)

    def test_invalid_json(self):
        with pytest.raises(ValueError) as e:
            graph_from_json("{nodes:")
        assert "Invalid JSON" in str(e.value)


class TestRoundtrip:
    def test_reference_query(self):
        assert graph_from_json(graph_to_json(BDPE_QUERY)) == BDPE_QUERY

    def test_wire_dict_is_reproduced(self):
        assert graph_to_dict(graph_from_dict(BDPE_WIRE)) == BDPE_WIRE

    def test_edge_order_is_preserved(self):
        g = (
            graph()
            .event("A", "a")
            .event("B", "b")
            .event("C", "c")
            .after("A", "C", edge_id="z")
            .before("A", "B", edge_id="a")
            .build()
        )
        restored = graph_from_json(graph_to_json(g))
        assert [e.id for e in restored.edges] == ["z", "a"]
        assert compile_graph(restored).query == compile_graph(g).query

    def test_full_featured_graph(self):
        g = (
            graph()
            .compound("Q", "saved-1", label="Earlier exchange")
            .event("B", "in", person="p2", armed=True)
            .left_overlap(
                "Q", "B", delta=5, epsilon=3, rho=1,
                left_card=CardinalityBound(min=1, max=2),
                right_card=CardinalityBound(max=4),
                overlap_percentage=25,
            )
            .build()
        )
        assert graph_from_json(graph_to_json(g)) == g


class TestAstToDict:
    def test_operator(self):
        data = ast_to_dict(build_ast(BDPE_QUERY))
        assert data == {
            "type": "OPERATOR",
            "operator": "Bef",
            "params": {"delta": 0},
            "left": {
                "type": "PREDICATE",
                "predicate": "hasPkg",
                "relation": "M1",
                "arguments": {"person": "p1", "package": "pkg1"},
            },
            "right": {
                "type": "PREDICATE",
                "predicate": "hasPkg",
                "relation": "M2",
                "arguments": {"person": "p2", "package": "pkg1"},
            },
        }

    def test_unbounded_params_omitted(self):
        data = ast_to_dict(build_ast(UP_QUERY))
        assert data["params"] == {}
        json.dumps(data, allow_nan=False)


class TestValidateJson:
    def test_valid(self):
        ok, errors = validate_json(json.dumps(BDPE_WIRE))
        assert ok is True
        assert errors == []

    def test_invalid_json(self):
        ok, errors = validate_json("not json")
        assert ok is False
        assert errors[0].startswith("Invalid JSON")

    def test_missing_sections(self):
        ok, errors = validate_json("{}")
        assert ok is False
        assert "Missing required field: nodes" in errors
        assert "Missing required field: edges" in errors

    def test_bad_entries(self):
        doc = {
            "nodes": [{"type": "widget"}],
            "edges": [{"id": "e1", "source": "a", "constraint": {"type": "SOON"}}],
        }
        ok, errors = validate_json(json.dumps(doc))
        assert ok is False
        assert "nodes[0].id is required" in errors
        assert "Invalid node type: widget" in errors
        assert "edges[0].target is required" in errors
        assert "Invalid constraint type: SOON" in errors

    def test_non_numeric_parameter(self):
        doc = dict(BDPE_WIRE)
        doc["edges"] = [{
            "id": "e1", "source": "n1", "target": "n2",
            "constraint": {"type": "BEFORE", "delta": "5"},
        }]
        ok, errors = validate_json(json.dumps(doc))
        assert ok is False
        assert errors == ["edges[0].constraint.delta must be a number"]
