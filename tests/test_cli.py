"""
Tests for the iseql command line.

Exit codes: 0 compiled, 1 rejected, 2 unreadable input.
"""

import io
import json

import pytest

from iseql.cli import main
from iseql.examples import BDPE_EXPECTED, BDPE_QUERY, DPE2_QUERY
from iseql.ir.serialize import graph_to_json


@pytest.fixture
def bdpe_file(tmp_path):
    path = tmp_path / "bdpe.json"
    path.write_text(graph_to_json(BDPE_QUERY), encoding="utf-8")
    return path


class TestCompile:
    def test_prints_query(self, bdpe_file, capsys):
        assert main([str(bdpe_file)]) == 0
        out = capsys.readouterr().out
        assert out == BDPE_EXPECTED + "\n"

    def test_pretty(self, bdpe_file, capsys):
        assert main([str(bdpe_file), "--pretty"]) == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "("

    def test_json_format(self, bdpe_file, capsys):
        assert main([str(bdpe_file), "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["query"] == BDPE_EXPECTED
        assert data["ast"]["operator"] == "Bef"

    def test_output_file(self, bdpe_file, tmp_path, capsys):
        target = tmp_path / "query.txt"
        assert main([str(bdpe_file), "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8") == BDPE_EXPECTED + "\n"
        assert capsys.readouterr().out == ""

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(graph_to_json(BDPE_QUERY)))
        assert main(["-"]) == 0
        assert capsys.readouterr().out.strip() == BDPE_EXPECTED


class TestRejected:
    def test_invalid_graph(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text('{"nodes": [], "edges": []}', encoding="utf-8")
        assert main([str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Validation failed:" in captured.err

    def test_two_roots(self, tmp_path, capsys):
        path = tmp_path / "dpe2.json"
        path.write_text(graph_to_json(DPE2_QUERY), encoding="utf-8")
        assert main([str(path), "--format", "json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is False
        assert data["error"].startswith("Multiple root nodes found")


class TestInputErrors:
    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 2
        assert "Error reading graph" in capsys.readouterr().err

    def test_bad_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        assert main([str(path)]) == 2
        assert "Error parsing graph" in capsys.readouterr().err

    def test_non_numeric_parameter(self, tmp_path, capsys):
        path = tmp_path / "typed.json"
        path.write_text(json.dumps({
            "nodes": [{"id": "a", "predicate": "x"}, {"id": "b", "predicate": "y"}],
            "edges": [{
                "id": "e1", "source": "a", "target": "b",
                "constraint": {"type": "BEFORE", "delta": "5"},
            }],
        }), encoding="utf-8")
        assert main([str(path)]) == 2
        assert "delta must be a number" in capsys.readouterr().err
