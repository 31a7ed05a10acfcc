"""End-to-end behaviour of the assembled pipeline."""

import json

import pytest
from conftest import CORPUS, CORPUS_EDGE_COUNT

from sor_graph.build import build_graph, serialize_graph, write_artifact
from sor_graph.errors import RecordFileError
from sor_graph.validator import validate_graph


def test_stats(corpus_dir):
    stats = build_graph(corpus_dir).stats

    assert stats.node_counts_by_type == {
        "problem": 5,
        "mechanism": 2,
        "engagement_model": 2,
        "meta_challenge": 2,
        "foundation": 1,
        "technology": 1,
        "implication": 1,
        "claim": 3,
        "source": 2,
    }
    assert stats.canvas_node_count == 14
    assert stats.off_canvas_count == 5
    assert stats.edge_count == CORPUS_EDGE_COUNT
    assert stats.edge_counts_by_type["problem_cluster"] == 5
    assert stats.edge_counts_by_type["problem_claim"] == 3
    assert stats.edge_counts_by_type["compatibility_rating"] == 3
    assert stats.combo_count == 3
    assert stats.combo_membership == {"CL_A": 2, "CL_B": 1, "CL_C": 1}
    assert stats.warning_count == 0


def test_entity_edges_come_before_compatibility_edges(corpus_dir):
    edges = build_graph(corpus_dir).graph.edges
    assert edges[0].id == "e_problem_mechanism_0"
    assert [edge.edge_type for edge in edges[-4:]] == [
        "compatibility_rating",
        "compatibility_rating",
        "compatibility_rating",
        "vulnerability_rating",
    ]


def test_build_is_idempotent(make_corpus):
    first = build_graph(make_corpus(CORPUS, name="first"))
    second = build_graph(make_corpus(CORPUS, name="second"))
    assert serialize_graph(first.graph) == serialize_graph(second.graph)
    assert first.stats == second.stats


def test_assembled_graph_passes_validation(corpus_dir):
    graph = build_graph(corpus_dir).graph
    report = validate_graph(json.loads(serialize_graph(graph)))

    assert report.passed
    assert report.errors == []
    assert report.warnings == ["orphan2020 (source: Unused Source)"]


def test_off_canvas_entities_are_claims_and_sources(corpus_dir):
    graph = build_graph(corpus_dir).graph
    assert [entity.id for entity in graph.off_canvas_entities] == [
        "C001",
        "C002",
        "C003",
        "barkley2015",
        "orphan2020",
    ]
    assert {node.type for node in graph.canvas_nodes}.isdisjoint({"claim", "source", "cluster"})


def test_problem_mechanism_scenario(make_corpus):
    yaml_dir = make_corpus(
        {
            "problems.yaml": (
                "Time Blindness:\n  id: FP03\n  cluster: \"A\"\n  mechanisms: [\"Time Perception Distortion\"]\n"
            ),
            "clusters.yaml": "Time-Perception Cascade:\n  id: CL_A\n",
            "mechanisms.yaml": "Time Perception Distortion:\n  id: MECH01\n",
        }
    )
    result = build_graph(yaml_dir)

    mechanism_edges = [edge for edge in result.graph.edges if edge.edge_type == "problem_mechanism"]
    assert [(edge.source, edge.target) for edge in mechanism_edges] == [("FP03", "MECH01")]
    problem = next(node for node in result.graph.canvas_nodes if node.id == "FP03")
    assert problem.combo_id == "CL_A"
    assert result.warnings == []


def test_warnings_are_returned_not_raised(make_corpus):
    yaml_dir = make_corpus(
        {"problems.yaml": "Time Blindness:\n  id: FP03\n  mechanisms: [Nonexistent Entity XYZ]\n"}
    )
    result = build_graph(yaml_dir)
    assert [w.unresolved_value for w in result.warnings] == ["Nonexistent Entity XYZ"]
    assert result.stats.warning_count == 1
    assert result.graph.edges == []


def test_missing_input_file_aborts_build(corpus_dir):
    (corpus_dir / "compatibility.yaml").unlink()
    with pytest.raises(RecordFileError):
        build_graph(corpus_dir)


def test_write_artifact(corpus_dir, tmp_path):
    graph = build_graph(corpus_dir).graph
    path = write_artifact(graph, tmp_path / "out" / "graph.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert list(payload) == ["canvasNodes", "offCanvasEntities", "edges", "combos"]
    assert len(payload["edges"]) == CORPUS_EDGE_COUNT
    source = next(entity for entity in payload["offCanvasEntities"] if entity["id"] == "barkley2015")
    assert source["data"]["published"] == "2015-01-01"
    rating = next(edge for edge in payload["edges"] if edge["edgeType"] == "compatibility_rating")
    assert rating["data"] == {"label": "S compatibility", "rating": "S"}
    favours = next(edge for edge in payload["edges"] if edge["edgeType"] == "mechanism_model_favours")
    assert favours["data"] == {"subType": "favours"}


def test_write_artifact_with_date_keyed_mapping(make_corpus, tmp_path):
    yaml_dir = make_corpus(
        {"sources.yaml": "barkley2015:\n  name: Barkley\n  revisions:\n    2024-01-01: corrected page numbers\n"}
    )
    graph = build_graph(yaml_dir).graph

    path = write_artifact(graph, tmp_path / "graph.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    source = payload["offCanvasEntities"][0]
    assert source["data"]["revisions"] == {"2024-01-01": "corrected page numbers"}
