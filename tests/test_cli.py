import json

import pytest

from sor_graph import cli

ENV_VARS = ("SOR_GRAPH_YAML_DIR", "SOR_GRAPH_OUTPUT_PATH", "SOR_GRAPH_SYNC_SOURCE", "SOR_GRAPH_LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("sor_graph.config.load_dotenv", lambda: False)


def test_build_writes_artifact_and_prints_stats(corpus_dir, tmp_path, capsys):
    output = tmp_path / "out" / "graph.json"

    code = cli.main(["build", "--yaml-dir", str(corpus_dir), "--output-path", str(output)])

    assert code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert len(payload["canvasNodes"]) == 14
    out = capsys.readouterr().out
    assert "=== Node Counts by Type ===" in out
    assert "  TOTAL canvas: 14" in out
    assert "  CL_A: 2 members" in out
    assert "Warnings" not in out


def test_build_reads_paths_from_environment(corpus_dir, tmp_path, monkeypatch):
    output = tmp_path / "env-graph.json"
    monkeypatch.setenv("SOR_GRAPH_YAML_DIR", str(corpus_dir))
    monkeypatch.setenv("SOR_GRAPH_OUTPUT_PATH", str(output))

    assert cli.main(["build"]) == 0
    assert output.is_file()


def test_build_prints_warnings(make_corpus, tmp_path, capsys):
    yaml_dir = make_corpus({"problems.yaml": "Time Blindness:\n  id: FP03\n  mechanisms: [Nonexistent Entity XYZ]\n"})

    code = cli.main(["build", "--yaml-dir", str(yaml_dir), "--output-path", str(tmp_path / "graph.json")])

    assert code == 0
    out = capsys.readouterr().out
    assert "=== Warnings (1) ===" in out
    assert '[FP03.mechanisms] Could not resolve reference "Nonexistent Entity XYZ" from FP03.mechanisms' in out


def test_build_fails_on_missing_directory(tmp_path, capsys):
    code = cli.main(["build", "--yaml-dir", str(tmp_path / "nope"), "--output-path", str(tmp_path / "graph.json")])

    assert code == 2
    assert "Build failed:" in capsys.readouterr().err
    assert not (tmp_path / "graph.json").exists()


def test_validate_passes_on_built_artifact(corpus_dir, tmp_path, capsys):
    output = tmp_path / "graph.json"
    cli.main(["build", "--yaml-dir", str(corpus_dir), "--output-path", str(output)])
    capsys.readouterr()

    code = cli.main(["validate", "--artifact-path", str(output)])

    out = capsys.readouterr().out
    assert code == 0
    assert "  OK: All edge references resolve." in out
    assert "  WARNING: 1 orphan nodes (no edges):" in out
    assert "VALIDATION PASSED." in out


def test_validate_fails_on_broken_artifact(tmp_path, capsys):
    path = tmp_path / "graph.json"
    broken = {
        "canvasNodes": [{"id": "FP03", "type": "problem", "label": "Time Blindness", "comboId": "CL_Z"}],
        "offCanvasEntities": [],
        "edges": [{"id": "e1", "source": "FP03", "target": "ZZZ", "edgeType": "problem_mechanism"}],
        "combos": [],
    }
    path.write_text(json.dumps(broken), encoding="utf-8")

    code = cli.main(["validate", "--artifact-path", str(path)])

    out = capsys.readouterr().out
    assert code == 1
    assert "  ERROR: Edge e1 (problem_mechanism) references missing target: ZZZ" in out
    assert "  ERROR: Node FP03 references missing combo: CL_Z" in out
    assert "VALIDATION FAILED." in out


def test_validate_missing_artifact(tmp_path, capsys):
    assert cli.main(["validate", "--artifact-path", str(tmp_path / "missing.json")]) == 2
    assert "Validation failed:" in capsys.readouterr().err


def test_sync_copies_yaml_files(tmp_path, capsys):
    source = tmp_path / "authored"
    source.mkdir()
    (source / "problems.yaml").write_text("Time Blindness:\n  id: FP03\n", encoding="utf-8")
    (source / "claims.yaml").write_text("", encoding="utf-8")
    (source / "notes.md").write_text("not a record", encoding="utf-8")
    target = tmp_path / "System_of_Record"

    code = cli.main(["sync", "--source-dir", str(source), "--yaml-dir", str(target)])

    assert code == 0
    assert sorted(path.name for path in target.iterdir()) == ["claims.yaml", "problems.yaml"]
    out = capsys.readouterr().out
    assert "  Copied claims.yaml" in out
    assert "Synced 2 YAML files" in out


def test_sync_missing_source(tmp_path, capsys):
    code = cli.main(["sync", "--source-dir", str(tmp_path / "nope"), "--yaml-dir", str(tmp_path / "dest")])
    assert code == 2
    assert "source directory not found" in capsys.readouterr().err


def test_sync_requires_a_source(capsys):
    with pytest.raises(SystemExit):
        cli.main(["sync"])


def test_verbose_switches_log_level():
    assert cli.parse_args(["-v", "validate"]).log_level == "DEBUG"
    assert cli.parse_args(["validate"]).log_level == "WARNING"


def test_unknown_log_level_does_not_break_the_cli(corpus_dir, tmp_path, monkeypatch):
    monkeypatch.setenv("SOR_GRAPH_LOG_LEVEL", "chatty")

    code = cli.main(["build", "--yaml-dir", str(corpus_dir), "--output-path", str(tmp_path / "graph.json")])

    assert code == 0
