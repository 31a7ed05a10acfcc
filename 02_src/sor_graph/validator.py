"""Structural integrity checks for an assembled graph artifact."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from .errors import ArtifactError


@dataclass
class ValidationReport:
    edge_reference_errors: List[str] = field(default_factory=list)
    combo_reference_errors: List[str] = field(default_factory=list)
    duplicate_edge_errors: List[str] = field(default_factory=list)
    # Orphans are warnings; they never fail validation.
    warnings: List[str] = field(default_factory=list)
    canvas_node_count: int = 0
    off_canvas_count: int = 0
    edge_count: int = 0
    combo_count: int = 0

    @property
    def errors(self) -> List[str]:
        return [*self.edge_reference_errors, *self.combo_reference_errors, *self.duplicate_edge_errors]

    @property
    def passed(self) -> bool:
        return not self.errors


def load_artifact(path: Union[str, Path]) -> Dict[str, Any]:
    artifact_path = Path(path)
    if not artifact_path.is_file():
        raise ArtifactError(f"Graph artifact not found: {artifact_path}")
    try:
        payload = json.loads(artifact_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ArtifactError(f"Graph artifact is not valid JSON: {artifact_path}: {error.msg}") from error
    if not isinstance(payload, dict):
        raise ArtifactError(f"Graph artifact must be a JSON object: {artifact_path}")
    return payload


def _items(artifact: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = artifact.get(key) or []
    return [item for item in value if isinstance(item, dict)]


def validate_graph(artifact: Dict[str, Any]) -> ValidationReport:
    """Check edge endpoints, combo references, edge id uniqueness and orphans.

    The first three are errors. Orphans (entities touched by no edge) are
    warnings only and never fail the report.
    """
    canvas_nodes = _items(artifact, "canvasNodes")
    off_canvas = _items(artifact, "offCanvasEntities")
    edges = _items(artifact, "edges")
    combos = _items(artifact, "combos")

    report = ValidationReport(
        canvas_node_count=len(canvas_nodes),
        off_canvas_count=len(off_canvas),
        edge_count=len(edges),
        combo_count=len(combos),
    )

    node_ids: Set[str] = {str(node.get("id")) for node in [*canvas_nodes, *off_canvas]}
    combo_ids: Set[str] = {str(combo.get("id")) for combo in combos}
    known_ids = node_ids | combo_ids

    reported: Set[str] = set()
    for edge in edges:
        for end in ("source", "target"):
            endpoint = str(edge.get(end))
            if endpoint in known_ids:
                continue
            marker = f"{edge.get('id')}:{end}:{endpoint}"
            if marker in reported:
                continue
            reported.add(marker)
            report.edge_reference_errors.append(
                f"Edge {edge.get('id')} ({edge.get('edgeType')}) references missing {end}: {endpoint}"
            )

    for node in canvas_nodes:
        combo_id = node.get("comboId")
        if combo_id and combo_id not in combo_ids:
            report.combo_reference_errors.append(f"Node {node.get('id')} references missing combo: {combo_id}")
        for secondary in node.get("secondaryClusters") or []:
            if secondary not in combo_ids:
                report.combo_reference_errors.append(
                    f"Node {node.get('id')} secondary cluster references missing combo: {secondary}"
                )

    seen_edge_ids: Set[str] = set()
    for edge in edges:
        edge_id = str(edge.get("id"))
        if edge_id in seen_edge_ids:
            report.duplicate_edge_errors.append(f"Duplicate edge ID: {edge_id}")
        seen_edge_ids.add(edge_id)

    connected: Set[str] = set()
    for edge in edges:
        connected.add(str(edge.get("source")))
        connected.add(str(edge.get("target")))
    for entity in [*canvas_nodes, *off_canvas]:
        if str(entity.get("id")) not in connected:
            report.warnings.append(f"{entity.get('id')} ({entity.get('type')}: {entity.get('label')})")

    return report
