"""Graph assembly entrypoint: YAML directory to graph artifact."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Union

from .graph_model import GraphData, PipelineWarning
from .graph_orchestrator import GraphOrchestrator
from .phases import (
    ComboAssignmentPhase,
    EdgeExtractionPhase,
    GraphAssemblyPhase,
    PipelineStats,
    RecordIngestionPhase,
    ReferenceResolverPhase,
)
from .pipeline import PipelinePhase, PipelineRunner

logger = logging.getLogger(__name__)


class PipelineResult(NamedTuple):
    graph: GraphData
    warnings: List[PipelineWarning]
    stats: PipelineStats


def build_default_phases() -> List[PipelinePhase]:
    return [
        RecordIngestionPhase(),
        ReferenceResolverPhase(),
        EdgeExtractionPhase(),
        ComboAssignmentPhase(),
        GraphAssemblyPhase(),
    ]


def build_graph(yaml_dir: Union[str, Path]) -> PipelineResult:
    """Run the full pipeline once. Raises GraphBuildError on bad input files."""
    initial_context: Dict[str, Any] = {
        "yaml_dir": yaml_dir,
        "orchestrator": GraphOrchestrator(),
    }
    runner = PipelineRunner(phases=build_default_phases())
    final_context = runner.run(initial_context)
    return PipelineResult(
        graph=final_context["graph"],
        warnings=final_context["warnings"],
        stats=final_context["stats"],
    )


def serialize_graph(graph: GraphData) -> str:
    # Explicitly tagged YAML values such as !!set or !!binary are written as strings.
    return json.dumps(graph.to_json(), ensure_ascii=False, indent=2, default=str)


def write_artifact(graph: GraphData, output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_graph(graph), encoding="utf-8")
    logger.info("Wrote graph artifact to %s", path)
    return path
