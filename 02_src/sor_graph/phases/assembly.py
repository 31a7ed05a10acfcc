"""Graph assembly phase: off-canvas split and integrity statistics."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from ..graph_model import OFF_CANVAS_ENTITY_TYPES, GraphData
from ..pipeline import PipelinePhase

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    node_counts_by_type: Dict[str, int] = field(default_factory=dict)
    canvas_node_count: int = 0
    off_canvas_count: int = 0
    edge_count: int = 0
    edge_counts_by_type: Dict[str, int] = field(default_factory=dict)
    combo_count: int = 0
    combo_membership: Dict[str, int] = field(default_factory=dict)
    warning_count: int = 0


def compute_stats(graph: GraphData, warning_count: int) -> PipelineStats:
    node_counts: Dict[str, int] = {}
    for entity in [*graph.canvas_nodes, *graph.off_canvas_entities]:
        node_counts[entity.type] = node_counts.get(entity.type, 0) + 1

    edge_counts: Dict[str, int] = {}
    for edge in graph.edges:
        edge_counts[edge.edge_type] = edge_counts.get(edge.edge_type, 0) + 1

    membership = {
        combo.id: sum(1 for node in graph.canvas_nodes if node.combo_id == combo.id)
        for combo in graph.combos
    }

    return PipelineStats(
        node_counts_by_type=node_counts,
        canvas_node_count=len(graph.canvas_nodes),
        off_canvas_count=len(graph.off_canvas_entities),
        edge_count=len(graph.edges),
        edge_counts_by_type=edge_counts,
        combo_count=len(graph.combos),
        combo_membership=membership,
        warning_count=warning_count,
    )


class GraphAssemblyPhase(PipelinePhase):
    phase_name = "assembly"
    requires = ("parsed_entities", "lookup", "orchestrator", "combo_assignment")
    provides = ("graph", "warnings", "stats")

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        orchestrator = context["orchestrator"]
        off_canvas = [
            entity for entity in context["parsed_entities"].all if entity.type in OFF_CANVAS_ENTITY_TYPES
        ]
        orchestrator.set_nodes(context["combo_assignment"].canvas_nodes, off_canvas)

        warnings = list(context["lookup"].warnings)
        stats = compute_stats(orchestrator.state, len(warnings))
        logger.info(
            "Assembled graph: canvas=%d off_canvas=%d edges=%d combos=%d warnings=%d",
            stats.canvas_node_count,
            stats.off_canvas_count,
            stats.edge_count,
            stats.combo_count,
            stats.warning_count,
        )
        return {"graph": orchestrator.state, "warnings": warnings, "stats": stats}
