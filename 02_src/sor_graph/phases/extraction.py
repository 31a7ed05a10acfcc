"""Edge extraction phase powered by a LangGraph workflow."""

from pathlib import Path
from typing import Any, Dict, List

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from ..graph_model import GraphEdge
from ..graph_orchestrator import GraphOrchestrator
from ..pipeline import PipelinePhase
from . import compatibility, edges
from .ingestion import ParsedEntities
from .reference_resolver import EntityLookup


class ExtractionState(TypedDict):
    yaml_dir: Path
    parsed_entities: ParsedEntities
    lookup: EntityLookup
    orchestrator: GraphOrchestrator
    entity_edges: List[GraphEdge]
    compatibility_edges: List[GraphEdge]


class EdgeExtractionPhase(PipelinePhase):
    """Entity cross-references first, then the compatibility matrix.

    Both steps share one orchestrator, so edge ids come from a single set of
    per-type counters and the final edge order is entity edges followed by
    compatibility edges.
    """

    phase_name = "extraction"
    requires = ("yaml_dir", "parsed_entities", "lookup", "orchestrator")
    provides = ("entity_edges", "compatibility_edges")

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        workflow = self._build_workflow()
        result_state = workflow.invoke(
            {
                "yaml_dir": context["yaml_dir"],
                "parsed_entities": context["parsed_entities"],
                "lookup": context["lookup"],
                "orchestrator": context["orchestrator"],
                "entity_edges": [],
                "compatibility_edges": [],
            }
        )
        return {
            "entity_edges": result_state.get("entity_edges", []),
            "compatibility_edges": result_state.get("compatibility_edges", []),
        }

    def _build_workflow(self):
        graph = StateGraph(ExtractionState)
        graph.add_node("extract_entity_edges", self._extract_entity_edges)
        graph.add_node("extract_compatibility_edges", self._extract_compatibility_edges)
        graph.add_edge(START, "extract_entity_edges")
        graph.add_edge("extract_entity_edges", "extract_compatibility_edges")
        graph.add_edge("extract_compatibility_edges", END)
        return graph.compile()

    @staticmethod
    def _extract_entity_edges(state: ExtractionState) -> Dict[str, Any]:
        entity_edges = edges.extract_all_edges(state["parsed_entities"], state["lookup"], state["orchestrator"])
        return {"entity_edges": entity_edges}

    @staticmethod
    def _extract_compatibility_edges(state: ExtractionState) -> Dict[str, Any]:
        compatibility_edges = compatibility.parse_compatibility_matrix(
            state["yaml_dir"], state["lookup"], state["orchestrator"]
        )
        return {"compatibility_edges": compatibility_edges}
