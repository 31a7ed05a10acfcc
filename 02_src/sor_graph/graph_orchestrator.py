"""Deterministic orchestrator for graph state mutations."""

from typing import Any, Dict, Iterable, List, Optional

from .graph_model import CanvasNode, Combo, EdgeData, Entity, GraphData, GraphEdge


class GraphOrchestrator:
    """Owns edge identifiers and the assembled graph state.

    Edge ids are ``e_<edge_type>_<n>`` with one running counter per edge
    type, so they depend only on the order in which edges are added.
    Endpoints are not checked here; the validator does that on the artifact.
    """

    def __init__(self) -> None:
        self.state = GraphData()
        self._edge_counters: Dict[str, int] = {}

    def add_edge(
        self,
        edge_type: str,
        source_id: str,
        target_id: str,
        data: Optional[EdgeData] = None,
    ) -> GraphEdge:
        edge = GraphEdge(
            id=self._next_edge_id(edge_type),
            source=source_id,
            target=target_id,
            edge_type=edge_type,
            data=data or EdgeData(),
        )
        self.state.edges.append(edge)
        return edge

    def set_nodes(self, canvas_nodes: Iterable[CanvasNode], off_canvas_entities: Iterable[Entity]) -> None:
        self.state.canvas_nodes = list(canvas_nodes)
        self.state.off_canvas_entities = list(off_canvas_entities)

    def set_combos(self, combos: Iterable[Combo]) -> None:
        self.state.combos = list(combos)

    def edges_since(self, start: int) -> List[GraphEdge]:
        return self.state.edges[start:]

    def to_json(self) -> Dict[str, Any]:
        return self.state.to_json()

    def _next_edge_id(self, edge_type: str) -> str:
        counter = self._edge_counters.get(edge_type, 0)
        self._edge_counters[edge_type] = counter + 1
        return f"e_{edge_type}_{counter}"
