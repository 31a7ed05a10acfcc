"""Graph data model primitives for the System-of-Record pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ENTITY_TYPES = (
    "problem",
    "mechanism",
    "cluster",
    "meta_challenge",
    "engagement_model",
    "foundation",
    "technology",
    "claim",
    "source",
    "implication",
)

# Types drawn on the canvas. Clusters, claims and sources never are.
CANVAS_ENTITY_TYPES = (
    "problem",
    "mechanism",
    "engagement_model",
    "meta_challenge",
    "foundation",
    "technology",
    "implication",
)

OFF_CANVAS_ENTITY_TYPES = ("claim", "source")

MAIN_CLUSTER_IDS = ("CL_A", "CL_B", "CL_C")


@dataclass
class Entity:
    id: str
    type: str
    label: str
    yaml_key: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "yamlKey": self.yaml_key,
            "data": self.data,
        }


@dataclass
class CanvasNode(Entity):
    combo_id: Optional[str] = None
    is_convergence_point: Optional[bool] = None
    secondary_clusters: Optional[List[str]] = None

    def to_json(self) -> Dict[str, Any]:
        payload = super().to_json()
        if self.combo_id is not None:
            payload["comboId"] = self.combo_id
        if self.is_convergence_point is not None:
            payload["isConvergencePoint"] = self.is_convergence_point
        if self.secondary_clusters is not None:
            payload["secondaryClusters"] = list(self.secondary_clusters)
        return payload


@dataclass
class EdgeData:
    label: Optional[str] = None
    rating: Optional[str] = None
    annotation: Optional[str] = None
    sub_type: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.label is not None:
            payload["label"] = self.label
        if self.rating is not None:
            payload["rating"] = self.rating
        if self.annotation is not None:
            payload["annotation"] = self.annotation
        if self.sub_type is not None:
            payload["subType"] = self.sub_type
        return payload


@dataclass
class GraphEdge:
    id: str
    source: str
    target: str
    edge_type: str
    data: EdgeData = field(default_factory=EdgeData)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "edgeType": self.edge_type,
            "data": self.data.to_json(),
        }


@dataclass
class Combo:
    id: str
    label: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "data": self.data}


@dataclass
class GraphData:
    canvas_nodes: List[CanvasNode] = field(default_factory=list)
    off_canvas_entities: List[Entity] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    combos: List[Combo] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "canvasNodes": [node.to_json() for node in self.canvas_nodes],
            "offCanvasEntities": [entity.to_json() for entity in self.off_canvas_entities],
            "edges": [edge.to_json() for edge in self.edges],
            "combos": [combo.to_json() for combo in self.combos],
        }


@dataclass
class PipelineWarning:
    source_entity: str
    field: str
    unresolved_value: str
    message: str

    def to_json(self) -> Dict[str, str]:
        return {
            "sourceEntity": self.source_entity,
            "field": self.field,
            "unresolvedValue": self.unresolved_value,
            "message": self.message,
        }
