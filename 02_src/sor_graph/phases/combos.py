"""Combo assignment phase: cluster membership for canvas nodes."""

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from ..graph_model import MAIN_CLUSTER_IDS, CanvasNode, Combo, Entity
from ..pipeline import PipelinePhase
from ..text import cluster_letter_to_id, extract_cluster_letters
from .ingestion import is_canvas_type

logger = logging.getLogger(__name__)


class Membership(NamedTuple):
    primary: Optional[str]
    secondary: List[str]

    @property
    def is_convergence(self) -> bool:
        return bool(self.secondary)


class ComboAssignment(NamedTuple):
    canvas_nodes: List[CanvasNode]
    combos: List[Combo]


def problem_membership(problem: Entity) -> Membership:
    """Primary and secondary clusters named by a problem's `cluster` field.

    No letters: standalone or cross-cluster amplifier, no combo. One letter:
    that cluster. Two or more: a convergence point whose first letter is the
    primary combo.
    """
    cluster_field = problem.data.get("cluster")
    letters = extract_cluster_letters(str(cluster_field)) if cluster_field else []
    if not letters:
        return Membership(primary=None, secondary=[])
    cluster_ids = [cluster_letter_to_id(letter) for letter in letters]
    return Membership(primary=cluster_ids[0], secondary=cluster_ids[1:])


def _canvas_node(entity: Entity) -> CanvasNode:
    node = CanvasNode(
        id=entity.id,
        type=entity.type,
        label=entity.label,
        yaml_key=entity.yaml_key,
        data=entity.data,
    )
    if entity.type == "problem":
        membership = problem_membership(entity)
        node.combo_id = membership.primary
        if membership.is_convergence:
            node.is_convergence_point = True
            node.secondary_clusters = list(membership.secondary)
    return node


def assign_combos(entities: Iterable[Entity]) -> ComboAssignment:
    entities = list(entities)
    canvas_nodes = [_canvas_node(entity) for entity in entities if is_canvas_type(entity.type)]
    # Every other cluster record is resolution-only metadata.
    combos = [
        Combo(id=entity.id, label=entity.label, data=entity.data)
        for entity in entities
        if entity.type == "cluster" and entity.id in MAIN_CLUSTER_IDS
    ]
    return ComboAssignment(canvas_nodes=canvas_nodes, combos=combos)


class ComboAssignmentPhase(PipelinePhase):
    phase_name = "combos"
    requires = ("parsed_entities", "orchestrator")
    provides = ("combo_assignment",)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        assignment = assign_combos(context["parsed_entities"].all)
        context["orchestrator"].set_combos(assignment.combos)
        logger.info(
            "Assigned %d canvas nodes across %d combos",
            len(assignment.canvas_nodes),
            len(assignment.combos),
        )
        return {"combo_assignment": assignment}
