"""Core package for the System-of-Record knowledge-graph build pipeline."""

from .build import PipelineResult, build_graph, write_artifact
from .errors import ArtifactError, DuplicateEntityError, GraphBuildError, RecordFileError
from .graph_model import CanvasNode, Combo, EdgeData, Entity, GraphData, GraphEdge, PipelineWarning
from .graph_orchestrator import GraphOrchestrator
from .phases import (
    EntityLookup,
    ParsedEntities,
    PipelineStats,
    assign_combos,
    extract_all_edges,
    parse_all_entities,
    parse_compatibility_matrix,
)
from .pipeline import PipelinePhase, PipelineRunner
from .validator import ValidationReport, validate_graph

__all__ = [
    "Entity",
    "CanvasNode",
    "EdgeData",
    "GraphEdge",
    "Combo",
    "GraphData",
    "PipelineWarning",
    "GraphOrchestrator",
    "PipelinePhase",
    "PipelineRunner",
    "ParsedEntities",
    "EntityLookup",
    "PipelineStats",
    "PipelineResult",
    "parse_all_entities",
    "extract_all_edges",
    "parse_compatibility_matrix",
    "assign_combos",
    "build_graph",
    "write_artifact",
    "validate_graph",
    "ValidationReport",
    "GraphBuildError",
    "RecordFileError",
    "DuplicateEntityError",
    "ArtifactError",
]
