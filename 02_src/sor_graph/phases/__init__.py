"""Pipeline phases for the System-of-Record graph build."""

from .ingestion import ParsedEntities, RecordIngestionPhase, parse_all_entities
from .reference_resolver import EntityLookup, ReferenceResolverPhase, ResolutionContext
from .compatibility import parse_compatibility_matrix
from .edges import extract_all_edges
from .extraction import EdgeExtractionPhase
from .combos import ComboAssignmentPhase, assign_combos
from .assembly import GraphAssemblyPhase, PipelineStats

__all__ = [
    "RecordIngestionPhase",
    "ReferenceResolverPhase",
    "EdgeExtractionPhase",
    "ComboAssignmentPhase",
    "GraphAssemblyPhase",
    "ParsedEntities",
    "EntityLookup",
    "ResolutionContext",
    "PipelineStats",
    "parse_all_entities",
    "assign_combos",
    "extract_all_edges",
    "parse_compatibility_matrix",
]
