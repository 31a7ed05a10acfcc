"""Compatibility matrix parsing.

compatibility.yaml carries two sections of pure free text:

1. problem/cluster display name -> engagement model display name -> S/P/X
2. ``meta_challenge_vulnerability``: model name -> challenge name -> H/M/L

Both axes of both sections go through the same lookup cascade.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..graph_model import EdgeData, GraphEdge
from ..graph_orchestrator import GraphOrchestrator
from .ingestion import COMPATIBILITY_FILE, read_yaml_mapping
from .reference_resolver import EntityLookup, ResolutionContext

logger = logging.getLogger(__name__)

VULNERABILITY_SECTION = "meta_challenge_vulnerability"
SUMMARY_KEY = "summary"
SOURCE_ENTITY = "compatibility"


def _rating(cell: Any) -> str:
    return str(cell).strip()


class CompatibilityMatrixParser:
    def __init__(self, lookup: EntityLookup, orchestrator: GraphOrchestrator) -> None:
        self.lookup = lookup
        self.orchestrator = orchestrator

    def parse(self, matrix: dict) -> None:
        for key, value in matrix.items():
            if key == VULNERABILITY_SECTION:
                self._parse_vulnerability(value)
            else:
                self._parse_compatibility_row(str(key), value)

    def _parse_compatibility_row(self, row_name: str, ratings: Any) -> None:
        if not isinstance(ratings, dict):
            logger.info("Skipping compatibility row %r: expected a mapping of model ratings", row_name)
            return
        source_id = self.lookup.resolve(row_name, ResolutionContext(SOURCE_ENTITY, "problem_model_compatibility"))
        if source_id is None:
            return

        context = ResolutionContext(SOURCE_ENTITY, f"compatibility.{row_name}")
        for model_name, cell in ratings.items():
            model_id = self.lookup.resolve(model_name, context)
            if model_id is None:
                continue
            rating = _rating(cell)
            self.orchestrator.add_edge(
                "compatibility_rating",
                source_id,
                model_id,
                EdgeData(rating=rating, label=f"{rating} compatibility"),
            )

    def _parse_vulnerability(self, section: Any) -> None:
        if not isinstance(section, dict):
            logger.info("Skipping %s: expected a mapping of models", VULNERABILITY_SECTION)
            return
        for model_name, challenges in section.items():
            if not isinstance(challenges, dict):
                logger.info("Skipping vulnerability entry %r: expected a mapping of challenges", model_name)
                continue
            model_id = self.lookup.resolve(model_name, ResolutionContext(SOURCE_ENTITY, VULNERABILITY_SECTION))
            if model_id is None:
                continue

            context = ResolutionContext(SOURCE_ENTITY, f"{VULNERABILITY_SECTION}.{model_name}")
            for challenge_name, cell in challenges.items():
                if challenge_name == SUMMARY_KEY:
                    continue
                challenge_id = self.lookup.resolve(challenge_name, context)
                if challenge_id is None:
                    continue
                rating = _rating(cell)
                self.orchestrator.add_edge(
                    "vulnerability_rating",
                    model_id,
                    challenge_id,
                    EdgeData(rating=rating, label=f"{rating} vulnerability"),
                )


def parse_compatibility_matrix(
    yaml_dir: Union[str, Path],
    lookup: EntityLookup,
    orchestrator: Optional[GraphOrchestrator] = None,
) -> List[GraphEdge]:
    """Parse compatibility.yaml into rating edges; returns only the edges added here."""
    orchestrator = orchestrator or GraphOrchestrator()
    matrix = read_yaml_mapping(yaml_dir, COMPATIBILITY_FILE)
    start = len(orchestrator.state.edges)
    CompatibilityMatrixParser(lookup, orchestrator).parse(matrix)
    edges = orchestrator.edges_since(start)
    logger.info("Parsed %d compatibility edges", len(edges))
    return edges
