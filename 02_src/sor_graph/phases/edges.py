"""Cross-reference edge extraction.

Every reference-bearing field of every record type is declared once in a
field table below. The generic walker resolves each reference through the
lookup and emits one typed edge per resolved target. Only three shapes get
dedicated code: cluster-letter fields, meta-challenge vulnerability keys and
the cross-cluster records whose edges are rehomed onto a problem.
"""

import logging
import re
from typing import Any, Iterator, List, NamedTuple, Optional, Sequence

from ..graph_model import MAIN_CLUSTER_IDS, EdgeData, Entity, GraphEdge
from ..graph_orchestrator import GraphOrchestrator
from ..text import cluster_letter_to_id, extract_cluster_letters
from .ingestion import ParsedEntities
from .reference_resolver import EntityLookup, ResolutionContext

logger = logging.getLogger(__name__)

_META_CHALLENGE_KEY_RE = re.compile(r"^(MC\d+)")


class FieldRule(NamedTuple):
    # Dotted path into the record; "name[]" walks each item of a list.
    field: str
    edge_type: str
    sub_type: Optional[str] = None


PROBLEM_FIELDS = (
    FieldRule("mechanisms", "problem_mechanism"),
    FieldRule("claims", "problem_claim"),
)

MECHANISM_FIELDS = (
    FieldRule("affects_problems", "mechanism_problem"),
    FieldRule("favours_models", "mechanism_model_favours", "favours"),
    FieldRule("disfavours_models", "mechanism_model_disfavours", "disfavours"),
    FieldRule("underlies_challenges", "mechanism_meta_challenge"),
)

MAIN_CLUSTER_FIELDS = (
    FieldRule("members[].problem", "cluster_problem"),
    FieldRule("primary_mechanism", "cluster_mechanism"),
    FieldRule("claims", "cluster_claim"),
)

# Sourced from the problem a cross-cluster record annotates, not the record.
CROSS_CLUSTER_FIELDS = (
    FieldRule("claims", "problem_claim"),
    FieldRule("affects", "problem_amplifies_cluster"),
)

META_CHALLENGE_FIELDS = (
    FieldRule("favours_models", "meta_challenge_model_favours", "favours"),
    FieldRule("disfavours_models", "meta_challenge_model_disfavours", "disfavours"),
    FieldRule("claims", "meta_challenge_claim"),
    FieldRule("compound_effects.amplifies", "meta_challenge_amplifies"),
)

ENGAGEMENT_MODEL_FIELDS = (
    FieldRule("claims", "model_claim"),
    FieldRule("primary_problems", "model_problem_primary", "primary"),
    FieldRule("secondary_problems", "model_problem_secondary", "secondary"),
)

FOUNDATION_FIELDS = (
    FieldRule("required_by.required", "foundation_model_required", "required"),
    FieldRule("required_by.optional", "foundation_model_optional", "optional"),
    FieldRule("technology_ref", "foundation_technology"),
)

TECHNOLOGY_FIELDS = (
    FieldRule("serves_foundations", "technology_foundation"),
    FieldRule("needed_by_models.required", "technology_model_required", "required"),
    FieldRule("needed_by_models.optional", "technology_model_optional", "optional"),
    FieldRule("relevant_claims", "technology_claim"),
)

CLAIM_FIELDS = (
    FieldRule("sources", "claim_source"),
    FieldRule("relationships.supports", "claim_supports"),
    FieldRule("relationships.challenged_by", "claim_challenged_by"),
    FieldRule("relationships.depends_on", "claim_depends_on"),
)

IMPLICATION_FIELDS = (
    FieldRule("evidence", "implication_claim"),
)


def string_refs(value: Any) -> Iterator[str]:
    """Yield reference strings from a scalar or a list of scalars."""
    if value is None or isinstance(value, dict):
        return
    if isinstance(value, list):
        for item in value:
            if item is None or isinstance(item, (dict, list)):
                continue
            yield str(item)
        return
    yield str(value)


def collect_refs(value: Any, path: Sequence[str]) -> Iterator[str]:
    if not path:
        yield from string_refs(value)
        return
    if not isinstance(value, dict):
        return
    head, rest = path[0], path[1:]
    if head.endswith("[]"):
        items = value.get(head[:-2])
        if isinstance(items, list):
            for item in items:
                yield from collect_refs(item, rest)
        return
    yield from collect_refs(value.get(head), rest)


class EdgeExtractor:
    """Walks parsed records and emits edges into a shared orchestrator."""

    def __init__(self, lookup: EntityLookup, orchestrator: GraphOrchestrator) -> None:
        self.lookup = lookup
        self.orchestrator = orchestrator

    def extract(self, parsed: ParsedEntities) -> None:
        for problem in parsed.problems:
            self._walk(problem, PROBLEM_FIELDS)
            self._add_cluster_letter_edges(problem, problem.data.get("cluster"), "problem_cluster")

        for mechanism in parsed.mechanisms:
            self._walk(mechanism, MECHANISM_FIELDS)

        for cluster in parsed.clusters:
            if cluster.id in MAIN_CLUSTER_IDS:
                self._walk(cluster, MAIN_CLUSTER_FIELDS)
            else:
                self._extract_cross_cluster(cluster)

        for challenge in parsed.meta_challenges:
            for ref in string_refs(challenge.data.get("clusters_affected")):
                self._add_cluster_letter_edges(challenge, ref, "meta_challenge_cluster")
            self._walk(challenge, META_CHALLENGE_FIELDS)

        for model in parsed.engagement_models:
            self._walk(model, ENGAGEMENT_MODEL_FIELDS)
            self._add_vulnerability_edges(model)

        for foundation in parsed.foundations:
            self._walk(foundation, FOUNDATION_FIELDS)

        for technology in parsed.technologies:
            self._walk(technology, TECHNOLOGY_FIELDS)

        for claim in parsed.claims:
            self._walk(claim, CLAIM_FIELDS)

        for implication in parsed.implications:
            self._walk(implication, IMPLICATION_FIELDS)

    def _walk(self, entity: Entity, rules: Sequence[FieldRule], source_id: Optional[str] = None) -> None:
        source_id = source_id or entity.id
        for rule in rules:
            context = ResolutionContext(source_entity=source_id, field=rule.field)
            for ref in collect_refs(entity.data, rule.field.split(".")):
                target_id = self.lookup.resolve(ref, context)
                if target_id is not None:
                    self.orchestrator.add_edge(rule.edge_type, source_id, target_id, EdgeData(sub_type=rule.sub_type))

    def _extract_cross_cluster(self, cluster: Entity) -> None:
        problem_ref = cluster.data.get("problem")
        if not problem_ref:
            logger.debug("Cross-cluster record %s names no problem; skipped", cluster.id)
            return
        problem_id = self.lookup.resolve(problem_ref, ResolutionContext(cluster.id, "problem"))
        if problem_id is None:
            return

        self._walk(cluster, CROSS_CLUSTER_FIELDS, source_id=problem_id)

        # Inbound influence: the referenced cluster feeds the problem.
        context = ResolutionContext(cluster.id, "receives_from")
        for ref in string_refs(cluster.data.get("receives_from")):
            cluster_id = self.lookup.resolve(ref, context)
            if cluster_id is not None:
                self.orchestrator.add_edge("cluster_feeds_problem", cluster_id, problem_id)

    def _add_cluster_letter_edges(self, entity: Entity, cluster_field: Any, edge_type: str) -> None:
        if not cluster_field:
            return
        text = str(cluster_field).strip()
        letters = extract_cluster_letters(text)
        if not letters and edge_type == "meta_challenge_cluster":
            letters = [text]
        for letter in letters:
            cluster_id = cluster_letter_to_id(letter)
            if self.lookup.has(cluster_id):
                self.orchestrator.add_edge(edge_type, entity.id, cluster_id)

    def _add_vulnerability_edges(self, model: Entity) -> None:
        vulnerability = model.data.get("meta_challenge_vulnerability")
        if not isinstance(vulnerability, dict):
            return
        for key in vulnerability:
            match = _META_CHALLENGE_KEY_RE.match(str(key))
            if match and self.lookup.has(match.group(1)):
                self.orchestrator.add_edge("model_meta_vulnerability", model.id, match.group(1))


def extract_all_edges(
    parsed: ParsedEntities,
    lookup: EntityLookup,
    orchestrator: Optional[GraphOrchestrator] = None,
) -> List[GraphEdge]:
    """Extract every cross-reference edge; returns only the edges added here."""
    orchestrator = orchestrator or GraphOrchestrator()
    start = len(orchestrator.state.edges)
    EdgeExtractor(lookup, orchestrator).extract(parsed)
    edges = orchestrator.edges_since(start)
    logger.info("Extracted %d entity edges", len(edges))
    return edges
