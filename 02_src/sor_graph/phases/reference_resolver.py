"""Reference resolver phase: entity index and free-text lookup cascade."""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..graph_model import Entity, PipelineWarning
from ..pipeline import PipelinePhase
from ..text import (
    cluster_letter_to_id,
    extract_cluster_letters,
    extract_parenthetical,
    strip_parentheticals,
    substring_match,
)

logger = logging.getLogger(__name__)

_TOKEN_SPLIT_RE = re.compile(r"[\s\-—]+")
_BARE_CLUSTER_LETTER_RE = re.compile(r"^[A-C]$")

MIN_SEARCH_LENGTH = 3
MIN_CONTAINED_KEY_LENGTH = 5
MIN_TOKEN_LENGTH = 3
MIN_TOKEN_COUNT = 2


class ResolutionContext(NamedTuple):
    source_entity: str
    field: str


class _Query(NamedTuple):
    """A reference pre-processed once for every tier."""

    trimmed: str
    stripped: str
    search: str
    tokens: Tuple[str, ...]


def _build_query(reference: str) -> _Query:
    trimmed = reference.strip()
    stripped = strip_parentheticals(trimmed)
    search = stripped or trimmed
    tokens = tuple(
        token for token in _TOKEN_SPLIT_RE.split(search.lower()) if len(token) >= MIN_TOKEN_LENGTH
    )
    return _Query(trimmed=trimmed, stripped=stripped, search=search, tokens=tokens)


class EntityLookup:
    """Resolve free-text references to entity ids.

    Tiers are tried in a fixed order and the first match wins:

    1. exact id
    2. exact YAML key, case-insensitive
    3. parenthetical content as an exact id ("Task Initiation Failure (FP01)")
    4. parentheticals stripped, then exact YAML key
    5. substring and word-level matching, non-cluster entities before clusters
    6. cluster letter ("A", "A — Description") mapped to ``CL_<letter>``

    Failures are appended to ``warnings``; ``resolve`` never raises.
    """

    def __init__(self) -> None:
        self._by_id: Dict[str, Entity] = {}
        self._by_yaml_key: Dict[str, Entity] = {}
        self._non_cluster: List[Entity] = []
        self._clusters: List[Entity] = []
        self.warnings: List[PipelineWarning] = []
        self._tiers: Tuple[Tuple[str, Callable[[_Query], Optional[str]]], ...] = (
            ("exact_id", self._match_exact_id),
            ("exact_key", self._match_exact_key),
            ("parenthetical_id", self._match_parenthetical_id),
            ("stripped_key", self._match_stripped_key),
            ("substring", self._match_substring),
            ("cluster_letter", self._match_cluster_letter),
        )

    def index(self, entities: Iterable[Entity]) -> None:
        for entity in entities:
            self._by_id[entity.id] = entity
            self._by_yaml_key[entity.yaml_key.lower()] = entity
            if entity.type == "cluster":
                self._clusters.append(entity)
            else:
                self._non_cluster.append(entity)

    def resolve(self, reference: Any, context: ResolutionContext) -> Optional[str]:
        query = _build_query("" if reference is None else str(reference))
        if query.trimmed:
            for tier_name, matcher in self._tiers:
                entity_id = matcher(query)
                if entity_id is not None:
                    logger.debug("Resolved %r via %s -> %s", query.trimmed, tier_name, entity_id)
                    return entity_id

        message = (
            f'Could not resolve reference "{query.trimmed}" from {context.source_entity}.{context.field}'
        )
        self.warnings.append(
            PipelineWarning(
                source_entity=context.source_entity,
                field=context.field,
                unresolved_value=query.trimmed,
                message=message,
            )
        )
        logger.info(message)
        return None

    def resolve_all(self, references: Iterable[Any], context: ResolutionContext) -> List[str]:
        resolved: List[str] = []
        for reference in references:
            entity_id = self.resolve(reference, context)
            if entity_id is not None:
                resolved.append(entity_id)
        return resolved

    def get(self, entity_id: str) -> Optional[Entity]:
        return self._by_id.get(entity_id)

    def has(self, entity_id: str) -> bool:
        return entity_id in self._by_id

    # Tier 1
    def _match_exact_id(self, query: _Query) -> Optional[str]:
        return query.trimmed if query.trimmed in self._by_id else None

    # Tier 2
    def _match_exact_key(self, query: _Query) -> Optional[str]:
        entity = self._by_yaml_key.get(query.trimmed.lower())
        return entity.id if entity else None

    # Tier 3
    def _match_parenthetical_id(self, query: _Query) -> Optional[str]:
        content = extract_parenthetical(query.trimmed)
        if content and content in self._by_id:
            return content
        return None

    # Tier 4
    def _match_stripped_key(self, query: _Query) -> Optional[str]:
        if not query.stripped or query.stripped == query.trimmed:
            return None
        entity = self._by_yaml_key.get(query.stripped.lower())
        return entity.id if entity else None

    # Tier 5
    def _match_substring(self, query: _Query) -> Optional[str]:
        if len(query.search) < MIN_SEARCH_LENGTH:
            return None

        for entity in self._non_cluster:
            if substring_match(entity.yaml_key, query.search):
                return entity.id

        for entity in self._non_cluster:
            if len(entity.yaml_key) >= MIN_CONTAINED_KEY_LENGTH and substring_match(query.search, entity.yaml_key):
                return entity.id

        use_tokens = len(query.tokens) >= MIN_TOKEN_COUNT
        if use_tokens:
            for entity in self._non_cluster:
                if self._has_all_tokens(entity.yaml_key, query.tokens) or self._has_all_tokens(
                    entity.label, query.tokens
                ):
                    return entity.id

        # Clusters only after every non-cluster attempt came up empty.
        for entity in self._clusters:
            if substring_match(entity.yaml_key, query.search):
                return entity.id
        if use_tokens:
            for entity in self._clusters:
                if self._has_all_tokens(entity.yaml_key, query.tokens):
                    return entity.id
        return None

    # Tier 6
    def _match_cluster_letter(self, query: _Query) -> Optional[str]:
        letters = extract_cluster_letters(query.trimmed)
        if len(letters) == 1:
            cluster_id = cluster_letter_to_id(letters[0])
            if cluster_id in self._by_id:
                return cluster_id
        if _BARE_CLUSTER_LETTER_RE.match(query.trimmed):
            cluster_id = cluster_letter_to_id(query.trimmed)
            if cluster_id in self._by_id:
                return cluster_id
        return None

    @staticmethod
    def _has_all_tokens(text: str, tokens: Tuple[str, ...]) -> bool:
        lowered = text.lower()
        return all(token in lowered for token in tokens)


class ReferenceResolverPhase(PipelinePhase):
    phase_name = "reference_resolver"
    requires = ("parsed_entities",)
    provides = ("lookup",)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        lookup = EntityLookup()
        lookup.index(context["parsed_entities"].all)
        return {"lookup": lookup}
