"""Record ingestion phase: YAML System-of-Record files to entities."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Union

import yaml

from ..errors import DuplicateEntityError, RecordFileError
from ..graph_model import CANVAS_ENTITY_TYPES, Entity
from ..pipeline import PipelinePhase

logger = logging.getLogger(__name__)

CLAIM_LABEL_LIMIT = 60


class FileConvention(NamedTuple):
    filename: str
    entity_type: str
    attr: str
    # "field": id comes from the record's `id`; "key": the YAML key is the id.
    id_from: str
    # Record field used for the label, or None to label by YAML key.
    label_field: Optional[str]


FILE_CONVENTIONS = (
    FileConvention("problems.yaml", "problem", "problems", "field", None),
    FileConvention("clusters.yaml", "cluster", "clusters", "field", None),
    FileConvention("mechanisms.yaml", "mechanism", "mechanisms", "field", None),
    FileConvention("engagement_models.yaml", "engagement_model", "engagement_models", "field", None),
    FileConvention("meta_challenges.yaml", "meta_challenge", "meta_challenges", "field", None),
    FileConvention("foundations.yaml", "foundation", "foundations", "field", None),
    FileConvention("technologies.yaml", "technology", "technologies", "key", "name"),
    FileConvention("claims.yaml", "claim", "claims", "key", "statement"),
    FileConvention("sources.yaml", "source", "sources", "key", "name"),
    FileConvention("implications.yaml", "implication", "implications", "key", "name"),
)

COMPATIBILITY_FILE = "compatibility.yaml"

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class RecordLoader(yaml.SafeLoader):
    """SafeLoader that leaves unquoted dates as plain strings."""


RecordLoader.yaml_implicit_resolvers = {
    first_char: [(tag, pattern) for tag, pattern in resolvers if tag != _TIMESTAMP_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class ParsedEntities:
    problems: List[Entity] = field(default_factory=list)
    clusters: List[Entity] = field(default_factory=list)
    mechanisms: List[Entity] = field(default_factory=list)
    engagement_models: List[Entity] = field(default_factory=list)
    meta_challenges: List[Entity] = field(default_factory=list)
    foundations: List[Entity] = field(default_factory=list)
    technologies: List[Entity] = field(default_factory=list)
    claims: List[Entity] = field(default_factory=list)
    sources: List[Entity] = field(default_factory=list)
    implications: List[Entity] = field(default_factory=list)
    all: List[Entity] = field(default_factory=list)


def read_yaml_mapping(yaml_dir: Union[str, Path], filename: str) -> Dict[str, Any]:
    """Load one required YAML file whose top level must be a mapping."""
    path = Path(yaml_dir) / filename
    if not path.is_file():
        raise RecordFileError(path, "required file not found")
    try:
        payload = yaml.load(path.read_text(encoding="utf-8"), Loader=RecordLoader)
    except yaml.YAMLError as error:
        raise RecordFileError(path, f"invalid YAML: {error}") from error
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise RecordFileError(path, f"top level must be a mapping, got {type(payload).__name__}")
    return payload


def truncate_label(statement: str, limit: int = CLAIM_LABEL_LIMIT) -> str:
    if len(statement) <= limit:
        return statement
    return statement[: limit - 3].strip() + "..."


def _entity_from_record(convention: FileConvention, key: str, record: Any, path: Path) -> Entity:
    if not isinstance(record, dict):
        raise RecordFileError(path, f"record '{key}' must be a mapping")

    if convention.id_from == "field":
        raw_id = record.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            raise RecordFileError(path, f"record '{key}' has no 'id' field")
        entity_id = str(raw_id).strip()
    else:
        entity_id = key

    if convention.label_field == "statement":
        label = truncate_label(str(record.get("statement") or ""))
    elif convention.label_field:
        label = str(record.get(convention.label_field) or key)
    else:
        label = key

    return Entity(id=entity_id, type=convention.entity_type, label=label, yaml_key=key, data=record)


def parse_all_entities(yaml_dir: Union[str, Path]) -> ParsedEntities:
    """Parse every System-of-Record file into entities, one list per file."""
    parsed = ParsedEntities()
    seen: Dict[str, str] = {}

    for convention in FILE_CONVENTIONS:
        raw = read_yaml_mapping(yaml_dir, convention.filename)
        path = Path(yaml_dir) / convention.filename
        entities: List[Entity] = []
        for raw_key, record in raw.items():
            entity = _entity_from_record(convention, str(raw_key), record, path)
            if entity.id in seen:
                raise DuplicateEntityError(entity.id, seen[entity.id], convention.filename)
            seen[entity.id] = convention.filename
            entities.append(entity)
        setattr(parsed, convention.attr, entities)
        parsed.all.extend(entities)
        logger.info("Parsed %d %s records from %s", len(entities), convention.entity_type, convention.filename)

    return parsed


def is_canvas_type(entity_type: str) -> bool:
    return entity_type in CANVAS_ENTITY_TYPES


class RecordIngestionPhase(PipelinePhase):
    phase_name = "ingestion"
    requires = ("yaml_dir",)
    provides = ("yaml_dir", "parsed_entities")

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        yaml_dir = Path(str(context["yaml_dir"]))
        parsed = parse_all_entities(yaml_dir)
        return {"yaml_dir": yaml_dir, "parsed_entities": parsed}
