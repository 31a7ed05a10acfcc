"""
Error classes for the graph build pipeline.

Only fatal conditions are exceptions. Unresolved references and orphan
nodes are reported as data (see PipelineWarning and ValidationReport).
"""


class GraphBuildError(Exception):
    """Base error for graph build operations."""


class RecordFileError(GraphBuildError):
    """A required YAML file is missing or malformed."""

    def __init__(self, path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class DuplicateEntityError(GraphBuildError):
    """Two records share one id in the global entity namespace."""

    def __init__(self, entity_id: str, first_file: str, second_file: str) -> None:
        self.entity_id = entity_id
        super().__init__(
            f"Duplicate entity id '{entity_id}' in {second_file} (already defined in {first_file})"
        )


class ArtifactError(GraphBuildError):
    """The graph artifact could not be read."""
