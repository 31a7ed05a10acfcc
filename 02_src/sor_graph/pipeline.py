"""Phase contract and the sequential runner that threads a shared context."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


class PipelinePhase(ABC):
    """One step of the build.

    ``requires`` names context keys read by ``run``; ``provides`` names the
    keys its returned dict must carry. The runner checks both.
    """

    phase_name: str
    requires: Tuple[str, ...] = ()
    provides: Tuple[str, ...] = ()

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class PipelineRunner:
    def __init__(self, phases: Iterable[PipelinePhase]) -> None:
        self.phases: List[PipelinePhase] = list(phases)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Run every phase in order, merging each result into a copy of `context`."""
        shared = dict(context)
        for phase in self.phases:
            self._check_requirements(phase, shared)
            started = time.perf_counter()
            produced = phase.run(shared)
            self._check_output(phase, produced)
            shared.update(produced)
            logger.debug("Phase %s finished in %.3fs", phase.phase_name, time.perf_counter() - started)
        return shared

    @staticmethod
    def _check_requirements(phase: PipelinePhase, shared: Dict[str, Any]) -> None:
        missing = [key for key in phase.requires if key not in shared]
        if missing:
            raise KeyError(f"Phase '{phase.phase_name}' is missing context keys: {', '.join(missing)}")

    @staticmethod
    def _check_output(phase: PipelinePhase, produced: Any) -> None:
        if not isinstance(produced, dict):
            raise TypeError(f"Phase '{phase.phase_name}' must return a dict, got {type(produced).__name__}.")
        absent = [key for key in phase.provides if key not in produced]
        if absent:
            raise KeyError(f"Phase '{phase.phase_name}' did not provide: {', '.join(absent)}")
