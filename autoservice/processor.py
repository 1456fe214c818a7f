"""Processor lifecycle: the thin adapter between a host and the core.

    CONFIGURED --process()--> COLLECTING --(collect, emit)--> EMITTED
         ^                                                      |
         +--------------------- process() (next round) ---------+

A failed round drops its grouping and returns to CONFIGURED before the error
propagates. ``finish()`` ends the invocation; later rounds are refused.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from autoservice.codegen import CodeGenerator
from autoservice.collector import collect
from autoservice.emitter import emit
from autoservice.errors import ProcessorStateError, ServiceProcessingError
from autoservice.model import Artifact, Grouping, MarkerOccurrence
from autoservice.utils.constants import OPTION_VERBOSE, OPTION_VERIFY
from autoservice.utils.logging import logger


class Resolver(Protocol):
    """Input capability provided by the host compiler."""

    def symbols_with_marker(self) -> Iterable[MarkerOccurrence]:
        """All marker occurrences visible in the current round."""
        ...


def _to_bool(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


@dataclass(frozen=True)
class ProcessorOptions:
    verify: bool = False
    verbose: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, str]) -> "ProcessorOptions":
        """Read ``autoservice.verify`` / ``autoservice.verbose`` from host options.

        Only the case-insensitive string ``true`` enables an option.
        """
        return cls(
            verify=_to_bool(options.get(OPTION_VERIFY)),
            verbose=_to_bool(options.get(OPTION_VERBOSE)),
        )


class Phase(Enum):
    CONFIGURED = "configured"
    COLLECTING = "collecting"
    EMITTED = "emitted"


class ServiceProcessor:
    """Runs collection and emission rounds for one build invocation."""

    def __init__(self, options: ProcessorOptions, code_generator: CodeGenerator):
        self.options = options
        self.code_generator = code_generator
        self.phase = Phase.CONFIGURED
        self.rounds = 0
        self._finished = False

    def process(self, resolver: Resolver) -> list[Artifact]:
        """Run one round over everything ``resolver`` exposes.

        Returns:
            The manifests written in this round

        Raises:
            ServiceProcessingError: On the first fatal problem of the round
        """
        if self._finished:
            raise ProcessorStateError("process() called after finish()")

        self.phase = Phase.COLLECTING
        grouping = Grouping()
        try:
            collect(
                resolver.symbols_with_marker(),
                grouping,
                verify=self.options.verify,
                log=self._log,
            )
            artifacts = emit(grouping, self.code_generator, log=self._log)
        except ServiceProcessingError:
            grouping.clear()
            self.phase = Phase.CONFIGURED
            raise

        self.phase = Phase.EMITTED
        self.rounds += 1
        return artifacts

    def finish(self) -> None:
        self._finished = True
        self._log(f"Finished after {self.rounds} round(s)")

    def _log(self, message: str) -> None:
        if self.options.verbose:
            logger.info(message)
