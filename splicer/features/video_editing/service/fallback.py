import logging
from dataclasses import dataclass
from threading import Event
from typing import List, Optional, Sequence, Tuple

from ..domain.exceptions import EngineError
from ..domain.interfaces import IMediaEngine
from ..domain.models import EngineInvocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """A named way of producing one output, e.g. "stream-copy"."""
    name: str
    invocation: EngineInvocation


def run_strategies(engine: IMediaEngine, strategies: Sequence[Strategy], cancel_event: Optional[Event] = None) -> str:
    """
    Tries each strategy in order until one succeeds.

    Returns:
        The name of the strategy that produced the output.

    Raises:
        EngineError: If every strategy failed. The message lists each
            attempt as "<name> failed: <diagnostics>", one per line.
        EditCancelled: Propagated as-is; no further strategy is tried.
    """
    attempts: List[Tuple[str, str]] = []
    for strategy in strategies:
        result = engine.run(strategy.invocation, cancel_event)
        if result.succeeded:
            if attempts:
                logger.info(f"{strategy.name} succeeded after {len(attempts)} failed attempt(s)")
            return strategy.name
        attempts.append((strategy.name, result.output))
        logger.warning(f"{strategy.name} failed: {result.output}")

    message = "\n".join(f"{name} failed: {output}" for name, output in attempts).strip()
    raise EngineError(message, attempts)
