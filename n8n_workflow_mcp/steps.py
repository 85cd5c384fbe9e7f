"""Ordered, named steps for multi-step operations.

A fatal step stops the run at its first failure. A recoverable step records
its error and lets the following steps run.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from .exceptions import StepFailedError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Step:
    """A named unit of work.

    Attributes:
        name: Step name reported in errors and results
        action: Coroutine function run with no arguments
        recoverable: Whether a failure lets the run continue
    """
    name: str
    action: Callable[[], Awaitable[Any]]
    recoverable: bool = False


@dataclass
class StepOutcome:
    """What one step produced."""
    name: str
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_steps(steps: Iterable[Step]) -> List[StepOutcome]:
    """Run steps one after another.

    Args:
        steps: Steps in execution order

    Returns:
        Outcome of every step that ran, in order

    Raises:
        StepFailedError: When a non-recoverable step fails
    """
    outcomes: List[StepOutcome] = []

    for step in steps:
        logger.debug("Running step", extra={"step": step.name})
        try:
            value = await step.action()
        except Exception as e:
            if not step.recoverable:
                raise StepFailedError(step.name, e) from e
            logger.warning(
                "Recoverable step failed",
                extra={"step": step.name, "error": str(e)}
            )
            outcomes.append(StepOutcome(name=step.name, error=e))
            continue
        outcomes.append(StepOutcome(name=step.name, value=value))

    return outcomes
