"""Sequential step runner with declared prerequisites."""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import httpx

from .models import PipelineContext, PipelineStepError

logger = logging.getLogger(__name__)

StepHandler = Callable[[PipelineContext], Awaitable[None]]


@dataclass
class PipelineStep:
    """One step: the context fields it needs and the coroutine that runs it."""

    name: str
    handler: StepHandler
    requires: tuple[str, ...] = field(default_factory=tuple)


class PipelineRunner:
    """Runs steps strictly in order and stops at the first failure.

    Completed steps are not rolled back.
    """

    def __init__(self, steps: list[PipelineStep]):
        self.steps = steps

    async def run(self, context: PipelineContext) -> list[str]:
        """
        Run every step against ``context``.

        Returns:
            Names of the completed steps

        Raises:
            PipelineStepError: On a missing prerequisite or a failing step
        """
        completed: list[str] = []
        for step in self.steps:
            missing = [name for name in step.requires if getattr(context, name) in (None, "")]
            if missing:
                raise PipelineStepError(
                    step.name, f"missing prior output: {', '.join(missing)}", completed
                )
            try:
                await step.handler(context)
            except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
                logger.error(f"{context.filename}: step '{step.name}' failed: {e}")
                raise PipelineStepError(step.name, str(e) or type(e).__name__, completed) from e
            completed.append(step.name)
            logger.debug(f"{context.filename}: step '{step.name}' done")
        return completed
