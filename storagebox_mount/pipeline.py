from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .context import MountContext

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single pipeline stage."""

    step_id: str

    def run(self, ctx: MountContext) -> MountContext:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ctx: MountContext
    ran_steps: List[str]


def run_pipeline(
    *,
    ctx: MountContext,
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order; any exception runs the cleanup contract and re-raises.

    Cancellation is observed between steps (and by steps at their own
    checkpoints) through ``ctx.cancel``.
    """

    ran: List[str] = []
    try:
        for step in steps:
            ctx.cancel.check()
            logger.info("Running step %s", step.step_id)
            ctx = step.run(ctx)
            ran.append(step.step_id)

            if stop_after is not None and step.step_id == stop_after:
                logger.info("Stopping after %s", stop_after)
                break
    except BaseException:
        logger.info("Pipeline aborted after %s; cleaning up", ran[-1] if ran else "start")
        ctx.cleanup.run()
        raise

    ctx.cleanup.commit()
    return PipelineResult(ctx=ctx, ran_steps=ran)
