"""Run several independent grids at once."""

import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence

from ..domain.types import GridConfig, LearningConfig, TrainingReport
from ..utils.grid_factory import create_training_run

logger = logging.getLogger(__name__)

ExecutorKind = Literal["process", "thread"]


@dataclass
class RunPlan:
    """Everything needed to build one independent training run."""
    grid_config: GridConfig
    learning_config: LearningConfig
    seed: Optional[int] = None
    run_id: Optional[str] = None


@dataclass
class RunOutcome:
    """Report of a finished run, or the error that stopped it."""
    index: int
    report: Optional[TrainingReport] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def train_one(plan: RunPlan) -> TrainingReport:
    """Build and train a single grid. Runs inside a worker."""
    driver = create_training_run(plan.grid_config, plan.learning_config,
                                 seed=plan.seed, run_id=plan.run_id)
    return driver.run()


def _make_executor(kind: ExecutorKind, max_workers: Optional[int]) -> Executor:
    if kind == "process":
        return ProcessPoolExecutor(max_workers=max_workers)
    if kind == "thread":
        return ThreadPoolExecutor(max_workers=max_workers)
    raise ValueError(f"Unknown executor kind: {kind}")


def run_parallel(plans: Sequence[RunPlan], max_workers: Optional[int] = None,
                 executor: ExecutorKind = "process") -> List[RunOutcome]:
    """
    Train every plan as an isolated task and wait for all of them.

    Runs share no state. A failing run is reported in its outcome and does
    not stop the others. Outcomes come back in the order of ``plans``.
    """
    with _make_executor(executor, max_workers) as pool:
        futures = [pool.submit(train_one, plan) for plan in plans]
        outcomes = []
        for index, future in enumerate(futures):
            error = future.exception()
            if error is not None:
                logger.error("Run %d failed: %s", index, error)
                outcomes.append(RunOutcome(index=index, error=error))
            else:
                outcomes.append(RunOutcome(index=index, report=future.result()))
    return outcomes
