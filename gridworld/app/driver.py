"""Training driver: runs the learning engine until its exploration rate converges."""

import logging
import time
import uuid
from typing import Callable, Optional

from ..domain.exceptions import ConfigurationError
from ..domain.sarsa_lambda import LearningEngine
from ..domain.types import BoardSnapshot, Checkpoint, RunState, TrainingReport

logger = logging.getLogger(__name__)

CheckpointCallback = Callable[[Checkpoint], None]
BoardCallback = Callable[[str, BoardSnapshot], None]


def new_run_id() -> str:
    """Short random identifier for a run."""
    return uuid.uuid4().hex[:5]


class TrainingDriver:
    """
    Steps a :class:`LearningEngine` while its exploration rate is above the threshold.

    The driver only counts and reports. Collaborators receive checkpoints
    every ``checkpoint_interval`` actions and a board snapshot before and
    after training (stage ``"initial"`` and ``"final"``).
    """

    def __init__(self, engine: LearningEngine, run_id: Optional[str] = None,
                 checkpoint_callback: Optional[CheckpointCallback] = None,
                 board_callback: Optional[BoardCallback] = None):
        self.engine = engine
        self.run_id = run_id or new_run_id()
        self.checkpoint_callback = checkpoint_callback
        self.board_callback = board_callback
        self.state = RunState.IDLE
        self.actions = 0
        self.episodes = 0

    def _emit_board(self, stage: str) -> BoardSnapshot:
        snapshot = self.engine.grid.snapshot()
        if self.board_callback:
            self.board_callback(stage, snapshot)
        return snapshot

    def _checkpoint(self) -> Checkpoint:
        checkpoint = Checkpoint(
            run_id=self.run_id,
            episodes=self.episodes,
            actions=self.actions,
            exploration_rate=self.engine.exploration_rate,
        )
        logger.info("[%s] Episodes: %d, Actions: %d, Rate: %.7f",
                    self.run_id, checkpoint.episodes, checkpoint.actions, checkpoint.exploration_rate)
        if self.checkpoint_callback:
            self.checkpoint_callback(checkpoint)
        return checkpoint

    def run(self) -> TrainingReport:
        """
        Train to termination.

        Raises:
            ConfigurationError: If the exploration rate could never reach the threshold
            InvariantViolationError: Propagated from the engine; the run is aborted
        """
        engine = self.engine
        config = engine.config
        if not config.terminates():
            raise ConfigurationError(
                "Exploration rate starts above the termination threshold "
                "and never decays; training would not terminate"
            )

        grid = engine.grid
        initial_board = self._emit_board("initial")
        checkpoints = []

        self.state = RunState.TRAINING
        logger.info("[%s] Training %dx%d grid from rate %.4f",
                    self.run_id, grid.rows, grid.cols, engine.exploration_rate)

        start_time = time.time()
        try:
            while engine.exploration_rate > config.termination_threshold:
                if engine.step().episode_ended:
                    self.episodes += 1
                self.actions += 1
                if self.actions % config.checkpoint_interval == 0:
                    checkpoints.append(self._checkpoint())
        except Exception:
            self.state = RunState.ERROR
            logger.exception("[%s] Training aborted after %d actions", self.run_id, self.actions)
            raise
        elapsed_time = time.time() - start_time

        self.state = RunState.CONVERGED
        final_board = self._emit_board("final")
        logger.info("[%s] Solving took %.3f seconds: %d episodes, %d actions",
                    self.run_id, elapsed_time, self.episodes, self.actions)

        return TrainingReport(
            run_id=self.run_id,
            rows=grid.rows,
            cols=grid.cols,
            obstacles_enabled=grid.config.obstacles_enabled,
            episodes=self.episodes,
            actions=self.actions,
            final_exploration_rate=engine.exploration_rate,
            elapsed_time=elapsed_time,
            player=grid.player,
            goal=grid.goal,
            initial_board=initial_board,
            final_board=final_board,
            checkpoints=checkpoints,
            state=self.state,
        )
