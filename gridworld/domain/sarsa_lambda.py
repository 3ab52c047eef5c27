"""SARSA(lambda) learning engine for grid navigation."""

import logging
from typing import Optional, Tuple

import numpy as np

from ..utils.rng import SeededRNG
from .grid import Grid
from .types import ACTION_COUNT, Direction, LearningConfig, StepResult

logger = logging.getLogger(__name__)

# Reward for stepping off the board
OUT_OF_BOUNDS_REWARD = -1


class LearningEngine:
    """
    Online TD control with eligibility traces over a whole grid.

    The exploration rate is both the probability of a random move and the
    discount applied to the successor value. It drops by a fixed amount every
    episode; the run is over once it reaches the termination threshold.

    Not re-entrant: one engine must only be stepped from one thread.
    """

    def __init__(self, grid: Grid, config: Optional[LearningConfig] = None,
                 rng: Optional[SeededRNG] = None):
        self.grid = grid
        self.config = config if config is not None else LearningConfig()
        self.rng = rng if rng is not None else grid.rng
        self.exploration_rate = self.config.initial_exploration_rate

    @property
    def is_done(self) -> bool:
        """Whether the exploration rate has reached the termination threshold."""
        return self.exploration_rate <= self.config.termination_threshold

    def select_direction(self, best: Direction) -> Tuple[Direction, bool]:
        """
        Pick the next move: random with probability ``exploration_rate``, else ``best``.

        Returns:
            Tuple of (direction, explored)
        """
        if self.rng.random() < self.exploration_rate:
            return Direction.from_index(self.rng.randrange(ACTION_COUNT)), True
        return best, False

    def step(self) -> StepResult:
        """Take one action, update every cell, and handle an episode boundary."""
        grid = self.grid
        rate = self.exploration_rate

        # Q(s, .) and its best action
        state = grid.player
        state_cell = grid.cell(state)
        best = state_cell.best_direction
        best_value = float(state_cell.weights[best])

        direction, explored = self.select_direction(best)

        # r and max Q(s', .)
        successor = grid.neighbor(state, direction)
        if grid.is_in_bounds(successor):
            successor_cell = grid.cell(successor)
            reward = successor_cell.reward
            successor_max = float(np.max(successor_cell.weights))
        else:
            reward = OUT_OF_BOUNDS_REWARD
            successor_max = 0.0

        delta = reward + rate * successor_max - best_value

        # e(s, a) <- e(s, a) + 1
        state_cell.eligibility[direction] += 1.0

        # for all s, a: Q += alpha * delta * e ; e <- gamma * lambda * e
        grid.apply_trace_update(self.config.learning_rate * delta, rate * self.config.trace_decay)

        grid.player = successor

        return StepResult(
            direction=direction,
            explored=explored,
            reward=reward,
            delta=delta,
            episode_ended=self.check_end_of_episode(),
        )

    def check_end_of_episode(self) -> bool:
        """
        Reset the episode if the player hit an obstacle, left the board or reached the goal.

        On reset the player is re-placed, every trace is cleared and the
        exploration rate drops by the configured decrement.
        """
        grid = self.grid
        player = grid.player
        if not (grid.is_on_obstacle(player) or not grid.is_in_bounds(player)
                or grid.is_player_on_goal()):
            return False

        grid.place_player()
        grid.clear_eligibility()
        self.exploration_rate -= self.config.rate_decrement
        return True
