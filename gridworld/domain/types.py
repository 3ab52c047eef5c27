"""Core type definitions for the grid world learner."""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, List, Optional, Tuple
import numpy as np

from .exceptions import ConfigurationError, InvariantViolationError

# Number of actions available in every cell
ACTION_COUNT = 4


class Direction(IntEnum):
    """The four moves. The value indexes the per-cell weight and trace arrays."""
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @classmethod
    def from_index(cls, index: int) -> "Direction":
        """
        Look up a direction by ordinal.

        Raises:
            InvariantViolationError: If index is outside [0, 4)
        """
        if not 0 <= index < ACTION_COUNT:
            raise InvariantViolationError(f"Direction index out of range: {index}")
        return cls(index)


DIRECTION_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


@dataclass(frozen=True)
class Location:
    """Immutable (row, col) position. Not necessarily inside any grid."""
    row: int
    col: int

    def shifted(self, direction: Direction) -> "Location":
        """Return the location one step away in the given direction."""
        if direction not in DIRECTION_DELTAS:
            raise InvariantViolationError(f"Unsupported direction: {direction!r}")
        d_row, d_col = DIRECTION_DELTAS[direction]
        return Location(self.row + d_row, self.col + d_col)

    def surroundings(self) -> Tuple["Location", ...]:
        """The four axis-aligned neighbours, unfiltered, in direction order."""
        return tuple(self.shifted(direction) for direction in Direction)

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


@dataclass(eq=False)
class Cell:
    """Learned state of one grid position."""
    weights: np.ndarray
    eligibility: np.ndarray
    reward: int = 0

    def __post_init__(self):
        if self.weights.shape != (ACTION_COUNT,) or self.eligibility.shape != (ACTION_COUNT,):
            raise InvariantViolationError(
                f"Cell arrays must have {ACTION_COUNT} entries, got "
                f"{self.weights.shape} and {self.eligibility.shape}"
            )

    @property
    def best_direction(self) -> Direction:
        """Direction of maximum weight; the first one wins ties."""
        return Direction.from_index(int(np.argmax(self.weights)))

    def max_value(self) -> float:
        """Get the maximum weight."""
        return float(self.weights[self.best_direction])

    def clear_eligibility(self) -> None:
        self.eligibility[:] = 0.0


@dataclass
class GridConfig:
    """Construction-time configuration of a grid."""
    rows: int = 10
    cols: int = 10
    obstacles_enabled: bool = True
    obstacle_percent: int = 25  # chance, per cell, of holding an obstacle

    def __post_init__(self):
        if self.rows < 1 or self.cols < 1:
            raise ConfigurationError(
                f"Cannot have empty rows or columns, got {self.rows}x{self.cols}"
            )
        if not 0 <= self.obstacle_percent <= 100:
            raise ConfigurationError(
                f"Obstacle percent must be between 0 and 100, got {self.obstacle_percent}"
            )


@dataclass
class LearningConfig:
    """Configuration for the SARSA(lambda) learner."""
    initial_exploration_rate: float = 0.90  # above .90 explores more early on, useful on larger grids
    learning_rate: float = 0.005
    trace_decay: float = 0.0000005
    rate_decrement: float = 0.0000005  # subtracted from the exploration rate every episode
    termination_threshold: float = 0.05
    checkpoint_interval: int = 100_000  # actions between progress reports

    def __post_init__(self):
        if not 0.0 <= self.initial_exploration_rate <= 1.0:
            raise ConfigurationError(
                f"Exploration rate must be within [0, 1], got {self.initial_exploration_rate}"
            )
        if self.learning_rate <= 0.0:
            raise ConfigurationError(f"Learning rate must be positive, got {self.learning_rate}")
        if self.trace_decay < 0.0:
            raise ConfigurationError(f"Trace decay cannot be negative, got {self.trace_decay}")
        if self.rate_decrement < 0.0:
            raise ConfigurationError(f"Rate decrement cannot be negative, got {self.rate_decrement}")
        if self.termination_threshold < 0.0:
            raise ConfigurationError(
                f"Termination threshold cannot be negative, got {self.termination_threshold}"
            )
        if self.checkpoint_interval < 1:
            raise ConfigurationError(
                f"Checkpoint interval must be at least 1, got {self.checkpoint_interval}"
            )

    def terminates(self) -> bool:
        """Whether a run started from this config can ever reach the threshold."""
        return (self.initial_exploration_rate <= self.termination_threshold
                or self.rate_decrement > 0.0)


def episode_upper_bound(config: LearningConfig) -> int:
    """
    Episodes needed to bring the exploration rate to the threshold.

    This bounds the episode count of a run only under the assumption that
    episodes keep ending; it is not a guarantee.
    """
    if config.initial_exploration_rate <= config.termination_threshold:
        return 0
    if config.rate_decrement <= 0.0:
        raise ConfigurationError("Rate decrement must be positive for the run to terminate")
    return math.ceil(
        (config.initial_exploration_rate - config.termination_threshold) / config.rate_decrement
    )


class RunState(Enum):
    """Lifecycle of a training run."""
    IDLE = "idle"
    TRAINING = "training"
    CONVERGED = "converged"
    ERROR = "error"


@dataclass
class StepResult:
    """Outcome of a single learning step."""
    direction: Direction
    explored: bool
    reward: int
    delta: float
    episode_ended: bool


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only view of a grid for presentation."""
    rows: int
    cols: int
    obstacles: FrozenSet[Location]
    player: Location
    goal: Location
    best_directions: Tuple[Tuple[Direction, ...], ...]


@dataclass(frozen=True)
class Checkpoint:
    """Progress metrics reported every checkpoint interval."""
    run_id: str
    episodes: int
    actions: int
    exploration_rate: float


@dataclass
class TrainingReport:
    """Result of a complete training run."""
    run_id: str
    rows: int
    cols: int
    obstacles_enabled: bool
    episodes: int
    actions: int
    final_exploration_rate: float
    elapsed_time: float
    player: Location
    goal: Location
    initial_board: Optional[BoardSnapshot] = None
    final_board: Optional[BoardSnapshot] = None
    checkpoints: List[Checkpoint] = field(default_factory=list)
    state: RunState = RunState.CONVERGED
