import pytest

from gridworld.domain.grid import Grid
from gridworld.domain.types import GridConfig, LearningConfig, Location
from gridworld.utils.rng import SeededRNG


def _relocate(grid: Grid, player: Location, goal: Location) -> None:
    grid.cell(grid.goal).reward = 0
    grid.goal = goal
    grid.cell(goal).reward = 1
    grid.player = player


@pytest.fixture
def relocate():
    """Move player and goal directly, keeping the single-reward-cell rule."""
    return _relocate


@pytest.fixture
def open_grid():
    """3x3 grid without obstacles."""
    return Grid(GridConfig(rows=3, cols=3, obstacles_enabled=False), SeededRNG(7))


@pytest.fixture
def fast_config():
    """Learning config that terminates after a handful of episodes."""
    return LearningConfig(
        initial_exploration_rate=0.9,
        learning_rate=0.1,
        trace_decay=0.9,
        rate_decrement=0.1,
        termination_threshold=0.05,
        checkpoint_interval=5,
    )
