"""Grid factory for creating grids and wiring up training runs."""

from typing import Iterable, Optional, Tuple

from ..app.driver import BoardCallback, CheckpointCallback, TrainingDriver
from ..domain.grid import Grid
from ..domain.sarsa_lambda import LearningEngine
from ..domain.types import GridConfig, LearningConfig, Location
from .rng import SeededRNG


def create_grid(rows: int, cols: int, obstacles_enabled: bool = True,
                obstacle_percent: int = 25, seed: Optional[int] = None) -> Grid:
    """
    Create a grid with randomly sampled obstacles.

    Args:
        rows: Row count (must be > 0)
        cols: Column count (must be > 0)
        obstacles_enabled: Whether to sample obstacles at all
        obstacle_percent: Chance in percent that a cell holds an obstacle
        seed: Random seed for reproducibility

    Returns:
        New Grid with player and goal placed

    Raises:
        ConfigurationError: On invalid dimensions or percent, or when the
            sampled layout leaves fewer than two usable cells
    """
    config = GridConfig(rows=rows, cols=cols, obstacles_enabled=obstacles_enabled,
                        obstacle_percent=obstacle_percent)
    return Grid(config, SeededRNG(seed))


def create_grid_with_obstacles(rows: int, cols: int, obstacles: Iterable[Tuple[int, int]],
                               seed: Optional[int] = None) -> Grid:
    """
    Create a grid with a fixed obstacle layout.

    Args:
        rows: Row count
        cols: Column count
        obstacles: (row, col) pairs holding obstacles
        seed: Random seed for weights and placement
    """
    config = GridConfig(rows=rows, cols=cols, obstacles_enabled=True)
    locations = [Location(row, col) for row, col in obstacles]
    return Grid(config, SeededRNG(seed), obstacles=locations)


def create_training_run(grid_config: GridConfig,
                        learning_config: Optional[LearningConfig] = None,
                        seed: Optional[int] = None,
                        run_id: Optional[str] = None,
                        checkpoint_callback: Optional[CheckpointCallback] = None,
                        board_callback: Optional[BoardCallback] = None) -> TrainingDriver:
    """Build a grid, its engine and a driver sharing one randomness provider."""
    rng = SeededRNG(seed)
    grid = Grid(grid_config, rng)
    engine = LearningEngine(grid, learning_config, rng)
    return TrainingDriver(engine, run_id=run_id,
                          checkpoint_callback=checkpoint_callback,
                          board_callback=board_callback)
