"""Grid model: cells, obstacles, player and goal placement."""

import logging
from typing import Iterable, List, Optional

import numpy as np

from ..utils.rng import SeededRNG
from .exceptions import ConfigurationError, InvariantViolationError
from .types import ACTION_COUNT, BoardSnapshot, Cell, Direction, GridConfig, Location

logger = logging.getLogger(__name__)


class Grid:
    """
    Rectangular board of learned cells with a player and a goal.

    The grid owns the weight and eligibility storage for every cell as two
    ``(rows, cols, 4)`` arrays. Each :class:`Cell` holds views into its slice,
    so per-cell edits and whole-board updates act on the same numbers.

    Invariant: player and goal are in bounds, distinct, and neither sits on
    an obstacle or on a trapped cell.
    """

    def __init__(self, config: GridConfig, rng: Optional[SeededRNG] = None,
                 obstacles: Optional[Iterable[Location]] = None):
        """
        Build a grid and place the player, then the goal.

        Args:
            config: Dimensions and obstacle settings
            rng: Randomness provider (a fresh unseeded one if None)
            obstacles: Explicit obstacle layout; sampled from the config if None

        Raises:
            ConfigurationError: If fewer than two cells can hold the player or goal
        """
        self.config = config
        self.rng = rng if rng is not None else SeededRNG()

        shape = (config.rows, config.cols, ACTION_COUNT)
        self._weights = self.rng.uniform_array(shape)
        self._eligibility = np.zeros(shape)
        self._cells = self._build_cells()

        if obstacles is not None:
            self.obstacles = frozenset(obstacles)
            outside = [loc for loc in self.obstacles if not self.is_in_bounds(loc)]
            if outside:
                raise ConfigurationError(f"Obstacles outside the grid: {sorted(map(str, outside))}")
        elif config.obstacles_enabled:
            self.obstacles = self._sample_obstacles()
        else:
            self.obstacles = frozenset()

        self._placeable = frozenset(
            Location(i, j)
            for i in range(self.rows)
            for j in range(self.cols)
            if not self.is_on_obstacle(Location(i, j)) and not self.is_trapped(Location(i, j))
        )
        if len(self._placeable) < 2:
            raise ConfigurationError(
                f"A {self.rows}x{self.cols} grid with {len(self.obstacles)} obstacles has "
                f"{len(self._placeable)} usable cells; player and goal need at least 2"
            )

        self.player: Optional[Location] = None
        self.goal: Optional[Location] = None
        self.place_player()
        self.place_goal()

        logger.debug("Created %dx%d grid with %d obstacles, player %s, goal %s",
                     self.rows, self.cols, len(self.obstacles), self.player, self.goal)

    def _build_cells(self) -> List[List[Cell]]:
        return [
            [Cell(weights=self._weights[i, j], eligibility=self._eligibility[i, j])
             for j in range(self.config.cols)]
            for i in range(self.config.rows)
        ]

    def _sample_obstacles(self) -> frozenset:
        percent = self.config.obstacle_percent
        return frozenset(
            Location(i, j)
            for i in range(self.rows)
            for j in range(self.cols)
            if self.rng.randint(0, 99) < percent
        )

    def __getstate__(self):
        state = self.__dict__.copy()
        del state["_cells"]
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._cells = self._build_cells()

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def cols(self) -> int:
        return self.config.cols

    def cell(self, location: Location) -> Cell:
        """Get the cell at an in-bounds location."""
        if not self.is_in_bounds(location):
            raise InvariantViolationError(f"No cell at {location} on a {self.rows}x{self.cols} grid")
        return self._cells[location.row][location.col]

    def is_in_bounds(self, location: Location) -> bool:
        """Check if location is within grid bounds."""
        return 0 <= location.row < self.rows and 0 <= location.col < self.cols

    def is_on_obstacle(self, location: Location) -> bool:
        return location in self.obstacles

    def is_trapped(self, location: Location) -> bool:
        """True if every in-bounds neighbour is an obstacle (vacuously so with none)."""
        return all(
            loc in self.obstacles
            for loc in location.surroundings()
            if self.is_in_bounds(loc)
        )

    def neighbor(self, location: Location, direction: Direction) -> Location:
        """Location one step away; may be out of bounds."""
        return location.shifted(direction)

    def sample_valid_position(self) -> Location:
        """
        Draw uniformly random locations until one is usable.

        A usable location is in bounds, not the current player, not the current
        goal, not an obstacle and not trapped.

        Raises:
            ConfigurationError: If no usable location remains
        """
        occupied = {self.player, self.goal}
        if not self._placeable - occupied:
            raise ConfigurationError("No free cell left for placement")

        while True:
            location = Location(self.rng.randrange(self.rows), self.rng.randrange(self.cols))
            if location not in occupied and location in self._placeable:
                return location

    def place_player(self) -> Location:
        self.player = self.sample_valid_position()
        return self.player

    def place_goal(self) -> Location:
        """Move the goal. Only the goal cell carries reward 1; weights and traces are kept."""
        location = self.sample_valid_position()
        if self.goal is not None:
            self.cell(self.goal).reward = 0
        self.goal = location
        self.cell(location).reward = 1
        return location

    def is_player_on_goal(self) -> bool:
        return self.player == self.goal

    def clear_eligibility(self) -> None:
        """Zero every cell's eligibility trace."""
        self._eligibility.fill(0.0)

    def apply_trace_update(self, step_size: float, trace_factor: float) -> None:
        """
        Update every weight from its trace, then decay every trace.

        ``w += step_size * e`` followed by ``e = trace_factor * e``; both use
        the trace value from before this call.
        """
        self._weights += step_size * self._eligibility
        self._eligibility *= trace_factor

    def weights_array(self) -> np.ndarray:
        """Copy of all weights, shape (rows, cols, 4)."""
        return self._weights.copy()

    def eligibility_array(self) -> np.ndarray:
        """Copy of all eligibility traces, shape (rows, cols, 4)."""
        return self._eligibility.copy()

    def rewards_array(self) -> np.ndarray:
        return np.array([[cell.reward for cell in row] for row in self._cells])

    def snapshot(self) -> BoardSnapshot:
        """Read-only view for rendering."""
        best = np.argmax(self._weights, axis=2)
        return BoardSnapshot(
            rows=self.rows,
            cols=self.cols,
            obstacles=self.obstacles,
            player=self.player,
            goal=self.goal,
            best_directions=tuple(
                tuple(Direction(int(index)) for index in row) for row in best
            ),
        )
