import pickle

import numpy as np
import pytest

from gridworld.domain.exceptions import ConfigurationError, InvariantViolationError
from gridworld.domain.grid import Grid
from gridworld.domain.types import Direction, GridConfig, Location
from gridworld.utils.grid_factory import create_grid, create_grid_with_obstacles
from gridworld.utils.rng import SeededRNG

# 4x4 layout; (0,0) is trapped by (0,1) and (1,0)
LAYOUT = [(0, 1), (1, 0), (2, 2), (3, 0)]


@pytest.fixture
def layout_grid():
    return create_grid_with_obstacles(4, 4, LAYOUT, seed=11)


@pytest.mark.parametrize("rows, cols", [(1, 2), (3, 3), (4, 7)])
def test_is_in_bounds_accepts_exactly_the_rectangle(rows, cols):
    grid = create_grid(rows, cols, obstacles_enabled=False, seed=1)
    for row in range(-1, rows + 1):
        for col in range(-1, cols + 1):
            expected = 0 <= row < rows and 0 <= col < cols
            assert grid.is_in_bounds(Location(row, col)) is expected
    assert grid.is_in_bounds(Location(rows - 1, cols - 1))
    assert not grid.is_in_bounds(Location(rows, 0))
    assert not grid.is_in_bounds(Location(0, cols))


def test_is_on_obstacle(layout_grid):
    assert layout_grid.is_on_obstacle(Location(2, 2))
    assert not layout_grid.is_on_obstacle(Location(1, 1))


def test_is_trapped(layout_grid):
    assert layout_grid.is_trapped(Location(0, 0))
    # (3,0) neighbours: (2,0) free, (3,1) free
    assert not layout_grid.is_trapped(Location(3, 0))
    assert not layout_grid.is_trapped(Location(1, 1))


def test_trapped_edge_cases():
    config = GridConfig(rows=1, cols=2, obstacles_enabled=True)
    grid = Grid(config, SeededRNG(0), obstacles=[])
    assert not grid.is_trapped(Location(0, 0))
    with pytest.raises(ConfigurationError):
        Grid(GridConfig(rows=1, cols=1, obstacles_enabled=False), SeededRNG(0))


def test_one_by_one_grid_fails_deterministically():
    for seed in range(5):
        with pytest.raises(ConfigurationError):
            create_grid(1, 1, obstacles_enabled=False, seed=seed)


def test_fully_obstructed_grid_fails():
    with pytest.raises(ConfigurationError):
        create_grid(3, 3, obstacles_enabled=True, obstacle_percent=100, seed=0)


def test_obstacles_outside_grid_rejected():
    with pytest.raises(ConfigurationError):
        create_grid_with_obstacles(3, 3, [(5, 5)], seed=0)


def test_obstacles_disabled_means_none():
    grid = create_grid(6, 6, obstacles_enabled=False, obstacle_percent=100, seed=2)
    assert grid.obstacles == frozenset()


def test_obstacle_percent_zero_means_none():
    grid = create_grid(6, 6, obstacles_enabled=True, obstacle_percent=0, seed=2)
    assert grid.obstacles == frozenset()


def test_obstacles_are_sampled_with_seed():
    a = create_grid(8, 8, obstacle_percent=30, seed=5)
    b = create_grid(8, 8, obstacle_percent=30, seed=5)
    assert a.obstacles == b.obstacles
    assert a.player == b.player and a.goal == b.goal
    np.testing.assert_array_equal(a.weights_array(), b.weights_array())


def test_sample_valid_position_property(layout_grid):
    for _ in range(500):
        location = layout_grid.sample_valid_position()
        assert layout_grid.is_in_bounds(location)
        assert location not in layout_grid.obstacles
        assert not layout_grid.is_trapped(location)
        assert location != layout_grid.player
        assert location != layout_grid.goal
        assert location != Location(0, 0)


def test_initial_placement_invariants():
    for seed in range(20):
        grid = create_grid(5, 5, obstacle_percent=25, seed=seed)
        for location in (grid.player, grid.goal):
            assert grid.is_in_bounds(location)
            assert not grid.is_on_obstacle(location)
            assert not grid.is_trapped(location)
        assert grid.player != grid.goal


def test_two_usable_cells_are_enough():
    grid = Grid(GridConfig(rows=1, cols=2, obstacles_enabled=False), SeededRNG(3))
    assert {grid.player, grid.goal} == {Location(0, 0), Location(0, 1)}
    # both cells taken: nothing left to sample
    with pytest.raises(ConfigurationError):
        grid.sample_valid_position()


def test_reward_only_on_goal(layout_grid):
    rewards = layout_grid.rewards_array()
    assert rewards.sum() == 1
    assert rewards[layout_grid.goal.row, layout_grid.goal.col] == 1


def test_place_goal_moves_reward_and_keeps_weights(layout_grid):
    old_goal = layout_grid.goal
    before = layout_grid.weights_array()
    new_goal = layout_grid.place_goal()

    assert new_goal != old_goal
    assert layout_grid.cell(old_goal).reward == 0
    assert layout_grid.cell(new_goal).reward == 1
    assert layout_grid.rewards_array().sum() == 1
    np.testing.assert_array_equal(layout_grid.weights_array(), before)


def test_initial_weights_and_traces():
    grid = create_grid(5, 4, obstacles_enabled=False, seed=9)
    weights = grid.weights_array()
    assert weights.shape == (5, 4, 4)
    assert np.all((weights >= 0.0) & (weights < 1.0))
    assert np.all(grid.eligibility_array() == 0.0)


def test_cells_share_grid_storage(open_grid):
    cell = open_grid.cell(Location(1, 2))
    cell.eligibility[Direction.LEFT] = 3.0
    assert open_grid.eligibility_array()[1, 2, Direction.LEFT] == 3.0

    open_grid.apply_trace_update(step_size=0.5, trace_factor=0.25)
    assert cell.eligibility[Direction.LEFT] == pytest.approx(0.75)

    open_grid.clear_eligibility()
    assert cell.eligibility[Direction.LEFT] == 0.0


def test_apply_trace_update_uses_old_traces(open_grid):
    weights = open_grid.weights_array()
    traces = np.arange(36, dtype=float).reshape(3, 3, 4)
    for i in range(3):
        for j in range(3):
            open_grid.cell(Location(i, j)).eligibility[:] = traces[i, j]

    open_grid.apply_trace_update(step_size=0.1, trace_factor=0.5)

    np.testing.assert_allclose(open_grid.weights_array(), weights + 0.1 * traces)
    np.testing.assert_allclose(open_grid.eligibility_array(), 0.5 * traces)


def test_cell_out_of_bounds_is_invariant_violation(open_grid):
    with pytest.raises(InvariantViolationError):
        open_grid.cell(Location(3, 0))


def test_neighbor_does_not_bounds_check(open_grid):
    assert open_grid.neighbor(Location(0, 0), Direction.UP) == Location(-1, 0)


def test_snapshot(layout_grid):
    snapshot = layout_grid.snapshot()
    assert (snapshot.rows, snapshot.cols) == (4, 4)
    assert snapshot.obstacles == frozenset(Location(r, c) for r, c in LAYOUT)
    assert snapshot.player == layout_grid.player
    assert snapshot.goal == layout_grid.goal
    assert snapshot.best_directions[1][1] == layout_grid.cell(Location(1, 1)).best_direction


def test_pickle_keeps_cells_linked(open_grid):
    clone = pickle.loads(pickle.dumps(open_grid))
    np.testing.assert_array_equal(clone.weights_array(), open_grid.weights_array())
    clone.cell(Location(0, 0)).eligibility[0] = 2.0
    assert clone.eligibility_array()[0, 0, 0] == 2.0
