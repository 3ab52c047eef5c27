"""Text rendering of a grid snapshot."""

from enum import Enum, auto
from typing import Dict

from ..domain.types import BoardSnapshot, Direction, Location


class Glyph(Enum):
    """Everything a board position can show."""
    OBSTACLE = auto()
    PLAYER = auto()
    GOAL = auto()
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()


GLYPH_CHARACTERS: Dict[Glyph, str] = {
    Glyph.OBSTACLE: "#",
    Glyph.PLAYER: "X",
    Glyph.GOAL: "O",
    Glyph.UP: "U",
    Glyph.DOWN: "D",
    Glyph.LEFT: "L",
    Glyph.RIGHT: "R",
}

DIRECTION_GLYPHS: Dict[Direction, Glyph] = {
    Direction.UP: Glyph.UP,
    Direction.DOWN: Glyph.DOWN,
    Direction.LEFT: Glyph.LEFT,
    Direction.RIGHT: Glyph.RIGHT,
}


def glyph_at(snapshot: BoardSnapshot, location: Location) -> Glyph:
    """Goal and player win over obstacles, obstacles over the learned direction."""
    if location == snapshot.goal:
        return Glyph.GOAL
    if location == snapshot.player:
        return Glyph.PLAYER
    if location in snapshot.obstacles:
        return Glyph.OBSTACLE
    return DIRECTION_GLYPHS[snapshot.best_directions[location.row][location.col]]


def render_board(snapshot: BoardSnapshot) -> str:
    """
    Render one character per cell, each preceded by a space, one line per row.

    Example for a 2x3 board::

         R R O
         X # U
    """
    lines = []
    for row in range(snapshot.rows):
        line = "".join(
            " " + GLYPH_CHARACTERS[glyph_at(snapshot, Location(row, col))]
            for col in range(snapshot.cols)
        )
        lines.append(line)
    return "\n".join(lines)
