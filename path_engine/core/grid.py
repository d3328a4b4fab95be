import math
from array import array
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

Cell = Tuple[int, int]  # (row, col)

MIN_SIZE = 10
MAX_SIZE = 50
DEFAULT_SIZE = 25

DEFAULT_WEIGHT = 1
HEAVY_WEIGHT = 5

# Layout characters for from_text / to_text
CH_OPEN = "."
CH_WALL = "#"
CH_START = "S"
CH_END = "E"
CH_WEIGHT = "w"
CH_VISITED = "o"
CH_PATH = "*"


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class Node:
    """Read-only copy of one cell."""
    row: int
    col: int
    is_start: bool
    is_end: bool
    is_wall: bool
    is_visited: bool
    is_path: bool
    distance: float
    heuristic: int
    weight: int
    previous: Optional[Cell]


class Grid:
    # Bitmask Constants
    START   = 0b00000001
    END     = 0b00000010
    WALL    = 0b00000100
    VISITED = 0b00001000
    PATH    = 0b00010000

    ENDPOINT = START | END
    RUN_STATE = VISITED | PATH

    # Neighbor order: up, down, left, right
    DIRECTIONS = ((-1, 0), (1, 0), (0, -1), (0, 1))

    __slots__ = ('rows', 'cols', 'cells', 'weights', 'distance', 'heuristic',
                 'previous', 'start', 'end', 'version')

    def __init__(self, rows: int, cols: int = None):
        if cols is None:
            cols = rows
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        size = rows * cols
        # 1 byte of flags per cell
        self.cells = array('B', [0] * size)
        self.weights = array('B', [DEFAULT_WEIGHT] * size)
        self.distance: List[float] = [math.inf] * size
        self.heuristic = array('i', [0] * size)
        # Predecessor table, -1 = none
        self.previous = array('i', [-1] * size)
        self.start: Optional[Cell] = None
        self.end: Optional[Cell] = None
        self.version = 0

    def __len__(self) -> int:
        return self.rows * self.cols

    def __repr__(self) -> str:
        return f"Grid({self.rows}x{self.cols}, start={self.start}, end={self.end})"

    # -- addressing --------------------------------------------------------

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def index(self, row: int, col: int) -> int:
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row * self.cols + col
        raise IndexError(f"Cell ({row}, {col}) out of bounds for {self.rows}x{self.cols} grid")

    def cell(self, idx: int) -> Cell:
        return divmod(idx, self.cols)

    def neighbors(self, row: int, col: int) -> Iterator[Cell]:
        """
        Yields the in-bound orthogonal neighbors of (row, col): up, down, left, right.
        Does NOT check walls.
        """
        for dr, dc in self.DIRECTIONS:
            nr, nc = row + dr, col + dc
            if 0 <= nr < self.rows and 0 <= nc < self.cols:
                yield (nr, nc)

    def adjacent(self, idx: int) -> List[int]:
        """Flat-index version of neighbors(), same order."""
        row, col = divmod(idx, self.cols)
        out = []
        if row > 0:
            out.append(idx - self.cols)
        if row < self.rows - 1:
            out.append(idx + self.cols)
        if col > 0:
            out.append(idx - 1)
        if col < self.cols - 1:
            out.append(idx + 1)
        return out

    # -- queries -----------------------------------------------------------

    def node(self, row: int, col: int) -> Node:
        idx = self.index(row, col)
        return _make_node(self.cols, idx, self.cells[idx], self.weights[idx],
                          self.distance[idx], self.heuristic[idx], self.previous[idx])

    def __getitem__(self, cell: Cell) -> Node:
        return self.node(*cell)

    def is_wall(self, row: int, col: int) -> bool:
        return (self.cells[self.index(row, col)] & self.WALL) != 0

    def is_visited(self, row: int, col: int) -> bool:
        return (self.cells[self.index(row, col)] & self.VISITED) != 0

    def is_path(self, row: int, col: int) -> bool:
        return (self.cells[self.index(row, col)] & self.PATH) != 0

    def is_endpoint(self, row: int, col: int) -> bool:
        return (self.cells[self.index(row, col)] & self.ENDPOINT) != 0

    def weight(self, row: int, col: int) -> int:
        return self.weights[self.index(row, col)]

    def count(self, flag: int) -> int:
        return sum(1 for val in self.cells if val & flag)

    def open_cells(self) -> Iterator[Cell]:
        for idx, val in enumerate(self.cells):
            if not (val & self.WALL):
                yield divmod(idx, self.cols)

    # -- caller edits ------------------------------------------------------

    def set_start(self, row: int, col: int):
        idx = self.index(row, col)
        if self.start is not None:
            self.cells[self.index(*self.start)] &= ~self.START
        self.cells[idx] = (self.cells[idx] | self.START) & ~self.WALL
        self.start = (row, col)
        self.version += 1

    def set_end(self, row: int, col: int):
        idx = self.index(row, col)
        if self.end is not None:
            self.cells[self.index(*self.end)] &= ~self.END
        self.cells[idx] = (self.cells[idx] | self.END) & ~self.WALL
        self.end = (row, col)
        self.version += 1

    def clear_start(self):
        if self.start is not None:
            self.cells[self.index(*self.start)] &= ~self.START
            self.start = None
            self.version += 1

    def clear_end(self):
        if self.end is not None:
            self.cells[self.index(*self.end)] &= ~self.END
            self.end = None
            self.version += 1

    def set_wall(self, row: int, col: int, wall: bool = True) -> bool:
        """
        Sets or clears the wall flag. Start/end cells never become walls;
        returns False when the request was refused.
        """
        idx = self.index(row, col)
        if self.cells[idx] & self.ENDPOINT:
            return False
        if wall:
            self.cells[idx] |= self.WALL
        else:
            self.cells[idx] &= ~self.WALL
        self.version += 1
        return True

    def toggle_wall(self, row: int, col: int) -> bool:
        idx = self.index(row, col)
        self.set_wall(row, col, not (self.cells[idx] & self.WALL))
        return (self.cells[idx] & self.WALL) != 0

    def set_weight(self, row: int, col: int, weight: int):
        if weight < 1:
            raise ValueError(f"Weight must be >= 1, got {weight}")
        self.weights[self.index(row, col)] = weight
        self.version += 1

    def toggle_weight(self, row: int, col: int) -> int:
        """Flips an open, non-endpoint cell between the default and heavy weight."""
        idx = self.index(row, col)
        if not (self.cells[idx] & (self.ENDPOINT | self.WALL)):
            heavy = self.weights[idx] == DEFAULT_WEIGHT
            self.set_weight(row, col, HEAVY_WEIGHT if heavy else DEFAULT_WEIGHT)
        return self.weights[idx]

    # -- run state ---------------------------------------------------------

    def reset_run_state(self, distance: bool = True, heuristic: bool = True):
        """
        Clears visited/path flags and the predecessor table before a search.
        Algorithms that do not use distance or heuristic leave those fields alone.
        """
        size = len(self.cells)
        for idx in range(size):
            self.cells[idx] &= ~self.RUN_STATE
        self.previous = array('i', [-1] * size)
        if distance:
            self.distance = [math.inf] * size
        if heuristic:
            self.heuristic = array('i', [0] * size)
        self.version += 1

    def clear_run(self):
        """Drops everything a search left behind, keeping walls, weights and endpoints."""
        self.reset_run_state(distance=True, heuristic=True)

    def reset(self):
        """Back to a fresh grid of the same size."""
        size = len(self.cells)
        self.cells = array('B', [0] * size)
        self.weights = array('B', [DEFAULT_WEIGHT] * size)
        self.start = None
        self.end = None
        self.reset_run_state()

    def mark_visited(self, idx: int):
        self.cells[idx] |= self.VISITED
        self.version += 1

    def mark_path(self, idx: int):
        self.cells[idx] |= self.PATH
        self.version += 1

    def copy(self) -> "Grid":
        other = Grid(self.rows, self.cols)
        other.cells = array('B', self.cells)
        other.weights = array('B', self.weights)
        other.distance = list(self.distance)
        other.heuristic = array('i', self.heuristic)
        other.previous = array('i', self.previous)
        other.start = self.start
        other.end = self.end
        return other

    def blank_copy(self) -> "Grid":
        """Copy with walls and run state cleared; endpoints and weights preserved."""
        other = Grid(self.rows, self.cols)
        for idx, val in enumerate(self.cells):
            other.cells[idx] = val & self.ENDPOINT
        other.weights = array('B', self.weights)
        other.start = self.start
        other.end = self.end
        return other

    def reconstruct_path(self, end: Cell) -> List[Cell]:
        """
        Walks the predecessor table from end back to a cell with no predecessor.
        Returned in start -> end order.
        """
        idx = self.index(*end)
        seen = set()
        path = []
        while idx != -1:
            if idx in seen:
                raise ValueError(f"Predecessor cycle at {self.cell(idx)}")
            seen.add(idx)
            path.append(divmod(idx, self.cols))
            idx = self.previous[idx]
        path.reverse()
        return path

    def snapshot(self) -> "GridSnapshot":
        return GridSnapshot(self)

    # -- text layouts ------------------------------------------------------

    @classmethod
    def from_text(cls, text: str) -> "Grid":
        lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not lines:
            raise ValueError("Empty layout")
        width = len(lines[0])
        if any(len(line) != width for line in lines):
            raise ValueError("Layout rows must all have the same length")

        grid = cls(len(lines), width)
        for row, line in enumerate(lines):
            for col, ch in enumerate(line):
                if ch == CH_WALL:
                    grid.set_wall(row, col)
                elif ch == CH_START:
                    grid.set_start(row, col)
                elif ch == CH_END:
                    grid.set_end(row, col)
                elif ch == CH_WEIGHT:
                    grid.set_weight(row, col, HEAVY_WEIGHT)
                elif ch not in (CH_OPEN, CH_VISITED, CH_PATH):
                    raise ValueError(f"Unknown layout character {ch!r} at ({row}, {col})")
        return grid

    def to_text(self, show_run: bool = True) -> str:
        return _render_text(self.rows, self.cols, self.cells, self.weights, show_run)


class GridSnapshot:
    """
    Immutable copy of a grid taken at one point of a run.
    Safe to keep after the grid moves on.
    """
    __slots__ = ('rows', 'cols', 'version', 'cells', 'weights', 'distance',
                 'heuristic', 'previous', 'start', 'end')

    def __init__(self, grid: Grid):
        self.rows = grid.rows
        self.cols = grid.cols
        self.version = grid.version
        self.cells = bytes(grid.cells)
        self.weights = bytes(grid.weights)
        self.distance = tuple(grid.distance)
        self.heuristic = tuple(grid.heuristic)
        self.previous = tuple(grid.previous)
        self.start = grid.start
        self.end = grid.end

    def node(self, row: int, col: int) -> Node:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Cell ({row}, {col}) out of bounds")
        idx = row * self.cols + col
        return _make_node(self.cols, idx, self.cells[idx], self.weights[idx],
                          self.distance[idx], self.heuristic[idx], self.previous[idx])

    def count(self, flag: int) -> int:
        return sum(1 for val in self.cells if val & flag)

    def to_array(self) -> np.ndarray:
        """Flag plane as a (rows, cols) uint8 array."""
        return np.frombuffer(self.cells, dtype=np.uint8).reshape(self.rows, self.cols)

    def weight_array(self) -> np.ndarray:
        return np.frombuffer(self.weights, dtype=np.uint8).reshape(self.rows, self.cols)

    def to_text(self, show_run: bool = True) -> str:
        return _render_text(self.rows, self.cols, self.cells, self.weights, show_run)


def _make_node(cols, idx, val, weight, distance, heuristic, previous) -> Node:
    return Node(
        row=idx // cols,
        col=idx % cols,
        is_start=bool(val & Grid.START),
        is_end=bool(val & Grid.END),
        is_wall=bool(val & Grid.WALL),
        is_visited=bool(val & Grid.VISITED),
        is_path=bool(val & Grid.PATH),
        distance=distance,
        heuristic=heuristic,
        weight=weight,
        previous=divmod(previous, cols) if previous != -1 else None,
    )


def _render_text(rows, cols, cells, weights, show_run) -> str:
    lines = []
    for row in range(rows):
        chars = []
        for col in range(cols):
            idx = row * cols + col
            val = cells[idx]
            if val & Grid.START:
                ch = CH_START
            elif val & Grid.END:
                ch = CH_END
            elif val & Grid.WALL:
                ch = CH_WALL
            elif show_run and val & Grid.PATH:
                ch = CH_PATH
            elif show_run and val & Grid.VISITED:
                ch = CH_VISITED
            elif weights[idx] != DEFAULT_WEIGHT:
                ch = CH_WEIGHT
            else:
                ch = CH_OPEN
            chars.append(ch)
        lines.append("".join(chars))
    return "\n".join(lines)
