import random
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional

from path_engine.core.grid import Cell, Grid, GridSnapshot
from path_engine.core.events import DEFAULT_SPEED, FILL_PAUSE, Tick, check_speed, drive, step_delay


class Generator(ABC):
    """
    Base for the maze procedures. Works in place on self.grid, which
    should be a blank working copy (see Grid.blank_copy).
    """
    name = ""
    label = ""
    # Open cells form a tree when endpoints sit on the 2-step lattice
    perfect = False

    def __init__(self, grid: Grid, seed: int = None, speed: int = DEFAULT_SPEED,
                 on_update: Optional[Callable[[GridSnapshot], None]] = None):
        self.grid = grid
        self.seed = seed
        self.speed = check_speed(speed)
        self.on_update = on_update
        self.rng = random.Random(seed)
        # Refresh cadence draws from its own stream so the layout only depends on the seed
        self.pace_rng = random.Random(None if seed is None else seed ^ 0x5F3759DF)
        self.step_count = 0

    @abstractmethod
    def run(self) -> Iterator[Tick]:
        """
        Yields a Tick at each refresh point.
        The actual grid modifications happen in-place on self.grid.
        """
        pass

    def run_all(self) -> Grid:
        """Helper to run the generator to completion."""
        drive(self.run())
        return self.grid

    # -- carving -----------------------------------------------------------

    def build(self, row: int, col: int):
        # Grid.set_wall refuses start/end cells
        self.grid.set_wall(row, col, True)

    def carve(self, row: int, col: int):
        self.grid.set_wall(row, col, False)

    def fill(self):
        for row in range(self.grid.rows):
            for col in range(self.grid.cols):
                self.build(row, col)

    def lattice_cells(self) -> List[Cell]:
        return [(row, col) for row in range(0, self.grid.rows, 2)
                for col in range(0, self.grid.cols, 2)]

    def lattice_neighbors(self, row: int, col: int) -> Iterator[Cell]:
        """Cells two steps away: up, down, left, right."""
        for dr, dc in Grid.DIRECTIONS:
            nr, nc = row + 2 * dr, col + 2 * dc
            if 0 <= nr < self.grid.rows and 0 <= nc < self.grid.cols:
                yield (nr, nc)

    def link(self, a: Cell, b: Cell):
        """Opens two lattice cells and the cell between them."""
        self.carve(*a)
        self.carve(*b)
        self.carve((a[0] + b[0]) // 2, (a[1] + b[1]) // 2)

    # -- pacing ------------------------------------------------------------

    def refresh(self, floor: float, chance: float = None) -> Iterator[Tick]:
        """
        Snapshot plus a delay of max(floor, 101 - speed).
        Only when a callback is attached; chance makes it probabilistic.
        """
        if self.on_update is None:
            return
        if chance is not None and self.pace_rng.random() >= chance:
            return
        self.on_update(self.grid.snapshot())
        yield Tick(max(floor, step_delay(self.speed)), f"{self.label}: {self.step_count} steps")

    def filled(self) -> Iterator[Tick]:
        if self.on_update is not None:
            self.on_update(self.grid.snapshot())
            yield Tick(FILL_PAUSE, "Filled")

    def settle(self):
        if self.on_update is not None:
            self.on_update(self.grid.snapshot())
