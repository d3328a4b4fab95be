from typing import Iterator

from path_engine.core.events import Tick
from path_engine.algo.base import Generator

WALL_CHANCE = 0.35


class RandomWalls(Generator):
    """Each non-endpoint cell becomes a wall independently. No connectivity guarantee."""
    name = "random"
    label = "Random"

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        for row in range(grid.rows):
            for col in range(grid.cols):
                if grid.is_endpoint(row, col) or self.rng.random() >= WALL_CHANCE:
                    continue
                self.build(row, col)
                self.step_count += 1
                if (row * grid.cols + col) % 5 == 0:
                    yield from self.refresh(1)

        self.settle()
