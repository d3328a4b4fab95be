from typing import Iterator

from path_engine.core.events import Tick
from path_engine.algo.base import Generator


class Sidewinder(Generator):
    """
    Row sweep over the lattice: keep extending the current run east, or close
    it by carving one north passage from a random cell of the run.
    The top row is a single run.
    """
    name = "sidewinder"
    label = "Sidewinder"
    perfect = True

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        self.fill()
        yield from self.filled()

        for row in range(0, grid.rows, 2):
            run_start = 0
            for col in range(0, grid.cols, 2):
                self.carve(row, col)

                carve_east = col < grid.cols - 2 and (row == 0 or self.rng.random() < 0.5)
                if carve_east:
                    self.carve(row, col + 1)
                else:
                    if row > 0:
                        # Pick a lattice column inside [run_start, col]
                        up_col = run_start + self.rng.randrange((col - run_start) // 2 + 1) * 2
                        self.carve(row - 1, up_col)
                    run_start = col + 2

                self.step_count += 1
                yield from self.refresh(5, chance=0.1)

        self.settle()
