from typing import Iterator

from path_engine.core.events import Tick
from path_engine.algo.base import Generator


class BinaryTree(Generator):
    """
    Every lattice cell links north or east, chosen at random among the
    directions that stay inside the grid. Passages drift to the top-right.
    """
    name = "binary"
    label = "Binary Tree"
    perfect = True

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        self.fill()
        yield from self.filled()

        for row, col in self.lattice_cells():
            self.carve(row, col)

            choices = []
            if row > 0:
                choices.append((row - 2, col))
            if col < grid.cols - 2:
                choices.append((row, col + 2))

            if choices:
                self.link((row, col), self.rng.choice(choices))
                self.step_count += 1
                yield from self.refresh(5, chance=0.1)

        self.settle()
