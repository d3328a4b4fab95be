from typing import Iterator, List

from path_engine.core.grid import Cell
from path_engine.core.events import Tick
from path_engine.algo.base import Generator


class PrimsAlgorithm(Generator):
    """
    Randomized frontier growth on the 2-step lattice.

    The frontier holds lattice cells two steps from the open region. A picked
    frontier cell joins the region through exactly one open 2-step neighbor,
    so regions never merge and the result stays a tree.
    """
    name = "prim"
    label = "Prim's Algorithm"
    perfect = True

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        self.fill()
        yield from self.filled()

        # Maze membership is tracked apart from the wall flag: endpoints are
        # never walls but still have to be reached through the tree
        in_maze = bytearray(grid.rows * grid.cols)

        seed_row, seed_col = self.rng.choice(self.lattice_cells())
        self.carve(seed_row, seed_col)
        in_maze[grid.index(seed_row, seed_col)] = 1

        # Duplicates allowed; a cell is re-checked each time it is picked
        frontier: List[Cell] = []
        self.add_frontier(seed_row, seed_col, in_maze, frontier)

        while frontier:
            # Pick random cell from frontier, swap remove for O(1)
            i = self.rng.randrange(len(frontier))
            row, col = frontier[i]
            frontier[i] = frontier[-1]
            frontier.pop()

            if in_maze[grid.index(row, col)]:
                continue

            linked = [n for n in self.lattice_neighbors(row, col) if in_maze[grid.index(*n)]]
            if not linked:
                continue

            self.link((row, col), self.rng.choice(linked))
            in_maze[grid.index(row, col)] = 1
            self.add_frontier(row, col, in_maze, frontier)
            self.step_count += 1

            yield from self.refresh(5, chance=0.1)

        self.settle()

    def add_frontier(self, row: int, col: int, in_maze: bytearray, frontier: List[Cell]):
        for nr, nc in self.lattice_neighbors(row, col):
            if not in_maze[self.grid.index(nr, nc)]:
                frontier.append((nr, nc))
