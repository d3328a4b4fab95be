from typing import Iterator, List, Tuple

from path_engine.core.grid import Cell
from path_engine.core.events import Tick
from path_engine.algo.base import Generator


class DisjointSet:
    """Union-find over flat indices, path compression + union by size."""
    __slots__ = ('parent', 'size')

    def __init__(self, n: int):
        self.parent = list(range(n))
        self.size = [1] * n

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        # Compress
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, a: int, b: int) -> bool:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if self.size[ra] < self.size[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]
        return True


class KruskalsAlgorithm(Generator):
    """
    Randomized spanning tree: shuffle every 2-step edge of the lattice and
    keep the ones that join two different components.
    """
    name = "kruskal"
    label = "Kruskal's Algorithm"
    perfect = True

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        self.fill()
        yield from self.filled()

        sets = DisjointSet(grid.rows * grid.cols)

        edges: List[Tuple[Cell, Cell]] = []
        for row, col in self.lattice_cells():
            if row + 2 < grid.rows:
                edges.append(((row, col), (row + 2, col)))
            if col + 2 < grid.cols:
                edges.append(((row, col), (row, col + 2)))
        self.rng.shuffle(edges)

        for a, b in edges:
            if sets.union(grid.index(*a), grid.index(*b)):
                self.link(a, b)
                self.step_count += 1
                yield from self.refresh(10, chance=0.05)

        # A single-cell lattice has no edges
        if not edges:
            self.carve(0, 0)

        self.settle()
