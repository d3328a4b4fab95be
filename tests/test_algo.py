import unittest
import sys
import os
from collections import deque

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.grid import Grid
from path_engine.core.events import CancelToken, RunCancelled
from path_engine.algo.mazes import MAZES, generate, get_maze
from path_engine.algo.kruskal import DisjointSet
from path_engine.algo.division import RecursiveDivision

PERFECT = [name for name, cls in MAZES.items() if cls.perfect]


def open_component(grid, start):
    seen = {start}
    queue = deque([start])
    while queue:
        cell = queue.popleft()
        for n in grid.neighbors(*cell):
            if n not in seen and not grid.is_wall(*n):
                seen.add(n)
                queue.append(n)
    return seen


def open_edges(grid):
    edges = 0
    for row, col in grid.open_cells():
        if row + 1 < grid.rows and not grid.is_wall(row + 1, col):
            edges += 1
        if col + 1 < grid.cols and not grid.is_wall(row, col + 1):
            edges += 1
    return edges


class TestGenerators(unittest.TestCase):
    def make_grid(self, rows=21, cols=21):
        grid = Grid(rows, cols)
        grid.set_start(0, 0)
        grid.set_end((rows - 1) // 2 * 2, (cols - 1) // 2 * 2)
        return grid

    def test_endpoints_never_walls(self):
        for name in MAZES:
            for seed in range(5):
                grid = Grid(15, 15)
                # Off-lattice endpoints too
                grid.set_start(3, 7)
                grid.set_end(13, 1)
                out = generate(grid, name, seed=seed)
                self.assertFalse(out.is_wall(3, 7), f"{name} walled the start")
                self.assertFalse(out.is_wall(13, 1), f"{name} walled the end")
                self.assertEqual(out.start, (3, 7))
                self.assertEqual(out.end, (13, 1))

    def test_perfect_mazes_are_trees(self):
        self.assertEqual(set(PERFECT), {"recursive", "prim", "kruskal", "binary", "sidewinder"})
        for name in PERFECT:
            for rows, cols in ((21, 21), (20, 20), (10, 17)):
                grid = generate(self.make_grid(rows, cols), name, seed=rows * cols)
                cells = set(grid.open_cells())

                reached = open_component(grid, grid.start)
                self.assertEqual(reached, cells, f"{name} {rows}x{cols}: open cells not all connected")
                self.assertIn(grid.end, reached)
                self.assertEqual(open_edges(grid), len(cells) - 1, f"{name} {rows}x{cols}: open cells contain a cycle")

    def test_lattice_covered(self):
        for name in PERFECT:
            grid = generate(self.make_grid(), name, seed=1)
            for row in range(0, grid.rows, 2):
                for col in range(0, grid.cols, 2):
                    self.assertFalse(grid.is_wall(row, col), f"{name} left lattice cell ({row}, {col}) closed")

    def test_random_walls_density(self):
        grid = generate(self.make_grid(30, 30), "random", seed=11)
        ratio = grid.count(Grid.WALL) / len(grid)
        self.assertGreater(ratio, 0.2)
        self.assertLess(ratio, 0.5)

    def test_determinism(self):
        for name in MAZES:
            a = generate(self.make_grid(), name, seed=12345)
            b = generate(self.make_grid(), name, seed=12345)
            self.assertEqual(a.cells.tobytes(), b.cells.tobytes(), name)

    def test_callback_does_not_change_layout(self):
        for name in MAZES:
            plain = generate(self.make_grid(), name, seed=99)
            snaps = []
            watched = generate(self.make_grid(), name, seed=99, on_update=snaps.append)
            self.assertEqual(plain.cells.tobytes(), watched.cells.tobytes(), name)
            self.assertTrue(snaps, name)
            # Final snapshot shows the finished maze
            self.assertEqual(snaps[-1].cells, watched.cells.tobytes(), name)

    def test_input_grid_untouched(self):
        grid = self.make_grid()
        grid.set_wall(5, 5)
        grid.set_weight(4, 4, 5)
        before = grid.cells.tobytes()
        out = generate(grid, "kruskal", seed=3)
        self.assertIsNot(out, grid)
        self.assertEqual(grid.cells.tobytes(), before)
        # Weights carry over to the new layout
        self.assertEqual(out.weight(4, 4), 5)

    def test_run_state_cleared(self):
        grid = self.make_grid()
        grid.mark_visited(grid.index(2, 2))
        out = generate(grid, "prim", seed=3)
        self.assertEqual(out.count(Grid.RUN_STATE), 0)

    def test_run_all(self):
        grid = self.make_grid().blank_copy()
        gen = get_maze("binary")(grid, seed=5)
        self.assertIs(gen.run_all(), grid)
        self.assertGreater(gen.step_count, 0)

    def test_refresh_cadence(self):
        grid = self.make_grid().blank_copy()
        gen = get_maze("recursive")(grid, seed=5, speed=100, on_update=lambda snap: None)
        ticks = list(gen.run())
        # Fill pause first, then one tick per wall line with a 10 ms floor
        self.assertEqual(ticks[0].delay, 200)
        self.assertTrue(all(t.delay == 10 for t in ticks[1:]))
        self.assertEqual(len(ticks) - 1, gen.step_count)

    def test_no_ticks_without_callback(self):
        for name in MAZES:
            grid = self.make_grid().blank_copy()
            gen = get_maze(name)(grid, seed=5)
            self.assertEqual(list(gen.run()), [], name)

    def test_cancel(self):
        token = CancelToken()
        snaps = []

        def on_update(snap):
            snaps.append(snap)
            token.cancel()

        grid = self.make_grid()
        with self.assertRaises(RunCancelled):
            generate(grid, "kruskal", seed=1, on_update=on_update, cancel_token=token)
        self.assertEqual(len(snaps), 1)

    def test_unknown_maze(self):
        with self.assertRaises(ValueError):
            generate(self.make_grid(), "labyrinth")

    def test_split_line(self):
        # Odd, strictly inside the chamber
        for low, high in ((0, 2), (0, 4), (0, 20), (4, 10), (2, 48)):
            line = RecursiveDivision.split_line(low, high)
            self.assertEqual(line % 2, 1)
            self.assertLess(low, line)
            self.assertLess(line, high)

    def test_disjoint_set(self):
        sets = DisjointSet(6)
        self.assertTrue(sets.union(0, 1))
        self.assertTrue(sets.union(2, 3))
        self.assertFalse(sets.union(1, 0))
        self.assertTrue(sets.union(1, 3))
        self.assertEqual(sets.find(0), sets.find(2))
        self.assertNotEqual(sets.find(0), sets.find(4))
        self.assertEqual(sets.size[sets.find(3)], 4)


if __name__ == '__main__':
    unittest.main()
