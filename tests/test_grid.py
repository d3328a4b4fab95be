import unittest
import sys
import os
import math

# Add project root to path so we can import path_engine
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.grid import HEAVY_WEIGHT, Grid, manhattan


class TestGrid(unittest.TestCase):
    def test_initialization(self):
        grid = Grid(10, 12)
        self.assertEqual(len(grid.cells), 120, f"Grid initialization size mismatch. Expected 120, got {len(grid.cells)}")
        self.assertEqual(len(grid), 120)
        for val in grid.cells:
            self.assertEqual(val, 0)
        self.assertTrue(all(w == 1 for w in grid.weights))
        self.assertTrue(all(d == math.inf for d in grid.distance))
        self.assertIsNone(grid.start)
        self.assertIsNone(grid.end)

        with self.assertRaises(ValueError):
            Grid(0)

    def test_coordinates(self):
        grid = Grid(5, 5)
        self.assertEqual(grid.index(2, 3), 13)  # 2 * 5 + 3
        self.assertEqual(grid.cell(13), (2, 3))

        with self.assertRaises(IndexError):
            grid.index(-1, 0)
        with self.assertRaises(IndexError):
            grid.index(0, 5)

    def test_neighbors(self):
        grid = Grid(3, 3)
        # Center cell has 4 neighbors, up/down/left/right
        self.assertEqual(list(grid.neighbors(1, 1)), [(0, 1), (2, 1), (1, 0), (1, 2)])
        # Corner has 2
        self.assertEqual(list(grid.neighbors(0, 0)), [(1, 0), (0, 1)])
        # Flat version matches
        self.assertEqual([grid.cell(i) for i in grid.adjacent(grid.index(1, 1))],
                         list(grid.neighbors(1, 1)))

    def test_neighbors_ignore_walls(self):
        grid = Grid(3, 3)
        grid.set_wall(0, 1)
        self.assertIn((0, 1), list(grid.neighbors(0, 0)))

    def test_endpoints(self):
        grid = Grid(5, 5)
        grid.set_wall(1, 1)
        grid.set_start(1, 1)
        self.assertFalse(grid.is_wall(1, 1), "Start cell must not be a wall")
        self.assertEqual(grid.start, (1, 1))

        # Moving the start clears the old one
        grid.set_start(2, 2)
        self.assertFalse(grid.node(1, 1).is_start)
        self.assertTrue(grid.node(2, 2).is_start)
        self.assertEqual(grid.count(Grid.START), 1)

        grid.set_end(4, 4)
        self.assertFalse(grid.set_wall(4, 4), "End cell refuses walls")
        self.assertFalse(grid.is_wall(4, 4))

        grid.clear_end()
        self.assertIsNone(grid.end)
        self.assertEqual(grid.count(Grid.END), 0)

    def test_toggle_wall(self):
        grid = Grid(3, 3)
        self.assertTrue(grid.toggle_wall(1, 1))
        self.assertTrue(grid.is_wall(1, 1))
        self.assertFalse(grid.toggle_wall(1, 1))
        self.assertFalse(grid.is_wall(1, 1))

    def test_weights(self):
        grid = Grid(3, 3)
        grid.set_start(0, 0)
        self.assertEqual(grid.toggle_weight(1, 1), HEAVY_WEIGHT)
        self.assertEqual(grid.toggle_weight(1, 1), 1)
        # Endpoints and walls keep the default weight
        self.assertEqual(grid.toggle_weight(0, 0), 1)
        grid.set_wall(2, 2)
        self.assertEqual(grid.toggle_weight(2, 2), 1)

        with self.assertRaises(ValueError):
            grid.set_weight(1, 1, 0)

    def test_run_state_reset(self):
        grid = Grid(3, 3)
        grid.set_wall(1, 1)
        grid.set_weight(0, 2, 5)
        grid.mark_visited(0)
        grid.mark_path(1)
        grid.previous[1] = 0
        grid.distance[1] = 4
        grid.heuristic[1] = 7

        grid.reset_run_state(distance=False, heuristic=False)
        self.assertFalse(grid.is_visited(0, 0))
        self.assertFalse(grid.is_path(0, 1))
        self.assertEqual(grid.previous[1], -1)
        # Fields the caller did not ask to reset survive
        self.assertEqual(grid.distance[1], 4)
        self.assertEqual(grid.heuristic[1], 7)

        grid.clear_run()
        self.assertEqual(grid.distance[1], math.inf)
        self.assertEqual(grid.heuristic[1], 0)
        # Layout survives
        self.assertTrue(grid.is_wall(1, 1))
        self.assertEqual(grid.weight(0, 2), 5)

    def test_reset(self):
        grid = Grid(3, 3)
        grid.set_start(0, 0)
        grid.set_wall(1, 1)
        grid.set_weight(2, 2, 5)
        grid.reset()
        self.assertIsNone(grid.start)
        self.assertEqual(grid.count(0xFF), 0)
        self.assertEqual(grid.weight(2, 2), 1)

    def test_blank_copy(self):
        grid = Grid(4, 4)
        grid.set_start(0, 0)
        grid.set_end(3, 3)
        grid.set_wall(1, 1)
        grid.set_weight(2, 2, 5)
        grid.mark_visited(grid.index(0, 1))

        blank = grid.blank_copy()
        self.assertFalse(blank.is_wall(1, 1))
        self.assertFalse(blank.is_visited(0, 1))
        self.assertEqual(blank.start, (0, 0))
        self.assertEqual(blank.end, (3, 3))
        self.assertEqual(blank.weight(2, 2), 5)
        # Source grid untouched
        self.assertTrue(grid.is_wall(1, 1))

    def test_reconstruct_path(self):
        grid = Grid(1, 4)
        grid.previous[3] = 2
        grid.previous[2] = 1
        grid.previous[1] = 0
        self.assertEqual(grid.reconstruct_path((0, 3)), [(0, 0), (0, 1), (0, 2), (0, 3)])

        grid.previous[0] = 2
        with self.assertRaises(ValueError):
            grid.reconstruct_path((0, 3))

    def test_node_view(self):
        grid = Grid(3, 3)
        grid.set_end(2, 2)
        grid.previous[grid.index(2, 2)] = grid.index(2, 1)
        node = grid[2, 2]
        self.assertTrue(node.is_end)
        self.assertEqual(node.previous, (2, 1))
        self.assertIsNone(grid[0, 0].previous)

    def test_snapshot_is_a_copy(self):
        grid = Grid(3, 3)
        snap = grid.snapshot()
        grid.set_wall(1, 1)
        self.assertFalse(snap.node(1, 1).is_wall)
        self.assertLess(snap.version, grid.version)

        arr = grid.snapshot().to_array()
        self.assertEqual(arr.shape, (3, 3))
        self.assertEqual(arr[1, 1], Grid.WALL)

    def test_text_layout(self):
        layout = "S.#\n.w.\n#.E"
        grid = Grid.from_text(layout)
        self.assertEqual((grid.rows, grid.cols), (3, 3))
        self.assertEqual(grid.start, (0, 0))
        self.assertEqual(grid.end, (2, 2))
        self.assertTrue(grid.is_wall(0, 2))
        self.assertEqual(grid.weight(1, 1), HEAVY_WEIGHT)
        self.assertEqual(grid.to_text(), layout)

        with self.assertRaises(ValueError):
            Grid.from_text("S.\n...")
        with self.assertRaises(ValueError):
            Grid.from_text("S?E")

    def test_manhattan(self):
        self.assertEqual(manhattan((0, 0), (3, 4)), 7)
        self.assertEqual(manhattan((2, 2), (2, 2)), 0)


if __name__ == '__main__':
    unittest.main()
