import heapq
import logging
import math
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, Dict, Generator, List, Optional, Type

from path_engine.core.grid import Cell, Grid, GridSnapshot, manhattan
from path_engine.core.events import (
    DEFAULT_SPEED, PATH_REVEAL_DELAY, CancelToken, Tick, check_speed, drive, step_delay
)
from path_engine.core.stats import SearchResult, SearchStats

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[GridSnapshot], None]
Steps = Generator[Tick, None, SearchResult]

BLOCKED = Grid.VISITED | Grid.WALL


class Solver(ABC):
    """
    Base for the search algorithms.

    run() returns a generator: each yielded Tick is a suspension point
    (a visited cell or a revealed path cell), and the generator's return
    value is the SearchResult. The grid is mutated in place while it runs.
    """
    name = ""
    label = ""
    description = ""
    time_complexity = ""
    space_complexity = ""
    optimal = False
    weighted = False

    # Fields this algorithm reads; reset before every run
    uses_distance = False
    uses_heuristic = False

    def __init__(self, grid: Grid, speed: int = DEFAULT_SPEED, on_update: Optional[UpdateCallback] = None):
        self.grid = grid
        self.speed = check_speed(speed)
        self.delay = step_delay(self.speed)
        self.on_update = on_update
        self.visited: List[int] = []
        self.path: List[Cell] = []
        self.result: Optional[SearchResult] = None
        self._start = -1
        self._end = -1

    def run(self, start: Cell, end: Cell) -> Steps:
        # Resolve eagerly so bad coordinates fail at the call, not at the first step
        start_idx = self.grid.index(*start)
        end_idx = self.grid.index(*end)
        return self._run(start_idx, end_idx)

    def solve(self, start: Cell, end: Cell) -> SearchResult:
        """Runs to completion without pausing."""
        return drive(self.run(start, end))

    @abstractmethod
    def search(self, start: int, end: int) -> Generator[Tick, None, Optional[List[Cell]]]:
        """Explores from start; returns the start -> end route or None."""

    def _run(self, start: int, end: int) -> Steps:
        t0 = time.perf_counter()
        grid = self.grid
        self._start, self._end = start, end
        self.visited = []
        self.path = []
        grid.reset_run_state(distance=self.uses_distance, heuristic=self.uses_heuristic)
        logger.debug(f"{self.label}: {grid.cell(start)} -> {grid.cell(end)} on {grid.rows}x{grid.cols}")

        route = yield from self.search(start, end)
        if route is not None:
            self.path = route
            yield from self.reveal(route)

        elapsed = round((time.perf_counter() - t0) * 1000)
        found = route is not None
        stats = SearchStats(
            path_found=found,
            path_length=len(self.path),
            nodes_visited=len(self.visited),
            nodes_in_path=len(self.path),
            execution_time=elapsed,
            path_cost=sum(grid.weight(*c) for c in self.path[1:]) if found else 0,
        )
        self.result = SearchResult(
            algorithm=self.name,
            path=tuple(self.path),
            visited=tuple(grid.cell(i) for i in self.visited),
            stats=stats,
        )
        logger.debug(f"{self.label}: found={found} visited={stats.nodes_visited} length={stats.path_length}")
        return self.result

    # -- shared steps ------------------------------------------------------

    def notify(self):
        if self.on_update is not None:
            self.on_update(self.grid.snapshot())

    def record(self, idx: int):
        self.grid.mark_visited(idx)
        self.visited.append(idx)

    def pause(self, idx: int, delay: float = None) -> Generator[Tick, None, None]:
        """Snapshot after a visit; endpoints never wait."""
        self.notify()
        if idx != self._start and idx != self._end:
            yield Tick(self.delay if delay is None else delay, f"Visited: {len(self.visited)}")

    def reveal(self, route: List[Cell]) -> Generator[Tick, None, None]:
        for cell in route:
            idx = self.grid.index(*cell)
            if idx != self._start and idx != self._end:
                self.grid.mark_path(idx)
                self.notify()
                yield Tick(PATH_REVEAL_DELAY, "Path")


class Dijkstra(Solver):
    name = "dijkstra"
    label = "Dijkstra's Algorithm"
    description = "Guarantees shortest path, explores uniformly. Optimal for weighted graphs."
    time_complexity = "O((V + E) log V)"
    space_complexity = "O(V)"
    optimal = True
    weighted = True
    uses_distance = True

    def search(self, start, end):
        grid = self.grid
        cells, weights = grid.cells, grid.weights
        dist, previous = grid.distance, grid.previous

        dist[start] = 0
        # (distance, insertion order, index); stale entries skipped on pop
        heap = [(0, 0, start)]
        seq = 1

        while heap:
            d, _, current = heapq.heappop(heap)
            if cells[current] & Grid.VISITED or d > dist[current]:
                continue
            if cells[current] & Grid.WALL or d == math.inf:
                break

            self.record(current)
            yield from self.pause(current)

            if current == end:
                return grid.reconstruct_path(grid.cell(end))

            for n in grid.adjacent(current):
                if cells[n] & BLOCKED:
                    continue
                tentative = d + weights[n]
                if tentative < dist[n]:
                    dist[n] = tentative
                    previous[n] = current
                    heapq.heappush(heap, (tentative, seq, n))
                    seq += 1
        return None


class AStar(Solver):
    name = "astar"
    label = "A* Search"
    description = "Heuristic-based, optimal and efficient. Best overall performance."
    time_complexity = "O(b^d)"
    space_complexity = "O(b^d)"
    optimal = True
    weighted = True
    uses_distance = True
    uses_heuristic = True

    def search(self, start, end):
        grid = self.grid
        cells, weights = grid.cells, grid.weights
        dist, h, previous = grid.distance, grid.heuristic, grid.previous
        goal = grid.cell(end)

        dist[start] = 0
        h[start] = manhattan(grid.cell(start), goal)
        heap = [(h[start], 0, start)]
        seq = 1

        while heap:
            f, _, current = heapq.heappop(heap)
            if cells[current] & Grid.VISITED or f != dist[current] + h[current]:
                continue
            if cells[current] & Grid.WALL:
                continue

            self.record(current)
            yield from self.pause(current)

            if current == end:
                return grid.reconstruct_path(goal)

            g = dist[current]
            for n in grid.adjacent(current):
                if cells[n] & BLOCKED:
                    continue
                tentative = g + weights[n]
                discovered = dist[n] != math.inf
                if not discovered or tentative < dist[n]:
                    dist[n] = tentative
                    h[n] = manhattan(grid.cell(n), goal)
                    previous[n] = current
                    heapq.heappush(heap, (tentative + h[n], seq, n))
                    seq += 1
        return None


class BreadthFirst(Solver):
    name = "bfs"
    label = "Breadth-First Search"
    description = "Unweighted shortest path, explores level by level. Good for unweighted graphs."
    time_complexity = "O(V + E)"
    space_complexity = "O(V)"
    optimal = True
    uses_distance = True

    def search(self, start, end):
        grid = self.grid
        cells, dist, previous = grid.cells, grid.distance, grid.previous

        # Cells count as visited when discovered, snapshots happen on dequeue
        dist[start] = 0
        self.record(start)
        queue: Deque[int] = deque([start])

        while queue:
            current = queue.popleft()
            yield from self.pause(current)

            if current == end:
                return grid.reconstruct_path(grid.cell(end))

            for n in grid.adjacent(current):
                if cells[n] & BLOCKED:
                    continue
                self.record(n)
                dist[n] = dist[current] + 1
                previous[n] = current
                queue.append(n)
        return None


class DepthFirst(Solver):
    name = "dfs"
    label = "Depth-First Search"
    description = "Explores deeply, does not guarantee shortest path. Fast but suboptimal."
    time_complexity = "O(V + E)"
    space_complexity = "O(V)"

    def search(self, start, end):
        grid = self.grid
        cells, previous = grid.cells, grid.previous

        if cells[start] & Grid.WALL:
            return None
        self.record(start)
        yield from self.pause(start)
        if start == end:
            return [grid.cell(start)]

        # Frames of (cell, iterator over its remaining neighbors)
        stack = [(start, iter(grid.adjacent(start)))]
        while stack:
            current, pending = stack[-1]
            for n in pending:
                if not (cells[n] & BLOCKED):
                    break
            else:
                stack.pop()
                continue

            previous[n] = current
            self.record(n)
            yield from self.pause(n)

            if n == end:
                return grid.reconstruct_path(grid.cell(end))
            stack.append((n, iter(grid.adjacent(n))))
        return None


class GreedyBestFirst(Solver):
    name = "greedy"
    label = "Greedy Best-First"
    description = "Fast but not optimal, uses heuristic only. May get stuck in local optima."
    time_complexity = "O(b^m)"
    space_complexity = "O(b^m)"
    uses_heuristic = True

    def search(self, start, end):
        grid = self.grid
        cells, h, previous = grid.cells, grid.heuristic, grid.previous
        goal = grid.cell(end)

        h[start] = manhattan(grid.cell(start), goal)
        heap = [(h[start], 0, start)]
        queued = {start}
        seq = 1

        while heap:
            _, _, current = heapq.heappop(heap)
            queued.discard(current)
            if cells[current] & BLOCKED:
                continue

            self.record(current)
            yield from self.pause(current)

            if current == end:
                return grid.reconstruct_path(goal)

            for n in grid.adjacent(current):
                if cells[n] & BLOCKED or n in queued:
                    continue
                h[n] = manhattan(grid.cell(n), goal)
                previous[n] = current
                heapq.heappush(heap, (h[n], seq, n))
                queued.add(n)
                seq += 1
        return None


class _Side:
    """One direction of a bidirectional search."""
    __slots__ = ('queue', 'parents', 'depth')

    def __init__(self, root: Cell, root_idx: int):
        self.queue: Deque[int] = deque([root_idx])
        # Key present == discovered; filled when a neighbor is first seen
        self.parents: Dict[Cell, Optional[Cell]] = {root: None}
        self.depth: Dict[Cell, int] = {root: 0}


class Bidirectional(Solver):
    name = "bidirectional"
    label = "Bidirectional Search"
    description = "Searches from both ends simultaneously. Reduces search space significantly."
    time_complexity = "O(b^(d/2))"
    space_complexity = "O(b^(d/2))"
    optimal = True

    def search(self, start, end):
        grid = self.grid
        forward = _Side(grid.cell(start), start)
        backward = _Side(grid.cell(end), end)
        half = self.delay / 2

        meeting = None
        while forward.queue or backward.queue:
            if forward.queue:
                meeting = yield from self.expand(forward, backward, half)
                if meeting is not None:
                    break
            if backward.queue:
                meeting = yield from self.expand(backward, forward, half)
                if meeting is not None:
                    break

        if meeting is None:
            return None
        return self.join(self.best_meeting(meeting, forward, backward), forward, backward)

    def expand(self, side: _Side, other: _Side, delay: float):
        grid = self.grid
        current = side.queue.popleft()
        if not (grid.cells[current] & Grid.VISITED):
            self.record(current)
        yield from self.pause(current, delay)

        cell = grid.cell(current)
        if cell in other.parents:
            return cell

        depth = side.depth[cell] + 1
        for n in grid.adjacent(current):
            ncell = grid.cell(n)
            if grid.cells[n] & Grid.WALL or ncell in side.parents:
                continue
            side.parents[ncell] = cell
            side.depth[ncell] = depth
            side.queue.append(n)
        return None

    @staticmethod
    def best_meeting(found: Cell, forward: _Side, backward: _Side) -> Cell:
        """
        The frontiers can overlap in more than one cell by the time one side
        notices; the cheapest overlap gives the shortest route.
        """
        best, best_len = found, forward.depth[found] + backward.depth[found]
        for cell, d in forward.depth.items():
            other = backward.depth.get(cell)
            if other is not None and d + other < best_len:
                best, best_len = cell, d + other
        return best

    @staticmethod
    def join(meeting: Cell, forward: _Side, backward: _Side) -> List[Cell]:
        route = []
        cell = meeting
        while cell is not None:
            route.append(cell)
            cell = forward.parents[cell]
        route.reverse()

        cell = backward.parents[meeting]
        while cell is not None:
            route.append(cell)
            cell = backward.parents[cell]
        return route


SOLVERS: Dict[str, Type[Solver]] = {
    cls.name: cls for cls in (Dijkstra, AStar, BreadthFirst, DepthFirst, GreedyBestFirst, Bidirectional)
}


def get_solver(name: str) -> Type[Solver]:
    try:
        return SOLVERS[name]
    except KeyError:
        raise ValueError(f"Unknown algorithm {name!r}; choose from {', '.join(SOLVERS)}") from None


def run_search(grid: Grid, algorithm: str, start: Cell, end: Cell,
               speed: int = DEFAULT_SPEED,
               on_update: Optional[UpdateCallback] = None,
               sleep: Optional[Callable[[float], None]] = None,
               cancel_token: Optional[CancelToken] = None) -> SearchResult:
    """
    Runs one algorithm on the grid and returns its result.
    With sleep=None the run fast-forwards through every pause.
    """
    solver = get_solver(algorithm)(grid, speed=speed, on_update=on_update)
    return drive(solver.run(start, end), sleep=sleep, cancel_token=cancel_token)
