import logging
from typing import Callable, Dict, Optional, Type

from path_engine.core.grid import Grid, GridSnapshot
from path_engine.core.events import DEFAULT_SPEED, CancelToken, drive
from path_engine.algo.base import Generator
from path_engine.algo.random_fill import RandomWalls
from path_engine.algo.division import RecursiveDivision
from path_engine.algo.prim import PrimsAlgorithm
from path_engine.algo.kruskal import KruskalsAlgorithm
from path_engine.algo.binary_tree import BinaryTree
from path_engine.algo.sidewinder import Sidewinder

logger = logging.getLogger(__name__)

MAZES: Dict[str, Type[Generator]] = {
    cls.name: cls for cls in (RandomWalls, RecursiveDivision, PrimsAlgorithm,
                              KruskalsAlgorithm, BinaryTree, Sidewinder)
}


def get_maze(name: str) -> Type[Generator]:
    try:
        return MAZES[name]
    except KeyError:
        raise ValueError(f"Unknown maze type {name!r}; choose from {', '.join(MAZES)}") from None


def generate(grid: Grid, maze_type: str,
             speed: int = DEFAULT_SPEED,
             on_update: Optional[Callable[[GridSnapshot], None]] = None,
             seed: int = None,
             sleep: Optional[Callable[[float], None]] = None,
             cancel_token: Optional[CancelToken] = None) -> Grid:
    """
    Builds a maze on a blank copy of grid and returns the copy.
    Start, end and weights carry over; the input grid is not modified.
    """
    cls = get_maze(maze_type)
    working = grid.blank_copy()
    generator = cls(working, seed=seed, speed=speed, on_update=on_update)
    logger.debug(f"Generating {cls.label} maze on {grid.rows}x{grid.cols} (seed={seed})")
    drive(generator.run(), sleep=sleep, cancel_token=cancel_token)
    logger.debug(f"{cls.label}: {generator.step_count} steps, {working.count(Grid.WALL)} walls")
    return working
