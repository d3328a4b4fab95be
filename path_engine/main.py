import argparse
import sys
import os
import logging
import random
import time

# Ensure project root is in path so we can import 'path_engine' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.grid import DEFAULT_SIZE, HEAVY_WEIGHT, MAX_SIZE, MIN_SIZE, Grid
from path_engine.core.events import DEFAULT_SPEED, MAX_SPEED, MIN_SPEED
from path_engine.core.stats import StatsHistory, performance_rating
from path_engine.algo.solvers import SOLVERS, get_solver, run_search
from path_engine.algo.mazes import MAZES, generate

logger = logging.getLogger("path_engine")


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def parse_cell(text: str):
    try:
        row, col = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected ROW,COL, got {text!r}") from None
    return row, col


def default_end(size: int):
    # Last lattice cell, so perfect mazes always reach it
    last = (size - 1) // 2 * 2
    return last, last


def build_grid(args) -> Grid:
    grid = Grid(args.size)
    grid.set_start(*(args.start or (0, 0)))
    grid.set_end(*(args.end or default_end(args.size)))

    if args.maze:
        logger.info(f"Generating {MAZES[args.maze].label} maze (seed={args.seed})...")
        grid = generate(grid, args.maze, seed=args.seed)

    if args.weights > 0:
        rng = random.Random(args.seed)
        heavy = 0
        for row, col in list(grid.open_cells()):
            if not grid.is_endpoint(row, col) and rng.random() < args.weights:
                grid.set_weight(row, col, HEAVY_WEIGHT)
                heavy += 1
        logger.info(f"Placed {heavy} weighted cells")
    return grid


def print_stats(result):
    stats = result.stats
    solver = get_solver(result.algorithm)
    grade, score = performance_rating(stats, solver.optimal)
    print(f"Algorithm:     {solver.label}")
    print(f"Path found:    {stats.path_found}")
    print(f"Path length:   {stats.path_length}")
    print(f"Path cost:     {stats.path_cost}")
    print(f"Nodes visited: {stats.nodes_visited}")
    print(f"Time:          {stats.execution_time} ms")
    print(f"Efficiency:    {stats.efficiency}%")
    print(f"Rating:        {grade} ({score:.0f})")


def main():
    parser = argparse.ArgumentParser(description="Path Engine: grid pathfinding and maze generation")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    # Grid options shared by every command
    grid_opts = argparse.ArgumentParser(add_help=False)
    grid_opts.add_argument("--size", type=int, default=DEFAULT_SIZE, help=f"Grid side ({MIN_SIZE}-{MAX_SIZE})")
    grid_opts.add_argument("--maze", type=str, default=None, choices=list(MAZES), help="Maze to generate first")
    grid_opts.add_argument("--seed", type=int, default=None, help="Random Seed")
    grid_opts.add_argument("--start", type=parse_cell, default=None, help="Start cell ROW,COL (default 0,0)")
    grid_opts.add_argument("--end", type=parse_cell, default=None, help="End cell ROW,COL (default last lattice cell)")
    grid_opts.add_argument("--weights", type=float, default=0.0, help="Share of open cells given weight 5 (0.0 - 1.0)")
    grid_opts.add_argument("--speed", type=int, default=DEFAULT_SPEED, help=f"Animation speed ({MIN_SPEED}-{MAX_SPEED})")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", parents=[grid_opts], help="Run one search algorithm")
    solve_parser.add_argument("--algo", type=str, default="dijkstra", choices=list(SOLVERS), help="Search algorithm")
    solve_parser.add_argument("--paced", action="store_true", help="Honour animation delays")
    solve_parser.add_argument("--visual", action="store_true", help="Show visualization")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", parents=[grid_opts], help="Generate and print a maze")
    gen_parser.add_argument("--visual", action="store_true", help="Show visualization")

    # Compare Command
    subparsers.add_parser("compare", parents=[grid_opts], help="Run every algorithm on one grid")

    # View Command
    view_parser = subparsers.add_parser("view", parents=[grid_opts], help="Interactive visualizer")
    view_parser.add_argument("--algo", type=str, default="dijkstra", choices=list(SOLVERS), help="Initial algorithm")

    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return

    if not (MIN_SIZE <= args.size <= MAX_SIZE):
        parser.error(f"--size must be between {MIN_SIZE} and {MAX_SIZE}")
    if not (0.0 <= args.weights <= 1.0):
        parser.error("--weights must be between 0.0 and 1.0")
    if not (MIN_SPEED <= args.speed <= MAX_SPEED):
        parser.error(f"--speed must be between {MIN_SPEED} and {MAX_SPEED}")

    logger.info(f"Running command: {args.command}")

    try:
        grid = build_grid(args)
    except (IndexError, ValueError) as exc:
        parser.error(str(exc))

    if args.command == "solve":
        if args.visual:
            from path_engine.viz.renderer import Renderer
            renderer = Renderer(grid, algorithm=args.algo, maze=args.maze or "recursive",
                                speed=args.speed, seed=args.seed)
            renderer.init_window()
            renderer.start_search()
            renderer.run_loop()
            return

        logger.info(f"Solving with {args.algo.upper()} from {grid.start} to {grid.end}...")
        result = run_search(grid, args.algo, grid.start, grid.end, speed=args.speed,
                            sleep=time.sleep if args.paced else None)
        print(grid.to_text())
        print()
        print_stats(result)

    elif args.command == "generate":
        if args.visual:
            from path_engine.viz.renderer import Renderer
            renderer = Renderer(grid, maze=args.maze or "recursive", speed=args.speed, seed=args.seed)
            renderer.init_window()
            renderer.start_maze()
            renderer.run_loop()
            return
        print(grid.to_text())
        logger.info(f"Walls: {grid.count(Grid.WALL)} / {len(grid)}")

    elif args.command == "compare":
        history = StatsHistory(capacity=len(SOLVERS))
        for name in SOLVERS:
            grid.clear_run()
            result = run_search(grid, name, grid.start, grid.end, speed=args.speed)
            history.record_result(result)

        print(f"\n{'ALGORITHM':<24} | {'FOUND':<5} | {'LENGTH':<6} | {'COST':<5} | {'VISITED':<7} | {'EFF %':<5} | {'RATING':<6}")
        print("-" * 80)
        for entry in history:
            stats = entry.stats
            solver = get_solver(entry.algorithm)
            grade, _ = performance_rating(stats, solver.optimal)
            print(f"{solver.label:<24} | {str(stats.path_found):<5} | {stats.path_length:<6} | "
                  f"{stats.path_cost:<5} | {stats.nodes_visited:<7} | {stats.efficiency:<5} | {grade:<6}")

    elif args.command == "view":
        from path_engine.viz.renderer import Renderer
        renderer = Renderer(grid, algorithm=args.algo, maze=args.maze or "recursive",
                            speed=args.speed, seed=args.seed)
        renderer.init_window()
        renderer.run_loop()


if __name__ == "__main__":
    main()
