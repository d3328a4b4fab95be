import sys
import os
import time
import argparse

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.grid import MAX_SIZE, Grid
from path_engine.core.stats import performance_rating
from path_engine.algo.mazes import MAZES, generate
from path_engine.algo.solvers import get_solver, run_search

# ==========================================
# GLOBAL CONFIGURATION
# Add or remove solver names here to include/exclude them from the race.
# ==========================================
ENABLED_SOLVERS = [
    "bfs",
    "dijkstra",
    "astar",
    "greedy",
    "dfs",
    "bidirectional",
]


def run_benchmark():
    parser = argparse.ArgumentParser(description="Solver Benchmark")
    parser.add_argument("--size", type=int, default=MAX_SIZE, help="Grid side")
    parser.add_argument("--maze", type=str, default="kruskal", choices=list(MAZES), help="Maze type")
    parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    args = parser.parse_args()

    print(f"=== PATHFINDING BENCHMARK ===")
    print(f"Size: {args.size}x{args.size} | Maze: {args.maze}")
    print(f"Solvers: {', '.join(ENABLED_SOLVERS)}")
    print("-" * 50)

    # 1. Generate Maze
    print(f"Generating Maze ({MAZES[args.maze].label})...")
    t0 = time.time()
    grid = Grid(args.size)
    last = (args.size - 1) // 2 * 2
    grid.set_start(0, 0)
    grid.set_end(last, last)
    grid = generate(grid, args.maze, seed=args.seed)
    print(f"Generation Complete in {time.time() - t0:.4f}s.")
    print("-" * 50)

    # 2. Race Loop
    results = []
    for name in ENABLED_SOLVERS:
        print(f"Running {name.upper()}...", end="", flush=True)
        # Runs share the grid; each one resets visited/path itself
        result = run_search(grid, name, grid.start, grid.end, speed=100)
        grade, _ = performance_rating(result.stats, get_solver(name).optimal)
        print(f" Done ({result.stats.execution_time} ms) | Path: {result.stats.path_length}")
        results.append({
            "name": name,
            "time": result.stats.execution_time,
            "path": result.stats.path_length,
            "visited": result.stats.nodes_visited,
            "rating": grade,
        })

    # 3. Leaderboard
    print("=" * 70)
    print(f"{'RANK':<5} | {'ALGORITHM':<20} | {'TIME (ms)':<10} | {'PATH':<8} | {'VISITED':<8} | {'RATING':<6}")
    print("-" * 70)

    # Fewest visited first
    results.sort(key=lambda x: x['visited'])

    for i, res in enumerate(results):
        print(f"{i+1:<5} | {res['name'].upper():<20} | {res['time']:<10} | {res['path']:<8} | {res['visited']:<8} | {res['rating']:<6}")
    print("=" * 70)


if __name__ == "__main__":
    run_benchmark()
