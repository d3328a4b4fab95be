import logging
from typing import Iterator, List, Optional

import numpy as np
import pygame

from path_engine.core.grid import DEFAULT_WEIGHT, Grid, GridSnapshot
from path_engine.core.events import DEFAULT_SPEED, MAX_SPEED, MIN_SPEED, Tick
from path_engine.core.stats import SearchResult, StatsHistory, performance_rating
from path_engine.algo.solvers import SOLVERS, get_solver
from path_engine.algo.mazes import MAZES, get_maze

logger = logging.getLogger(__name__)


def build_palette() -> np.ndarray:
    """Flag byte -> RGB, highest priority flag wins."""
    palette = np.zeros((256, 3), dtype=np.uint8)
    for val in range(256):
        if val & Grid.START:
            color = Renderer.COLOR_START
        elif val & Grid.END:
            color = Renderer.COLOR_END
        elif val & Grid.WALL:
            color = Renderer.COLOR_WALL
        elif val & Grid.PATH:
            color = Renderer.COLOR_PATH
        elif val & Grid.VISITED:
            color = Renderer.COLOR_VISITED
        else:
            color = Renderer.COLOR_BG
        palette[val] = color
    return palette


class Renderer:
    COLOR_BG = (245, 245, 245)
    COLOR_WALL = (40, 44, 52)
    COLOR_VISITED = (110, 170, 230)
    COLOR_PATH = (255, 215, 0)  # Gold
    COLOR_START = (46, 204, 113)
    COLOR_END = (231, 76, 60)
    COLOR_WEIGHT = (155, 89, 182)
    COLOR_LINES = (200, 200, 200)
    COLOR_PANEL = (20, 20, 20)

    PANEL_WIDTH = 320

    def __init__(self, grid: Grid, algorithm: str = "dijkstra", maze: str = "recursive",
                 speed: int = DEFAULT_SPEED, seed: int = None, width=1280, height=800):
        self.grid = grid
        self.algorithms: List[str] = list(SOLVERS)
        self.mazes: List[str] = list(MAZES)
        self.algorithm = get_solver(algorithm).name
        self.maze = get_maze(maze).name
        self.speed = speed
        self.seed = seed
        self.screen_width = width
        self.screen_height = height

        self.palette = build_palette()
        self.history = StatsHistory()
        self.result: Optional[SearchResult] = None

        # Active run: a step generator plus the clock time it may resume at
        self.job: Optional[Iterator[Tick]] = None
        self.job_kind = ""
        self.resume_at = 0
        self.snapshot: Optional[GridSnapshot] = None

        self.cell_size = 20
        self.offset_x = 20
        self.offset_y = 20
        self.paint_wall = None

        self.font = None
        self.running = True
        self.clock = None
        self.surface = None

    def fit_to_screen(self):
        available_w = self.screen_width - self.PANEL_WIDTH - 40
        available_h = self.screen_height - 40
        self.cell_size = max(4, min(available_w // self.grid.cols, available_h // self.grid.rows))

    def init_window(self):
        pygame.init()
        pygame.display.set_caption(f"Pathfinding Visualizer - {self.grid.rows}x{self.grid.cols}")
        self.surface = pygame.display.set_mode((self.screen_width, self.screen_height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 16)
        self.fit_to_screen()

    def screen_to_cell(self, sx, sy):
        col = (sx - self.offset_x) // self.cell_size
        row = (sy - self.offset_y) // self.cell_size
        if self.grid.in_bounds(row, col):
            return row, col
        return None

    # -- runs --------------------------------------------------------------

    def on_snapshot(self, snapshot: GridSnapshot):
        self.snapshot = snapshot

    def stop_job(self):
        if self.job is not None:
            # Abandoned runs stop at their current suspension point
            self.job.close()
            logger.info(f"Stopped {self.job_kind}")
        self.job = None
        self.job_kind = ""
        self.snapshot = None

    def start_search(self):
        if self.grid.start is None or self.grid.end is None:
            logger.warning("Place a start (S) and an end (E) first")
            return
        self.stop_job()
        self.grid.clear_run()
        solver = get_solver(self.algorithm)(self.grid, speed=self.speed, on_update=self.on_snapshot)
        self.job = solver.run(self.grid.start, self.grid.end)
        self.job_kind = "search"
        self.resume_at = pygame.time.get_ticks()

    def start_maze(self):
        self.stop_job()
        self.grid = self.grid.blank_copy()
        generator = get_maze(self.maze)(self.grid, seed=self.seed, speed=self.speed,
                                        on_update=self.on_snapshot)
        self.job = generator.run()
        self.job_kind = "maze"
        self.resume_at = pygame.time.get_ticks()

    def step_job(self):
        now = pygame.time.get_ticks()
        budget = 500
        while self.job is not None and now >= self.resume_at and budget:
            try:
                tick = next(self.job)
            except StopIteration as stop:
                self.finish_job(stop.value)
                break
            self.resume_at = max(self.resume_at, now - 100) + tick.delay
            budget -= 1

    def finish_job(self, value):
        if self.job_kind == "search" and value is not None:
            self.result = value
            self.history.record_result(value)
            logger.info(f"{value.algorithm}: {value.stats.as_dict()}")
        self.job = None
        self.job_kind = ""
        self.snapshot = None

    # -- input -------------------------------------------------------------

    def handle_input(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.screen_width, self.screen_height = event.w, event.h
                self.fit_to_screen()

            elif event.type == pygame.MOUSEBUTTONDOWN and self.job is None:
                cell = self.screen_to_cell(*event.pos)
                if cell is None:
                    continue
                if event.button == 1:
                    self.paint_wall = self.grid.toggle_wall(*cell)
                elif event.button == 3:
                    self.grid.toggle_weight(*cell)

            elif event.type == pygame.MOUSEBUTTONUP:
                self.paint_wall = None

            elif event.type == pygame.MOUSEMOTION and self.paint_wall is not None and self.job is None:
                cell = self.screen_to_cell(*event.pos)
                if cell is not None:
                    self.grid.set_wall(*cell, self.paint_wall)

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key):
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.start_search()
        elif key == pygame.K_m:
            self.maze = self.mazes[(self.mazes.index(self.maze) + 1) % len(self.mazes)]
            self.start_maze()
        elif key == pygame.K_c:
            self.stop_job()
            self.grid.clear_run()
            self.result = None
        elif key == pygame.K_r:
            self.stop_job()
            self.grid.reset()
            self.history.clear()
            self.result = None
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.speed = min(MAX_SPEED, self.speed + 10)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.speed = max(MIN_SPEED, self.speed - 10)
        elif pygame.K_1 <= key < pygame.K_1 + len(self.algorithms):
            self.algorithm = self.algorithms[key - pygame.K_1]
        elif key in (pygame.K_s, pygame.K_e) and self.job is None:
            cell = self.screen_to_cell(*pygame.mouse.get_pos())
            if cell is not None:
                if key == pygame.K_s:
                    self.grid.set_start(*cell)
                else:
                    self.grid.set_end(*cell)

    # -- drawing -----------------------------------------------------------

    def draw_grid(self):
        self.surface.fill(self.COLOR_PANEL)
        snap = self.snapshot if self.snapshot is not None else self.grid.snapshot()

        flags = snap.to_array()
        rgb = self.palette[flags]
        plain = (flags & (Grid.WALL | Grid.RUN_STATE | Grid.ENDPOINT)) == 0
        rgb[plain & (snap.weight_array() != DEFAULT_WEIGHT)] = self.COLOR_WEIGHT

        # surfarray wants (width, height, 3)
        image = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.swapaxes(0, 1)))
        size = (snap.cols * self.cell_size, snap.rows * self.cell_size)
        self.surface.blit(pygame.transform.scale(image, size), (self.offset_x, self.offset_y))

        if self.cell_size >= 8:
            for row in range(snap.rows + 1):
                y = self.offset_y + row * self.cell_size
                pygame.draw.line(self.surface, self.COLOR_LINES, (self.offset_x, y), (self.offset_x + size[0], y))
            for col in range(snap.cols + 1):
                x = self.offset_x + col * self.cell_size
                pygame.draw.line(self.surface, self.COLOR_LINES, (x, self.offset_y), (x, self.offset_y + size[1]))

    def draw_hud(self):
        info = [
            f"FPS: {int(self.clock.get_fps())}",
            f"Size: {self.grid.rows}x{self.grid.cols}",
            f"Algorithm: {get_solver(self.algorithm).label}",
            f"Maze: {get_maze(self.maze).label}",
            f"Speed: {self.speed}",
            f"Status: {self.job_kind or 'Idle'}",
            "",
        ]
        if self.result is not None:
            stats = self.result.stats
            grade, score = performance_rating(stats, get_solver(self.result.algorithm).optimal)
            info += [
                f"Path found: {stats.path_found}",
                f"Path length: {stats.path_length}",
                f"Visited: {stats.nodes_visited}",
                f"Cost: {stats.path_cost}",
                f"Time: {stats.execution_time} ms",
                f"Efficiency: {stats.efficiency}%",
                f"Rating: {grade} ({score:.0f})",
                "",
            ]
        if len(self.history):
            info.append("History:")
            for entry in self.history:
                info.append(f"  {entry.algorithm:<14}{entry.stats.path_length:>4}{entry.stats.nodes_visited:>6}")
        info += ["", "1-6 algo  SPACE run  M maze", "S/E endpoints  C clear  R reset", "+/- speed  ESC quit"]

        x = self.screen_width - self.PANEL_WIDTH + 10
        for i, text in enumerate(info):
            lbl = self.font.render(text, True, (255, 255, 255))
            self.surface.blit(lbl, (x, 10 + i * 20))

    def run_loop(self):
        while self.running:
            self.handle_input()
            self.step_job()
            self.draw_grid()
            self.draw_hud()
            pygame.display.flip()
            self.clock.tick(60)

        self.stop_job()
        pygame.quit()
