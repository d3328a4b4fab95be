from typing import Iterator, List, Tuple

from path_engine.core.events import Tick
from path_engine.algo.base import Generator

# (top, left, bottom, right, horizontal); bounds are even lattice coordinates
Chamber = Tuple[int, int, int, int, bool]


class RecursiveDivision(Generator):
    """
    Opens the lattice block, then splits chambers with wall lines that keep
    a single gap, alternating orientation. Lines sit on odd rows/columns and
    gaps on even ones, so every chamber stays reachable through its gap.
    """
    name = "recursive"
    label = "Recursive Division"
    perfect = True

    def run(self) -> Iterator[Tick]:
        grid = self.grid
        self.fill()
        yield from self.filled()

        # Last even row/column; an even-length side leaves its final line as wall
        bottom = (grid.rows - 1) // 2 * 2
        right = (grid.cols - 1) // 2 * 2
        for row in range(bottom + 1):
            for col in range(right + 1):
                self.carve(row, col)

        # Explicit stack instead of recursion; first half pushed last so it runs first
        stack: List[Chamber] = [(0, 0, bottom, right, True)]
        while stack:
            top, left, bottom, right, horizontal = stack.pop()
            if bottom - top < 2 or right - left < 2:
                continue

            if horizontal:
                y = self.split_line(top, bottom)
                gap = left + 2 * self.rng.randrange((right - left) // 2 + 1)
                for x in range(left, right + 1):
                    if x != gap:
                        self.build(y, x)
                stack.append((y + 1, left, bottom, right, False))
                stack.append((top, left, y - 1, right, False))
            else:
                x = self.split_line(left, right)
                gap = top + 2 * self.rng.randrange((bottom - top) // 2 + 1)
                for y in range(top, bottom + 1):
                    if y != gap:
                        self.build(y, x)
                stack.append((top, x + 1, bottom, right, True))
                stack.append((top, left, bottom, x - 1, True))

            self.step_count += 1
            yield from self.refresh(10)

        self.settle()

    @staticmethod
    def split_line(low: int, high: int) -> int:
        """Odd coordinate closest to the middle of [low, high]."""
        return low + 2 * (((high - low) // 2 - 1) // 2) + 1
