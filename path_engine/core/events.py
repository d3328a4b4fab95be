import logging
from typing import Callable, Generator, NamedTuple, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SPEED = 1
MAX_SPEED = 100
DEFAULT_SPEED = 50

# Pacing, in milliseconds
PATH_REVEAL_DELAY = 50
FILL_PAUSE = 200


class Tick(NamedTuple):
    """
    One suspension point of a run.
    delay: how long the run asks to pause before resuming (ms).
    status: short progress label for HUDs and logs.
    """
    delay: float
    status: str = ""


class RunCancelled(Exception):
    pass


class CancelToken:
    __slots__ = ('_cancelled', 'reason')

    def __init__(self):
        self._cancelled = False
        self.reason = ""

    def cancel(self, reason: str = ""):
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def check_speed(speed: int) -> int:
    if not isinstance(speed, int) or not (MIN_SPEED <= speed <= MAX_SPEED):
        raise ValueError(f"Speed must be an integer in {MIN_SPEED}..{MAX_SPEED}, got {speed!r}")
    return speed


def step_delay(speed: int) -> int:
    return 101 - speed


def drive(steps: Generator[Tick, None, T],
          sleep: Optional[Callable[[float], None]] = None,
          cancel_token: Optional[CancelToken] = None,
          time_scale: float = 1.0) -> T:
    """
    Runs a step generator to completion and returns its result.

    sleep=None fast-forwards through every Tick (tests, headless runs).
    Pass time.sleep (or any callable taking seconds) to honour the delays.
    The cancel token is checked before the first step and at every Tick.
    """
    if cancel_token is not None and cancel_token.cancelled:
        steps.close()
        raise RunCancelled(cancel_token.reason or "Cancelled before start")

    ticks = 0
    while True:
        try:
            tick = next(steps)
        except StopIteration as stop:
            logger.debug(f"Run finished after {ticks} ticks")
            return stop.value

        ticks += 1
        if cancel_token is not None and cancel_token.cancelled:
            # Runs finally blocks inside the generator; no further grid writes
            steps.close()
            raise RunCancelled(cancel_token.reason or f"Cancelled after {ticks} ticks")

        if sleep is not None and tick.delay > 0:
            sleep(tick.delay * time_scale / 1000.0)
