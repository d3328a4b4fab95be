import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.events import (
    CancelToken, RunCancelled, Tick, check_speed, drive, step_delay
)


def counting(n, delay=10):
    for i in range(n):
        yield Tick(delay, f"step {i}")
    return "finished"


class TestDrive(unittest.TestCase):
    def test_fast_forward(self):
        self.assertEqual(drive(counting(5)), "finished")

    def test_sleep(self):
        slept = []
        drive(counting(3, delay=20), sleep=slept.append)
        self.assertEqual(slept, [0.02, 0.02, 0.02])

    def test_time_scale(self):
        slept = []
        drive(counting(2, delay=100), sleep=slept.append, time_scale=0.5)
        self.assertEqual(slept, [0.05, 0.05])

    def test_zero_delay_skips_sleep(self):
        slept = []
        drive(counting(3, delay=0), sleep=slept.append)
        self.assertEqual(slept, [])

    def test_cancel_mid_run(self):
        token = CancelToken()
        seen = []

        def steps():
            for i in range(10):
                seen.append(i)
                if i == 2:
                    token.cancel("stop")
                yield Tick(1)

        with self.assertRaises(RunCancelled) as ctx:
            drive(steps(), cancel_token=token)
        self.assertEqual(seen, [0, 1, 2])
        self.assertIn("stop", str(ctx.exception))

    def test_cancel_closes_generator(self):
        token = CancelToken()
        closed = []

        def steps():
            try:
                yield Tick(1)
                yield Tick(1)
            finally:
                closed.append(True)

        gen = steps()
        token.cancel()
        with self.assertRaises(RunCancelled):
            drive(gen, cancel_token=token)
        # Never started, so nothing to unwind
        self.assertEqual(closed, [])

        token = CancelToken()
        gen = steps()
        next(gen)
        token.cancel()
        with self.assertRaises(RunCancelled):
            drive(gen, cancel_token=token)
        self.assertEqual(closed, [True])

    def test_token(self):
        token = CancelToken()
        self.assertFalse(token.cancelled)
        token.cancel("bye")
        self.assertTrue(token.cancelled)
        self.assertEqual(token.reason, "bye")


class TestSpeed(unittest.TestCase):
    def test_step_delay(self):
        self.assertEqual(step_delay(1), 100)
        self.assertEqual(step_delay(50), 51)
        self.assertEqual(step_delay(100), 1)

    def test_check_speed(self):
        self.assertEqual(check_speed(1), 1)
        self.assertEqual(check_speed(100), 100)
        for bad in (0, 101, -5, 50.5, "fast"):
            with self.assertRaises(ValueError):
                check_speed(bad)


if __name__ == '__main__':
    unittest.main()
