import time
from typing import Callable, Optional


class Timer:

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Create a Timer that starts counting immediately.

        :param clock: Optional monotonic clock returning seconds. Defaults to time.monotonic
        """
        self.clock = clock if clock is not None else time.monotonic
        self.start_time = self.clock()

    def elapsed_seconds(self) -> float:
        return self.clock() - self.start_time

    def elapsed_millis(self) -> float:
        return self.elapsed_seconds() * 1000
