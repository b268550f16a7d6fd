# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Timer implementations for trial measurements.

This module provides timer classes for measuring one unit of GPU-facing work:
- WallClockTimer: wall-clock timing using time.perf_counter()
- BarrierTimer: wall-clock timing that waits for the GPU to go idle before
  taking the stop timestamp, for work the driver may queue asynchronously

Example:
    >>> from glbench.core.timing import BarrierTimer, measure
    >>> elapsed_ms = measure(submit_draws, BarrierTimer(ctx.await_idle))
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

Clock = Callable[[], float]


class BaseTimer(ABC):
    """Abstract base timer for trial measurements.

    Timers can be used as context managers for convenient timing:

        with SomeTimer() as timer:
            do_work()
        print(f"Elapsed: {timer.elapsed_ms} ms")
    """

    @abstractmethod
    def reset(self) -> None:
        """Reset timer state to initial values."""
        pass

    @abstractmethod
    def start(self) -> None:
        """Start the timer."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the timer and compute elapsed time."""
        pass

    @property
    @abstractmethod
    def elapsed_ms(self) -> float:
        """Return elapsed time in milliseconds."""
        pass

    def __enter__(self) -> BaseTimer:
        self.reset()
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()


class WallClockTimer(BaseTimer):
    """Wall-clock timer on a monotonic, sub-millisecond clock.

    Args:
        clock: Zero-argument callable returning seconds. Defaults to
            time.perf_counter; tests substitute a scripted clock.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or time.perf_counter
        self._start: Optional[float] = None
        self._elapsed: float = 0.0

    def reset(self) -> None:
        self._start = None
        self._elapsed = 0.0

    def start(self) -> None:
        self._start = self._clock()

    def stop(self) -> None:
        """Stop timing and compute elapsed milliseconds.

        Raises:
            RuntimeError: If timer was not started.
        """
        if self._start is None:
            raise RuntimeError("Timer not started")
        self._elapsed = (self._clock() - self._start) * 1000.0

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed


class BarrierTimer(WallClockTimer):
    """Wall-clock timer that stops only once submitted GPU work has retired.

    Draw submissions return as soon as the driver has queued them, so
    stopping the clock right after the call under-reports their cost. This
    timer invokes the GPU-completion barrier first and takes the stop
    timestamp after it returns.

    Args:
        barrier: Blocking callable, normally ``GraphicsContext.await_idle``.
        clock: See WallClockTimer.
    """

    def __init__(self, barrier: Callable[[], None], clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self.barrier = barrier

    def stop(self) -> None:
        if self._start is None:
            raise RuntimeError("Timer not started")
        self.barrier()
        super().stop()


def measure(work: Callable[[], Any], timer: Optional[BaseTimer] = None) -> float:
    """Time exactly one execution of ``work``.

    The returned duration is not validated; BenchmarkRunner does that.

    Args:
        work: Zero-argument callable performing one unit of work.
        timer: Timer to use. Defaults to a fresh WallClockTimer.

    Returns:
        Elapsed time in milliseconds.
    """
    if timer is None:
        timer = WallClockTimer()

    timer.reset()
    timer.start()
    work()
    timer.stop()
    return timer.elapsed_ms
