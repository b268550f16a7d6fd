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

"""Warmup and measurement phases for a single benchmark configuration.

Example:
    >>> from glbench.core.runner import BenchmarkRunner
    >>> runner = BenchmarkRunner(warmup_runs=5, measurement_runs=100)
    >>> series = runner.run(config, benchmark.trial_factory)
    >>> len(series)
    100
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable, List, Optional

from .errors import MeasurementError
from .observers import SweepObserver
from .timing import BaseTimer, WallClockTimer, measure

TrialFactory = Callable[[Any], Callable[[], Any]]


class RunPhase(Enum):
    """Lifecycle of one configuration's run."""

    IDLE = "idle"
    WARMUP = "warmup"
    MEASURING = "measuring"
    SUMMARIZING = "summarizing"
    RECORDED = "recorded"
    FAILED = "failed"


def validate_sample(value: Any) -> float:
    """Return ``value`` as a float duration or raise MeasurementError.

    Timers backed by foreign bindings may hand back wrapped numbers; anything
    that does not coerce to a finite, non-negative float is rejected.
    """
    try:
        sample = float(value)
    except (TypeError, ValueError) as exc:
        raise MeasurementError(f"Timer returned a non-numeric duration: {value!r}") from exc

    if math.isnan(sample) or math.isinf(sample):
        raise MeasurementError(f"Timer returned a non-finite duration: {sample}")
    if sample < 0:
        raise MeasurementError(f"Timer returned a negative duration: {sample}")
    return sample


class BenchmarkRunner:
    """Run one configuration: warmup trials, then timed trials.

    Every trial asks the factory for a fresh unit of work, so each upload
    targets a newly allocated buffer instead of measuring reuse of an old
    one. Trials run strictly one after another.

    Example:
        >>> runner = BenchmarkRunner(warmup_runs=5, measurement_runs=100)
        >>> series = runner.run(BufferUploadConfig(4), upload.trial_factory)
    """

    def __init__(self, warmup_runs: int = 5, measurement_runs: int = 100):
        """Initialize the runner.

        Args:
            warmup_runs: Trials executed and discarded before measurement.
            measurement_runs: Timed trials recorded per configuration.
        """
        if warmup_runs < 0:
            raise ValueError("warmup_runs must be non-negative")
        if measurement_runs < 1:
            raise ValueError("measurement_runs must be at least 1")

        self.warmup_runs = warmup_runs
        self.measurement_runs = measurement_runs
        self.phase = RunPhase.IDLE

    def enter_phase(
        self, phase: RunPhase, config: Any, observer: Optional[SweepObserver] = None
    ) -> None:
        """Move to ``phase`` and notify the observer."""
        self.phase = phase
        if observer is not None:
            observer.on_phase(config, phase)

    def run(
        self,
        config: Any,
        trial_factory: TrialFactory,
        timer: Optional[BaseTimer] = None,
        observer: Optional[SweepObserver] = None,
    ) -> List[float]:
        """Execute the warmup and measurement phases for ``config``.

        Args:
            config: Configuration passed to ``trial_factory``.
            trial_factory: Builds one fresh zero-argument unit of work per call.
            timer: Timer used for every trial. Defaults to WallClockTimer.
            observer: Receives phase changes and measured samples.

        Returns:
            The trial series: exactly ``measurement_runs`` samples in
            execution order. Warmup samples are never included.

        Raises:
            MeasurementError: If any trial, warmup included, yields an
                invalid duration.
            BenchmarkError: Whatever the factory or the work raises; the run
                is aborted at the first failure.
        """
        if timer is None:
            timer = WallClockTimer()
        if observer is None:
            observer = SweepObserver()

        self.phase = RunPhase.IDLE

        # Warmup phase
        self.enter_phase(RunPhase.WARMUP, config, observer)
        for _ in range(self.warmup_runs):
            validate_sample(measure(trial_factory(config), timer))

        # Measurement phase
        self.enter_phase(RunPhase.MEASURING, config, observer)
        series: List[float] = []
        for i in range(self.measurement_runs):
            sample = validate_sample(measure(trial_factory(config), timer))
            series.append(sample)
            observer.on_sample(config, i, sample)

        return series
