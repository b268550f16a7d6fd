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

"""Sweeps: one benchmark kind run over an ordered list of configurations.

Example:
    >>> from glbench.core.sweep import SweepController
    >>> controller = SweepController(ctx, BenchmarkRunner(5, 100))
    >>> result = controller.run_sweep(buffer_upload_configs([1, 4, 10]), upload)
    >>> for config, stats in result.results.items():
    ...     print(config, stats.summary())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .context import GraphicsContext
from .errors import BenchmarkError, SweepFailedError
from .observers import SweepObserver
from .runner import BenchmarkRunner, RunPhase
from .statistics import SummaryStatistics, summarize
from .timing import BaseTimer, WallClockTimer


class BenchmarkKind(ABC):
    """A family of trials that can be swept over configurations.

    ``prepare`` runs once per sweep, ``activate`` once per configuration
    (after the previous configuration's reset), and ``trial_factory`` once per
    trial.
    """

    name: str = "benchmark"

    def prepare(self, context: GraphicsContext) -> None:
        """Create resources shared by every configuration of the sweep."""

    def activate(self, context: GraphicsContext, config: Any) -> None:
        """Bind whatever state the trials of ``config`` rely on."""

    @abstractmethod
    def trial_factory(self, context: GraphicsContext, config: Any) -> Callable[[], Any]:
        """Return one fresh unit of work for ``config``."""

    def make_timer(self, context: GraphicsContext) -> BaseTimer:
        """Timer shared by every trial of the sweep."""
        return WallClockTimer()


@dataclass(frozen=True)
class ConfigurationFailure:
    """Why and where a configuration's run stopped."""

    config: Any
    phase: RunPhase
    error: BenchmarkError

    def describe(self) -> str:
        return f"{self.config} failed during {self.phase.value}: {type(self.error).__name__}: {self.error}"


@dataclass
class SweepResult:
    """Outcome of one sweep.

    Attributes:
        benchmark: Name of the benchmark kind.
        results: Configuration to statistics, in sweep order. Only
            configurations whose run completed appear here.
        series: Raw trial series per recorded configuration, in execution
            order.
        failures: Configurations whose run failed, in sweep order.
        skipped: Configurations never attempted because the sweep aborted.
    """

    benchmark: str
    results: Dict[Any, SummaryStatistics] = field(default_factory=dict)
    series: Dict[Any, Tuple[float, ...]] = field(default_factory=dict)
    failures: List[ConfigurationFailure] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every configuration of the sweep was recorded."""
        return not self.failures and not self.skipped

    def record(self, config: Any, stats: SummaryStatistics, series: List[float]) -> None:
        if config in self.results:
            raise ValueError(f"{config} was already recorded in this sweep")
        self.results[config] = stats
        self.series[config] = tuple(series)

    def raise_for_failures(self) -> None:
        """Raise SweepFailedError if any configuration failed."""
        if self.failures:
            raise SweepFailedError(self)


class SweepController:
    """Drive a BenchmarkRunner across configurations.

    Graphics state is reset before the sweep and after every configuration,
    failed ones included, so bound buffers or programs never leak into the
    next measurement.

    A configuration that fails with a BenchmarkError is recorded in
    ``SweepResult.failures``; earlier results are kept. By default the sweep
    stops there and the remaining configurations are listed as skipped. With
    ``continue_on_failure=True`` it moves on to the next configuration.
    A BenchmarkError from ``prepare`` is recorded against the first
    configuration and the others are skipped. Errors raised by
    ``reset_state``, and errors that are not BenchmarkErrors, propagate to
    the caller.
    """

    def __init__(
        self,
        context: GraphicsContext,
        runner: BenchmarkRunner,
        continue_on_failure: bool = False,
        observer: Optional[SweepObserver] = None,
    ):
        self.context = context
        self.runner = runner
        self.continue_on_failure = continue_on_failure
        self.observer = observer or SweepObserver()

    def _reset(self) -> None:
        self.context.reset_state()
        self.observer.on_reset()

    def _prepare(self, benchmark: BenchmarkKind, configs: List[Any], result: SweepResult) -> bool:
        """Run ``benchmark.prepare``; on failure charge it to the first configuration.

        No configuration can run without the shared resources, so the rest
        are listed as skipped whatever the failure policy.
        """
        try:
            benchmark.prepare(self.context)
        except BenchmarkError as exc:
            config = configs[0]
            self.observer.on_configuration_start(benchmark.name, config)
            self.runner.enter_phase(RunPhase.IDLE, config)
            failure = ConfigurationFailure(config, RunPhase.IDLE, exc)
            self.runner.enter_phase(RunPhase.FAILED, config, self.observer)
            result.failures.append(failure)
            result.skipped.extend(configs[1:])
            self.observer.on_configuration_failed(failure)
            self._reset()
            return False
        return True

    def run_sweep(self, configs: Iterable[Any], benchmark: BenchmarkKind) -> SweepResult:
        """Run ``benchmark`` once for each configuration, in order.

        Args:
            configs: Configurations to measure. Each may appear only once.
            benchmark: The benchmark kind supplying trials and timer.

        Returns:
            SweepResult with every recorded configuration and every failure.

        Raises:
            ValueError: If a configuration appears more than once.
        """
        configs = list(configs)
        if len(set(configs)) != len(configs):
            raise ValueError("Sweep configurations must be unique")

        result = SweepResult(benchmark=benchmark.name)
        observer = self.observer
        runner = self.runner

        observer.on_sweep_start(benchmark.name, configs)
        self._reset()
        if configs and not self._prepare(benchmark, configs, result):
            observer.on_sweep_end(result)
            return result

        factory = partial(benchmark.trial_factory, self.context)
        timer = benchmark.make_timer(self.context)

        for index, config in enumerate(configs):
            observer.on_configuration_start(benchmark.name, config)
            runner.enter_phase(RunPhase.IDLE, config)
            try:
                benchmark.activate(self.context, config)
                series = runner.run(config, factory, timer=timer, observer=observer)
                runner.enter_phase(RunPhase.SUMMARIZING, config, observer)
                stats = summarize(series)
            except BenchmarkError as exc:
                failure = ConfigurationFailure(config, runner.phase, exc)
                runner.enter_phase(RunPhase.FAILED, config, observer)
                result.failures.append(failure)
                observer.on_configuration_failed(failure)
                if not self.continue_on_failure:
                    result.skipped.extend(configs[index + 1:])
                    self._reset()
                    break
            else:
                result.record(config, stats, series)
                runner.enter_phase(RunPhase.RECORDED, config, observer)
                observer.on_configuration_recorded(config, stats)
            self._reset()

        observer.on_sweep_end(result)
        return result
