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

"""Progress callbacks for runs and sweeps.

Runners and sweeps only produce data. Anything that wants to watch them
(a log, a progress bar) subclasses SweepObserver and overrides the hooks it
cares about.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .runner import RunPhase
    from .statistics import SummaryStatistics
    from .sweep import ConfigurationFailure, SweepResult


class SweepObserver:
    """No-op base observer."""

    def on_sweep_start(self, benchmark: str, configs: list) -> None:
        pass

    def on_configuration_start(self, benchmark: str, config: Any) -> None:
        pass

    def on_phase(self, config: Any, phase: RunPhase) -> None:
        pass

    def on_sample(self, config: Any, index: int, sample: float) -> None:
        pass

    def on_configuration_recorded(self, config: Any, stats: SummaryStatistics) -> None:
        pass

    def on_configuration_failed(self, failure: ConfigurationFailure) -> None:
        pass

    def on_reset(self) -> None:
        pass

    def on_sweep_end(self, result: SweepResult) -> None:
        pass


class LoggingObserver(SweepObserver):
    """Forward progress to the ``logging`` module.

    Configuration boundaries are logged at INFO, individual samples at DEBUG.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("glbench")

    def on_sweep_start(self, benchmark: str, configs: list) -> None:
        self.logger.info("Starting %s sweep over %d configuration(s)", benchmark, len(configs))

    def on_configuration_start(self, benchmark: str, config: Any) -> None:
        self.logger.info("--- Testing %s: %s ---", benchmark, config)

    def on_phase(self, config: Any, phase: RunPhase) -> None:
        self.logger.debug("%s: entering %s", config, phase.value)

    def on_sample(self, config: Any, index: int, sample: float) -> None:
        self.logger.debug("%s - iter %d: %.3f ms", config, index + 1, sample)

    def on_configuration_recorded(self, config: Any, stats: SummaryStatistics) -> None:
        self.logger.info("%s: %s", config, stats.summary())

    def on_configuration_failed(self, failure: ConfigurationFailure) -> None:
        self.logger.error(
            "%s failed during %s: %s", failure.config, failure.phase.value, failure.error
        )

    def on_reset(self) -> None:
        self.logger.debug("Resetting graphics state")

    def on_sweep_end(self, result: SweepResult) -> None:
        self.logger.info(
            "Finished %s sweep: %d recorded, %d failed, %d skipped",
            result.benchmark,
            len(result.results),
            len(result.failures),
            len(result.skipped),
        )
