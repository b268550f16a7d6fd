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

"""Core measurement harness.

- **statistics**: SummaryStatistics and summarize()
- **timing**: Timer implementations (WallClockTimer, BarrierTimer) and measure()
- **runner**: BenchmarkRunner (warmup + measurement phases)
- **sweep**: SweepController, SweepResult, BenchmarkKind
- **context**: GraphicsContext capability contract
- **errors**: Exception hierarchy
- **observers**: Progress callbacks
- **results**: JSON/CSV persistence of sweep results

Example:
    >>> from glbench.core import BenchmarkRunner, SweepController
    >>> controller = SweepController(ctx, BenchmarkRunner(warmup_runs=5, measurement_runs=100))
    >>> result = controller.run_sweep(configs, benchmark)
    >>> result.complete
    True
"""

from .context import BufferTarget, GraphicsContext, PrimitiveKind, ShaderStage, UsageHint
from .errors import (
    BenchmarkError,
    ContextUnavailableError,
    EmptySeriesError,
    MeasurementError,
    ResourceCreationError,
    SweepFailedError,
    TrialExecutionError,
)
from .observers import LoggingObserver, SweepObserver
from .results import BenchmarkRun, ResultsStore
from .runner import BenchmarkRunner, RunPhase, validate_sample
from .statistics import SummaryStatistics, summarize
from .sweep import BenchmarkKind, ConfigurationFailure, SweepController, SweepResult
from .timing import BarrierTimer, BaseTimer, WallClockTimer, measure

__all__ = [
    # Statistics
    "SummaryStatistics",
    "summarize",
    # Timing
    "BaseTimer",
    "WallClockTimer",
    "BarrierTimer",
    "measure",
    # Runner / sweep
    "BenchmarkRunner",
    "RunPhase",
    "validate_sample",
    "BenchmarkKind",
    "ConfigurationFailure",
    "SweepController",
    "SweepResult",
    # Context contract
    "GraphicsContext",
    "BufferTarget",
    "UsageHint",
    "PrimitiveKind",
    "ShaderStage",
    # Errors
    "BenchmarkError",
    "ContextUnavailableError",
    "ResourceCreationError",
    "MeasurementError",
    "EmptySeriesError",
    "TrialExecutionError",
    "SweepFailedError",
    # Observers
    "SweepObserver",
    "LoggingObserver",
    # Results
    "BenchmarkRun",
    "ResultsStore",
]
