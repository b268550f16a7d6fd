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

"""Exception hierarchy for the benchmark harness.

Every failure the harness knows how to attribute to a configuration derives
from BenchmarkError, so SweepController can record it and keep the partial
results. Anything else is treated as a programming error and propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .sweep import SweepResult


class BenchmarkError(Exception):
    """Base class for harness errors."""


class ContextUnavailableError(BenchmarkError):
    """The graphics context could not be obtained or is not usable."""


class ResourceCreationError(BenchmarkError):
    """A buffer, shader or program could not be created, compiled or linked."""


class MeasurementError(BenchmarkError):
    """A captured sample was negative, NaN, infinite or not a number."""


class EmptySeriesError(BenchmarkError):
    """Statistics were requested for a series without samples."""


class TrialExecutionError(BenchmarkError):
    """A graphics operation submitted during a trial failed."""


class SweepFailedError(BenchmarkError):
    """Raised on request when a sweep recorded at least one failure.

    The partial result stays reachable through ``result`` so callers can
    still report the configurations that were measured.
    """

    def __init__(self, result: SweepResult):
        self.result = result
        failed = ", ".join(
            f"{failure.config} ({type(failure.error).__name__})"
            for failure in result.failures
        )
        super().__init__(
            f"{result.benchmark}: {len(result.failures)} configuration(s) failed: {failed}"
        )
