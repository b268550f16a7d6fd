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

"""Summary statistics for a series of trial durations.

Example:
    >>> from glbench.core.statistics import summarize
    >>> stats = summarize([5.0, 1.0, 3.0, 2.0, 4.0])
    >>> print(stats.summary())
    3.000 +/- 1.414 ms (median=3.000, min=1.000, max=5.000, n=5)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from .errors import EmptySeriesError


@dataclass(frozen=True)
class SummaryStatistics:
    """Immutable summary of one trial series.

    All timing values are in milliseconds.

    Attributes:
        count: Number of samples in the source series.
        mean: Arithmetic mean of the samples, clamped into [min, max] so
            floating-point rounding never places it outside the sample range.
        stddev: Population standard deviation (divisor N, not N-1).
        min: Smallest sample.
        max: Largest sample.
        median: Element at index ``n // 2`` of the sorted samples. For an
            even count this is the upper of the two middle values; the two
            are never averaged.
    """

    count: int
    mean: float
    stddev: float
    min: float
    max: float
    median: float

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> SummaryStatistics:
        """Compute statistics from raw timing samples.

        Args:
            samples: Durations in milliseconds, in execution order. The
                sequence is not modified.

        Returns:
            SummaryStatistics for the samples.

        Raises:
            EmptySeriesError: If samples is empty.
        """
        if len(samples) == 0:
            raise EmptySeriesError("Cannot compute statistics from empty samples")

        arr = np.array(samples, dtype=np.float64)
        ordered = np.sort(arr)
        n = len(ordered)

        lo = float(ordered[0])
        hi = float(ordered[-1])
        # rounding in the sum can land the mean just outside the extremes
        mean = min(max(float(np.mean(arr)), lo), hi)

        return cls(
            count=n,
            mean=mean,
            stddev=float(np.std(arr, ddof=0)),
            min=lo,
            max=hi,
            median=float(ordered[n // 2]),
        )

    def summary(self, unit: str = "ms") -> str:
        """Return a one-line summary like ``3.000 +/- 1.414 ms (median=3.000, ...)``."""
        return (
            f"{self.mean:.3f} +/- {self.stddev:.3f} {unit} "
            f"(median={self.median:.3f}, min={self.min:.3f}, "
            f"max={self.max:.3f}, n={self.count})"
        )

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "count": self.count,
            "mean": self.mean,
            "stddev": self.stddev,
            "min": self.min,
            "max": self.max,
            "median": self.median,
        }


def summarize(series: Sequence[float]) -> SummaryStatistics:
    """Summarize a trial series. See SummaryStatistics.from_samples."""
    return SummaryStatistics.from_samples(series)
