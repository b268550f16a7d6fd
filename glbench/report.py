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

"""Plain-text rendering of statistics and sweep results."""

from __future__ import annotations

from typing import Any, List

from .core.statistics import SummaryStatistics
from .core.sweep import SweepResult

BAR = "=" * 70
SEP = "-" * 70

TITLES = {
    "buffer_upload": "BUFFER UPLOAD (Lower is Better)",
    "draw_calls": "DRAW CALLS (Lower is Better)",
}


def format_statistics(label: Any, stats: SummaryStatistics, unit: str = "ms") -> str:
    """Multi-line summary block for one configuration."""
    lines = [
        f"[{label} summary]",
        f"iterations: {stats.count}",
        f"mean: {stats.mean:.3f} {unit}",
        f"std dev: {stats.stddev:.3f} {unit}",
        f"min: {stats.min:.3f} {unit}",
        f"max: {stats.max:.3f} {unit}",
        f"median: {stats.median:.3f} {unit}",
    ]
    return "\n".join(lines)


def format_sweep(result: SweepResult, unit: str = "ms") -> str:
    """Table of every recorded configuration, followed by failures."""
    lines: List[str] = [
        BAR,
        TITLES.get(result.benchmark, result.benchmark.upper()),
        BAR,
        f"{'config':>12s} {'n':>5s} {'mean':>10s} {'std':>9s} "
        f"{'min':>10s} {'median':>10s} {'max':>10s}",
    ]
    for config, stats in result.results.items():
        lines.append(
            f"{str(config):>12s} {stats.count:5d} {stats.mean:10.3f} {stats.stddev:9.3f} "
            f"{stats.min:10.3f} {stats.median:10.3f} {stats.max:10.3f}"
        )
    if not result.results:
        lines.append("  (no configuration recorded)")

    if result.failures or result.skipped:
        lines.append(SEP)
        for failure in result.failures:
            lines.append(f"FAILED  {failure.describe()}")
        for config in result.skipped:
            lines.append(f"SKIPPED {config}")
        lines.append(f"INCOMPLETE: {len(result.results)} recorded, all times in {unit}")
    return "\n".join(lines)
