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

"""Plotting functions for sweep results.

Example:
    >>> from glbench.visualization.plots import plot_upload_sweep
    >>> fig = plot_upload_sweep(results["buffer_upload"])
    >>> fig.savefig("upload.png", dpi=150, bbox_inches="tight")
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from ..core.sweep import SweepResult

# Lazy import matplotlib to avoid startup cost
_plt = None


def _get_pyplot():
    """Lazy import matplotlib.pyplot."""
    global _plt
    if _plt is None:
        import matplotlib.pyplot as plt

        _plt = plt
    return _plt


MEAN_COLOR = "#E63946"
RANGE_COLOR = "#457B9D"


def plot_upload_sweep(
    result: SweepResult,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 4.5),
    log_x: bool = True,
) -> Any:
    """Line plot of upload latency against buffer size.

    Draws the mean with population-stddev error bars, the median as a dashed
    line, and the min/max range as a shaded band.

    Args:
        result: Buffer-upload sweep. Configurations need a ``size_mb`` field.
        title: Plot title.
        figsize: Figure size in inches.
        log_x: Use a log scale for the buffer size axis.

    Returns:
        matplotlib Figure object.

    Raises:
        ValueError: If the sweep recorded no configuration.
    """
    if not result.results:
        raise ValueError("Nothing to plot: the sweep recorded no configuration")

    plt = _get_pyplot()

    items = sorted(result.results.items(), key=lambda item: item[0].size_mb)
    sizes = np.array([config.size_mb for config, _ in items], dtype=np.float64)
    means = np.array([stats.mean for _, stats in items])
    stds = np.array([stats.stddev for _, stats in items])
    medians = np.array([stats.median for _, stats in items])
    lows = np.array([stats.min for _, stats in items])
    highs = np.array([stats.max for _, stats in items])

    fig, ax = plt.subplots(figsize=figsize)
    ax.fill_between(sizes, lows, highs, color=RANGE_COLOR, alpha=0.2, label="min-max")
    ax.errorbar(
        sizes,
        means,
        yerr=stds,
        marker="o",
        color=MEAN_COLOR,
        capsize=3,
        linewidth=2,
        label="mean +/- std",
    )
    ax.plot(sizes, medians, linestyle="--", color=RANGE_COLOR, label="median")

    if log_x:
        ax.set_xscale("log")
    ax.set_xlabel("Buffer size (MB)")
    ax.set_ylabel("Upload time (ms)")
    ax.set_title(title or "Buffer upload latency")
    ax.legend(loc="upper left")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    fig.tight_layout()
    return fig


def plot_sweep_bars(
    result: SweepResult,
    title: Optional[str] = None,
    ylabel: str = "Time per trial (ms)",
    figsize: Tuple[float, float] = (6, 4),
    show_values: bool = True,
) -> Any:
    """Bar chart of mean trial time per configuration, in sweep order."""
    if not result.results:
        raise ValueError("Nothing to plot: the sweep recorded no configuration")

    plt = _get_pyplot()

    labels = [str(config) for config in result.results]
    values = [stats.mean for stats in result.results.values()]
    errors = [stats.stddev for stats in result.results.values()]

    fig, ax = plt.subplots(figsize=figsize)
    x = np.arange(len(labels))
    bars = ax.bar(x, values, color=MEAN_COLOR, edgecolor="black", linewidth=0.5)
    ax.errorbar(x, values, yerr=errors, fmt="none", color="black", capsize=3, linewidth=1)

    if show_values:
        for bar, val in zip(bars, values):
            ax.annotate(
                f"{val:.3f}",
                xy=(bar.get_x() + bar.get_width() / 2, bar.get_height()),
                xytext=(0, 3),
                textcoords="offset points",
                ha="center",
                va="bottom",
                fontsize=8,
            )

    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel(ylabel)
    ax.set_title(title or result.benchmark)
    ax.set_ylim(bottom=0)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    fig.tight_layout()
    return fig


def plot_trial_series(
    series: Dict[Any, Sequence[float]],
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (8, 4),
) -> Any:
    """Raw samples in execution order, one line per configuration.

    Useful for spotting drift or periodic stalls that summary statistics hide.
    """
    if not series:
        raise ValueError("Nothing to plot: no trial series given")

    plt = _get_pyplot()

    fig, ax = plt.subplots(figsize=figsize)
    for config, samples in series.items():
        ax.plot(np.arange(1, len(samples) + 1), samples, linewidth=1, label=str(config))

    ax.set_xlabel("Trial")
    ax.set_ylabel("Duration (ms)")
    ax.set_title(title or "Trial durations")
    ax.legend(loc="upper right", fontsize=8)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    fig.tight_layout()
    return fig
