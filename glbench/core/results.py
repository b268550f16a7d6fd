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

"""Benchmark results persistence and storage.

The harness itself only returns SweepResult values. This module is the
downstream collaborator that writes them to disk as JSON (one file per
configuration) and exports them to CSV or a pandas DataFrame.

Example:
    >>> from glbench.core.results import ResultsStore
    >>> store = ResultsStore("results/")
    >>> store.save_sweep(sweep_result, hardware=ctx.renderer_info())
    >>> store.to_csv("results/summary.csv")
"""

from __future__ import annotations

import csv
import dataclasses
import json
import logging
import re
import subprocess
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .statistics import SummaryStatistics
from .sweep import SweepResult

logger = logging.getLogger(__name__)


def _get_git_hash() -> str:
    """Get current git commit hash, or 'unknown' if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    if result.returncode == 0:
        return result.stdout.strip()
    return "unknown"


def _config_to_dict(config: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(config) and not isinstance(config, type):
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in asdict(config).items()
        }
    return {"value": config}


def _safe_name(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "-", text).strip("-")


@dataclass
class BenchmarkRun:
    """One recorded configuration with metadata and statistics.

    Attributes:
        benchmark_name: Benchmark kind (e.g., "buffer_upload", "draw_calls").
        label: Human-readable configuration label (e.g., "4MB").
        timestamp: ISO format timestamp when the run was stored.
        git_hash: Git commit hash at time of run.
        config: Configuration fields.
        stats: SummaryStatistics as a dictionary.
        hardware: Renderer information reported by the graphics context.
        metadata: Additional metadata (optional).
    """

    benchmark_name: str
    label: str
    timestamp: str
    git_hash: str
    config: Dict[str, Any]
    stats: Dict[str, float]
    hardware: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        benchmark_name: str,
        config: Any,
        stats: SummaryStatistics,
        hardware: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> BenchmarkRun:
        """Create a new run with auto-populated timestamp and git hash."""
        return cls(
            benchmark_name=benchmark_name,
            label=str(getattr(config, "label", config)),
            timestamp=datetime.now().isoformat(),
            git_hash=_get_git_hash(),
            config=_config_to_dict(config),
            stats=stats.to_dict(),
            hardware=dict(hardware or {}),
            metadata=dict(metadata or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BenchmarkRun:
        return cls(**data)

    def to_flat_dict(self) -> Dict[str, Any]:
        """Flatten nested dicts for CSV/DataFrame compatibility.

        Returns dict with keys like 'config.size_mb', 'stats.mean', etc.
        """
        flat: Dict[str, Any] = {
            "benchmark_name": self.benchmark_name,
            "label": self.label,
            "timestamp": self.timestamp,
            "git_hash": self.git_hash,
        }
        for prefix, values in (
            ("config", self.config),
            ("stats", self.stats),
            ("hardware", self.hardware),
            ("metadata", self.metadata),
        ):
            for key, value in values.items():
                flat[f"{prefix}.{key}"] = value
        return flat


class ResultsStore:
    """JSON storage for benchmark runs with CSV and DataFrame export.

    Example:
        >>> store = ResultsStore("benchmark_results/")
        >>> store.save_sweep(result)
        >>> store.to_csv("results.csv")
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._counter = 0

    def save(self, run: BenchmarkRun) -> Path:
        """Save a run to its own JSON file and return the path."""
        safe_timestamp = run.timestamp.replace(":", "-").replace(".", "-")
        # counter keeps names unique when two runs share a timestamp
        self._counter += 1
        filename = (
            f"{_safe_name(run.benchmark_name)}_{_safe_name(run.label)}_"
            f"{safe_timestamp}_{self._counter:04d}.json"
        )
        filepath = self.directory / filename

        with open(filepath, "w") as f:
            json.dump(run.to_dict(), f, indent=2)

        return filepath

    def save_sweep(
        self,
        result: SweepResult,
        hardware: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[Path]:
        """Save every recorded configuration of a sweep.

        Failed configurations have no statistics and are not written; an
        incomplete sweep is flagged in each run's metadata instead.
        """
        extra = dict(metadata or {})
        extra["sweep_complete"] = result.complete
        if result.failures:
            extra["sweep_failures"] = [failure.describe() for failure in result.failures]

        paths = []
        for config, stats in result.results.items():
            run = BenchmarkRun.create(
                benchmark_name=result.benchmark,
                config=config,
                stats=stats,
                hardware=hardware,
                metadata=extra,
            )
            paths.append(self.save(run))
        return paths

    def load(self, benchmark_name: Optional[str] = None) -> List[BenchmarkRun]:
        """Load stored runs, optionally filtered by benchmark name.

        Files that cannot be parsed are skipped with a warning.
        """
        runs: List[BenchmarkRun] = []

        for filepath in sorted(self.directory.glob("*.json")):
            try:
                with open(filepath) as f:
                    data = json.load(f)
                run = BenchmarkRun.from_dict(data)
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning("Could not load %s: %s", filepath, e)
                continue

            if benchmark_name and run.benchmark_name != benchmark_name:
                continue
            runs.append(run)

        return runs

    def to_csv(self, output_path: Union[str, Path]) -> Path:
        """Export all stored runs to CSV, one row per run.

        Raises:
            ValueError: If nothing has been stored yet.
        """
        runs = self.load()
        if not runs:
            raise ValueError("No results to export")

        output_path = Path(output_path)
        flat_runs = [run.to_flat_dict() for run in runs]

        fieldnames: List[str] = []
        for flat in flat_runs:
            for key in flat:
                if key not in fieldnames:
                    fieldnames.append(key)

        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, restval="")
            writer.writeheader()
            writer.writerows(flat_runs)

        return output_path

    def to_dataframe(self):
        """Return all stored runs as a pandas DataFrame."""
        import pandas as pd

        return pd.DataFrame([run.to_flat_dict() for run in self.load()])

    def clear(self) -> int:
        """Remove all stored results and return how many files were removed."""
        count = 0
        for filepath in self.directory.glob("*.json"):
            filepath.unlink()
            count += 1
        return count
