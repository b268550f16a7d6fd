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

"""
Configuration loading and management for the harness.

The defaults reproduce the classic run: buffer sizes of 1, 4, 10, 20, 50 and
100 MB, 5 warmup and 100 measured trials per configuration, and one batch of
1000 draw calls per draw trial. A YAML file can override any of them.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .core.context import UsageHint


@dataclass
class FairnessConfig:
    """Trial counts and failure policy shared by every sweep."""

    warmup_runs: int = 5
    measurement_runs: int = 100
    continue_on_failure: bool = False


@dataclass
class BufferUploadSettings:
    """Buffer-upload sweep settings."""

    sizes_mb: List[float] = field(default_factory=lambda: [1, 4, 10, 20, 50, 100])
    usage: str = "static_draw"
    await_completion: bool = False

    @property
    def usage_hint(self) -> UsageHint:
        return UsageHint(self.usage)


@dataclass
class DrawCallSettings:
    """Draw-call sweep settings."""

    draw_calls_per_trial: List[int] = field(default_factory=lambda: [1000])
    vertex_count: int = 3


@dataclass
class ContextSettings:
    """Size of the headless pbuffer surface."""

    width: int = 256
    height: int = 256


@dataclass
class OutputSettings:
    """Where results go. ``None`` disables that output."""

    output_dir: Optional[str] = None
    csv: Optional[str] = None
    plot: Optional[str] = None


@dataclass
class BenchmarkPreset:
    """Named warmup / measurement counts."""

    name: str
    warmup_runs: int
    measurement_runs: int
    description: str


PRESETS = {
    "quick": BenchmarkPreset(
        name="quick",
        warmup_runs=1,
        measurement_runs=10,
        description="Fast smoke test (1 warmup, 10 runs)",
    ),
    "standard": BenchmarkPreset(
        name="standard",
        warmup_runs=5,
        measurement_runs=100,
        description="Standard benchmark (5 warmup, 100 runs)",
    ),
    "thorough": BenchmarkPreset(
        name="thorough",
        warmup_runs=10,
        measurement_runs=500,
        description="Low-noise benchmark (10 warmup, 500 runs)",
    ),
}


def _build(cls, data: Optional[Dict[str, Any]], section: str):
    data = data or {}
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {', '.join(sorted(unknown))}")
    return cls(**data)


@dataclass
class HarnessConfig:
    """Complete harness configuration."""

    fairness: FairnessConfig = field(default_factory=FairnessConfig)
    buffer_upload: BufferUploadSettings = field(default_factory=BufferUploadSettings)
    draw_calls: DrawCallSettings = field(default_factory=DrawCallSettings)
    context: ContextSettings = field(default_factory=ContextSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check values the harness cannot run with.

        Raises:
            ValueError: On a negative warmup count, fewer than one measured
                trial, a non-positive buffer size or draw count, or an unknown
                usage hint.
        """
        if self.fairness.warmup_runs < 0:
            raise ValueError("fairness.warmup_runs must be non-negative")
        if self.fairness.measurement_runs < 1:
            raise ValueError("fairness.measurement_runs must be at least 1")
        if any(size <= 0 for size in self.buffer_upload.sizes_mb):
            raise ValueError("buffer_upload.sizes_mb must all be positive")
        if any(n < 1 for n in self.draw_calls.draw_calls_per_trial):
            raise ValueError("draw_calls.draw_calls_per_trial must all be at least 1")
        try:
            UsageHint(self.buffer_upload.usage)
        except ValueError:
            choices = ", ".join(hint.value for hint in UsageHint)
            raise ValueError(
                f"Unknown buffer_upload.usage '{self.buffer_upload.usage}'. Choose from: {choices}"
            ) from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HarnessConfig":
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")
        return cls(
            fairness=_build(FairnessConfig, data.get("fairness"), "fairness"),
            buffer_upload=_build(BufferUploadSettings, data.get("buffer_upload"), "buffer_upload"),
            draw_calls=_build(DrawCallSettings, data.get("draw_calls"), "draw_calls"),
            context=_build(ContextSettings, data.get("context"), "context"),
            output=_build(OutputSettings, data.get("output"), "output"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "HarnessConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            HarnessConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is empty or has unknown keys

        Example:
            >>> config = HarnessConfig.from_yaml('glbench.yaml')
            >>> print(config.fairness.warmup_runs)
            5
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r") as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ValueError(f"Empty config file: {path}")
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> Path:
        """Save configuration to a YAML file and return its path."""
        path = Path(path)
        with path.open("w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        return path

    def with_preset(self, name: str) -> "HarnessConfig":
        """Return a copy with the warmup / measurement counts of a preset."""
        if name not in PRESETS:
            raise ValueError(f"Unknown preset '{name}'. Choose from: {', '.join(PRESETS)}")
        preset = PRESETS[name]
        fairness = replace(
            self.fairness,
            warmup_runs=preset.warmup_runs,
            measurement_runs=preset.measurement_runs,
        )
        return replace(self, fairness=fairness)


def load_config(path: Optional[Union[str, Path]] = None) -> HarnessConfig:
    """
    Load configuration from file or return the defaults.

    Example:
        >>> config = load_config()  # Defaults
        >>> config = load_config('glbench.yaml')  # Loads from file
    """
    if path is None:
        return HarnessConfig()
    return HarnessConfig.from_yaml(path)
