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

"""Run the buffer-upload sweep followed by the draw-call sweep."""

from __future__ import annotations

from typing import Dict, Optional

from .config import HarnessConfig
from .core.context import GraphicsContext
from .core.observers import SweepObserver
from .core.runner import BenchmarkRunner
from .core.sweep import SweepController, SweepResult
from .workloads import (
    BufferUploadBenchmark,
    DrawCallBenchmark,
    buffer_upload_configs,
    draw_batch_configs,
)


def run_suite(
    context: GraphicsContext,
    config: Optional[HarnessConfig] = None,
    observer: Optional[SweepObserver] = None,
) -> Dict[str, SweepResult]:
    """Run both sweeps on one graphics session.

    The two sweeps are independent: a failure in the upload sweep does not
    prevent the draw-call sweep from running. Each sweep resets the context
    before it starts and after every configuration.

    Returns:
        ``{"buffer_upload": SweepResult, "draw_calls": SweepResult}``
    """
    config = config or HarnessConfig()
    fairness = config.fairness

    controller = SweepController(
        context,
        BenchmarkRunner(fairness.warmup_runs, fairness.measurement_runs),
        continue_on_failure=fairness.continue_on_failure,
        observer=observer,
    )

    upload = BufferUploadBenchmark(
        usage=config.buffer_upload.usage_hint,
        await_completion=config.buffer_upload.await_completion,
    )
    draws = DrawCallBenchmark()

    results = {}
    results[upload.name] = controller.run_sweep(
        buffer_upload_configs(config.buffer_upload.sizes_mb), upload
    )
    results[draws.name] = controller.run_sweep(
        draw_batch_configs(
            config.draw_calls.draw_calls_per_trial,
            vertex_count=config.draw_calls.vertex_count,
        ),
        draws,
    )
    return results
