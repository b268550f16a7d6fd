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

"""GPU buffer-upload and draw-call latency harness.

Example:
    >>> from glbench import HarnessConfig, open_context, run_suite
    >>> with open_context() as ctx:
    ...     results = run_suite(ctx, HarnessConfig().with_preset("quick"))
    >>> results["buffer_upload"].results
"""

from .config import HarnessConfig, load_config
from .core import (
    BenchmarkRunner,
    SummaryStatistics,
    SweepController,
    SweepResult,
    summarize,
)
from .gl.context import open_context
from .suite import run_suite
from .workloads import (
    BufferUploadBenchmark,
    BufferUploadConfig,
    DrawBatchConfig,
    DrawCallBenchmark,
)

__version__ = "0.1.0"

__all__ = [
    "HarnessConfig",
    "load_config",
    "BenchmarkRunner",
    "SummaryStatistics",
    "SweepController",
    "SweepResult",
    "summarize",
    "open_context",
    "run_suite",
    "BufferUploadBenchmark",
    "BufferUploadConfig",
    "DrawBatchConfig",
    "DrawCallBenchmark",
]
