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

"""Tests for glbench.report module."""

from glbench.core.errors import TrialExecutionError
from glbench.core.runner import RunPhase
from glbench.core.statistics import summarize
from glbench.core.sweep import ConfigurationFailure, SweepResult
from glbench.report import BAR, format_statistics, format_sweep
from glbench.workloads import BufferUploadConfig


def test_format_statistics():
    text = format_statistics("4MB", summarize([1.0, 2.0, 3.0]))

    lines = text.splitlines()
    assert lines[0] == "[4MB summary]"
    assert "iterations: 3" in lines
    assert "mean: 2.000 ms" in lines
    assert "median: 2.000 ms" in lines
    assert "min: 1.000 ms" in lines
    assert "max: 3.000 ms" in lines


def test_format_complete_sweep():
    result = SweepResult("buffer_upload")
    result.record(BufferUploadConfig(1), summarize([0.5, 1.5]), [0.5, 1.5])

    text = format_sweep(result)

    assert text.startswith(BAR)
    assert "BUFFER UPLOAD" in text
    assert "1MB" in text
    assert "1.000" in text
    assert "INCOMPLETE" not in text


def test_format_incomplete_sweep():
    result = SweepResult("buffer_upload")
    result.record(BufferUploadConfig(1), summarize([1.0]), [1.0])
    result.failures.append(
        ConfigurationFailure(BufferUploadConfig(4), RunPhase.MEASURING, TrialExecutionError("lost"))
    )
    result.skipped.append(BufferUploadConfig(10))

    text = format_sweep(result)

    assert "FAILED  4MB failed during measuring: TrialExecutionError: lost" in text
    assert "SKIPPED 10MB" in text
    assert "INCOMPLETE: 1 recorded" in text


def test_format_empty_sweep_uses_benchmark_name():
    text = format_sweep(SweepResult("scripted"))

    assert "SCRIPTED" in text
    assert "no configuration recorded" in text
