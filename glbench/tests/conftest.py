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

"""Shared test fixtures for harness tests."""

from collections import Counter

import pytest

from glbench.core.sweep import BenchmarkKind


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "gpu: tests that require a real OpenGL context (deselect with '-m \"not gpu\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically skip GPU tests when no headless OpenGL context can be opened."""
    if not any("gpu" in item.keywords for item in items):
        return

    from glbench.core.errors import ContextUnavailableError
    from glbench.gl.context import open_context

    try:
        open_context(16, 16).close()
        gl_available = True
    except ContextUnavailableError:
        gl_available = False

    if not gl_available:
        skip_gpu = pytest.mark.skip(reason="OpenGL (EGL) context not available")
        for item in items:
            if "gpu" in item.keywords:
                item.add_marker(skip_gpu)


class FakeGraphicsContext:
    """GraphicsContext that records every call.

    ``fail_when`` maps a method name to a callable receiving the 1-based call
    count for that method; returning an exception makes the call raise it.
    """

    def __init__(self):
        self.calls = []
        self.counts = Counter()
        self.fail_when = {}
        self._next_handle = 0

    def _call(self, name, *args):
        self.calls.append((name, args))
        self.counts[name] += 1
        hook = self.fail_when.get(name)
        if hook is not None:
            exc = hook(self.counts[name])
            if exc is not None:
                raise exc

    def _handle(self):
        self._next_handle += 1
        return self._next_handle

    def names(self):
        return [name for name, _ in self.calls]

    def create_buffer(self):
        self._call("create_buffer")
        return self._handle()

    def bind_buffer(self, target, handle):
        self._call("bind_buffer", target, handle)

    def upload_data(self, target, data, usage):
        self._call("upload_data", target, data.nbytes, usage)

    def create_shader(self, stage):
        self._call("create_shader", stage)
        return self._handle()

    def compile_shader(self, shader, source):
        self._call("compile_shader", shader)

    def create_program(self):
        self._call("create_program")
        return self._handle()

    def link_program(self, program, shaders):
        self._call("link_program", program, tuple(shaders))

    def use_program(self, program):
        self._call("use_program", program)

    def enable_attribute(self, program, name, components):
        self._call("enable_attribute", program, name, components)

    def draw_batch(self, primitive, vertex_count):
        self._call("draw_batch", primitive, vertex_count)

    def await_idle(self):
        self._call("await_idle")

    def reset_state(self):
        self._call("reset_state")

    def renderer_info(self):
        return {"vendor": "Fake", "renderer": "FakeRenderer", "version": "4.6 fake"}

    def close(self):
        self._call("close")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class ScriptedBenchmark(BenchmarkKind):
    """Benchmark whose trials do nothing unless told to fail.

    ``failures`` maps a configuration to the exception its trial factory
    raises.
    """

    name = "scripted"

    def __init__(self, failures=None):
        self.failures = dict(failures or {})
        self.prepared = 0
        self.activated = []
        self.trials = Counter()

    def prepare(self, context):
        self.prepared += 1

    def activate(self, context, config):
        self.activated.append(config)

    def trial_factory(self, context, config):
        self.trials[config] += 1
        if config in self.failures:
            raise self.failures[config]
        return lambda: None


def scripted_clock(durations_ms):
    """Clock yielding start/stop pairs that produce the given durations."""
    values = []
    for duration in durations_ms:
        values.extend([1.0, 1.0 + duration / 1000.0])
    it = iter(values)
    return lambda: next(it)


@pytest.fixture
def fake_context():
    return FakeGraphicsContext()


@pytest.fixture
def sample_timings():
    """Sample timing data for statistics tests."""
    return [10.5, 11.2, 10.8, 11.0, 10.9, 11.1, 10.7, 11.3, 10.6, 11.0]
