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

"""Buffer-upload and draw-call benchmarks.

Example:
    >>> upload = BufferUploadBenchmark()
    >>> result = controller.run_sweep(buffer_upload_configs([1, 4, 10]), upload)
    >>> draws = DrawCallBenchmark()
    >>> result = controller.run_sweep(draw_batch_configs([1000]), draws)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

import numpy as np

from .core.context import BufferTarget, GraphicsContext, PrimitiveKind, ShaderStage, UsageHint
from .core.sweep import BenchmarkKind
from .core.timing import BarrierTimer, BaseTimer, WallClockTimer
from .gl.shaders import FRAGMENT_SHADER, TRIANGLE_VERTICES, VERTEX_SHADER

BYTES_PER_MB = 1024 * 1024
FLOAT32_BYTES = 4


@dataclass(frozen=True)
class BufferUploadConfig:
    """One buffer size, in megabytes (MiB)."""

    size_mb: float

    def __post_init__(self):
        if self.size_mb <= 0:
            raise ValueError("size_mb must be positive")

    @property
    def byte_length(self) -> int:
        return int(self.size_mb * BYTES_PER_MB)

    @property
    def float_count(self) -> int:
        return self.byte_length // FLOAT32_BYTES

    @property
    def label(self) -> str:
        return f"{self.size_mb:g}MB"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class DrawBatchConfig:
    """Number of draw submissions per trial, each of ``vertex_count`` vertices."""

    draw_calls: int
    vertex_count: int = 3
    primitive: PrimitiveKind = PrimitiveKind.TRIANGLES

    def __post_init__(self):
        if self.draw_calls < 1:
            raise ValueError("draw_calls must be at least 1")
        if self.vertex_count < 1:
            raise ValueError("vertex_count must be at least 1")

    @property
    def label(self) -> str:
        return f"{self.draw_calls} draws"

    def __str__(self) -> str:
        return self.label


def buffer_upload_configs(sizes_mb: Iterable[float]) -> List[BufferUploadConfig]:
    return [BufferUploadConfig(size) for size in sizes_mb]


def draw_batch_configs(
    batches: Iterable[int], vertex_count: int = 3
) -> List[DrawBatchConfig]:
    return [DrawBatchConfig(n, vertex_count=vertex_count) for n in batches]


class BufferUploadBenchmark(BenchmarkKind):
    """Time uploads of a zero-filled float32 payload into a fresh buffer.

    Allocating the payload, creating the buffer and binding it happen in the
    trial factory, outside the timed region; only the upload is timed.

    Args:
        usage: Usage hint passed with every upload.
        await_completion: If True, every trial of the sweep also waits for the
            GPU to go idle before the stop timestamp.
    """

    name = "buffer_upload"

    def __init__(self, usage: UsageHint = UsageHint.STATIC_DRAW, await_completion: bool = False):
        self.usage = usage
        self.await_completion = await_completion

    def trial_factory(
        self, context: GraphicsContext, config: BufferUploadConfig
    ) -> Callable[[], None]:
        data = np.zeros(config.float_count, dtype=np.float32)
        handle = context.create_buffer()
        context.bind_buffer(BufferTarget.ARRAY, handle)
        usage = self.usage

        def upload() -> None:
            context.upload_data(BufferTarget.ARRAY, data, usage)

        return upload

    def make_timer(self, context: GraphicsContext) -> BaseTimer:
        if self.await_completion:
            return BarrierTimer(context.await_idle)
        return WallClockTimer()


class DrawCallBenchmark(BenchmarkKind):
    """Time batches of small draw submissions, up to GPU completion.

    The shader program is compiled and linked once per sweep. Because each
    reset unbinds it, every configuration re-binds the program and uploads
    its own copy of the triangle vertex buffer.

    Args:
        vertex_source: Vertex shader source with a vec2 ``position`` attribute.
        fragment_source: Fragment shader source.
        vertices: Flat float32 vertex positions (x, y pairs).
    """

    name = "draw_calls"
    attribute = "position"

    def __init__(
        self,
        vertex_source: str = VERTEX_SHADER,
        fragment_source: str = FRAGMENT_SHADER,
        vertices: Optional[Any] = None,
    ):
        self.vertex_source = vertex_source
        self.fragment_source = fragment_source
        self.vertices = np.asarray(
            TRIANGLE_VERTICES if vertices is None else vertices, dtype=np.float32
        )
        self.program: Any = None

    def prepare(self, context: GraphicsContext) -> None:
        vs = context.create_shader(ShaderStage.VERTEX)
        context.compile_shader(vs, self.vertex_source)
        fs = context.create_shader(ShaderStage.FRAGMENT)
        context.compile_shader(fs, self.fragment_source)

        program = context.create_program()
        context.link_program(program, [vs, fs])
        self.program = program

    def activate(self, context: GraphicsContext, config: DrawBatchConfig) -> None:
        if self.program is None:
            raise RuntimeError("prepare() must run before activate()")
        context.use_program(self.program)
        buffer = context.create_buffer()
        context.bind_buffer(BufferTarget.ARRAY, buffer)
        context.upload_data(BufferTarget.ARRAY, self.vertices, UsageHint.STATIC_DRAW)
        context.enable_attribute(self.program, self.attribute, 2)

    def trial_factory(
        self, context: GraphicsContext, config: DrawBatchConfig
    ) -> Callable[[], None]:
        primitive = config.primitive
        vertex_count = config.vertex_count
        draw_calls = config.draw_calls

        def submit() -> None:
            for _ in range(draw_calls):
                context.draw_batch(primitive, vertex_count)

        return submit

    def make_timer(self, context: GraphicsContext) -> BaseTimer:
        return BarrierTimer(context.await_idle)
