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

"""Capability contract the harness requires from a graphics context.

The harness never talks to a graphics API directly. Anything that implements
GraphicsContext can be benchmarked: the PyOpenGL adapter in
``glbench.gl.context`` for real runs, or a recording fake in tests.

Example:
    >>> from glbench.core.context import BufferTarget, UsageHint
    >>> handle = ctx.create_buffer()
    >>> ctx.bind_buffer(BufferTarget.ARRAY, handle)
    >>> ctx.upload_data(BufferTarget.ARRAY, payload, UsageHint.STATIC_DRAW)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


class BufferTarget(Enum):
    ARRAY = "array"
    ELEMENT_ARRAY = "element_array"


class UsageHint(Enum):
    STATIC_DRAW = "static_draw"
    DYNAMIC_DRAW = "dynamic_draw"
    STREAM_DRAW = "stream_draw"


class PrimitiveKind(Enum):
    POINTS = "points"
    LINES = "lines"
    TRIANGLES = "triangles"


class ShaderStage(Enum):
    VERTEX = "vertex"
    FRAGMENT = "fragment"


@runtime_checkable
class GraphicsContext(Protocol):
    """Operations a graphics session must expose to be benchmarked.

    Handles are opaque to the harness. Creation, compilation and link
    failures must surface as ResourceCreationError; failures while uploading
    or drawing as TrialExecutionError.
    """

    def create_buffer(self) -> Any: ...

    def bind_buffer(self, target: BufferTarget, handle: Optional[Any]) -> None: ...

    def upload_data(self, target: BufferTarget, data: Any, usage: UsageHint) -> None: ...

    def create_shader(self, stage: ShaderStage) -> Any: ...

    def compile_shader(self, shader: Any, source: str) -> None: ...

    def create_program(self) -> Any: ...

    def link_program(self, program: Any, shaders: Sequence[Any]) -> None: ...

    def use_program(self, program: Optional[Any]) -> None: ...

    def enable_attribute(self, program: Any, name: str, components: int) -> None: ...

    def draw_batch(self, primitive: PrimitiveKind, vertex_count: int) -> None: ...

    def await_idle(self) -> None:
        """Block until all previously submitted GPU work has retired."""
        ...

    def reset_state(self) -> None:
        """Unbind buffers, programs, textures and framebuffers; clear targets."""
        ...
