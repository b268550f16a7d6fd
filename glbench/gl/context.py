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

"""OpenGL implementation of the GraphicsContext contract.

GLContext drives the current OpenGL context through PyOpenGL. open_context()
creates a headless one on an EGL pbuffer, so benchmarks run without a window
or display server.

PyOpenGL is imported lazily: its platform is chosen on first import, and
PYOPENGL_PLATFORM must be set to ``egl`` before that happens.

Example:
    >>> from glbench.gl.context import open_context
    >>> with open_context() as ctx:
    ...     print(ctx.renderer_info()["renderer"])
"""

from __future__ import annotations

import ctypes
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.context import BufferTarget, PrimitiveKind, ShaderStage, UsageHint
from ..core.errors import ContextUnavailableError, ResourceCreationError, TrialExecutionError


def _load_gl() -> Tuple[Any, Tuple[type, ...]]:
    """Import PyOpenGL's GL namespace and its error type."""
    os.environ.setdefault("PYOPENGL_PLATFORM", "egl")
    from OpenGL import GL
    from OpenGL.error import GLError

    return GL, (GLError,)


def _decode(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass
class EGLSession:
    """Handles of a headless EGL context, kept for teardown."""

    egl: Any
    display: Any
    surface: Any
    context: Any

    def terminate(self) -> None:
        egl = self.egl
        egl.eglMakeCurrent(self.display, egl.EGL_NO_SURFACE, egl.EGL_NO_SURFACE, egl.EGL_NO_CONTEXT)
        egl.eglDestroySurface(self.display, self.surface)
        egl.eglDestroyContext(self.display, self.context)
        egl.eglTerminate(self.display)


def _create_egl_session(width: int, height: int) -> EGLSession:
    """Create an OpenGL context on an EGL pbuffer surface and make it current."""
    os.environ.setdefault("PYOPENGL_PLATFORM", "egl")
    import OpenGL.EGL as EGL

    display = EGL.eglGetDisplay(EGL.EGL_DEFAULT_DISPLAY)
    if display == EGL.EGL_NO_DISPLAY:
        raise ContextUnavailableError("Failed to get EGL display")

    major = EGL.EGLint()
    minor = EGL.EGLint()
    if not EGL.eglInitialize(display, ctypes.byref(major), ctypes.byref(minor)):
        raise ContextUnavailableError("Failed to initialize EGL")

    config_attribs = [
        EGL.EGL_SURFACE_TYPE, EGL.EGL_PBUFFER_BIT,
        EGL.EGL_RED_SIZE, 8,
        EGL.EGL_GREEN_SIZE, 8,
        EGL.EGL_BLUE_SIZE, 8,
        EGL.EGL_ALPHA_SIZE, 8,
        EGL.EGL_DEPTH_SIZE, 24,
        EGL.EGL_RENDERABLE_TYPE, EGL.EGL_OPENGL_BIT,
        EGL.EGL_NONE,
    ]
    config_attribs_p = (EGL.EGLint * len(config_attribs))(*config_attribs)
    egl_config = EGL.EGLConfig()
    num_configs = EGL.EGLint()
    if not EGL.eglChooseConfig(
        display, config_attribs_p, ctypes.byref(egl_config), 1, ctypes.byref(num_configs)
    ) or num_configs.value < 1:
        EGL.eglTerminate(display)
        raise ContextUnavailableError("No EGL config supports an OpenGL pbuffer")

    EGL.eglBindAPI(EGL.EGL_OPENGL_API)
    context = EGL.eglCreateContext(display, egl_config, EGL.EGL_NO_CONTEXT, None)
    if context == EGL.EGL_NO_CONTEXT:
        EGL.eglTerminate(display)
        raise ContextUnavailableError("Failed to create EGL context")

    pbuffer_attribs = [EGL.EGL_WIDTH, width, EGL.EGL_HEIGHT, height, EGL.EGL_NONE]
    pbuffer_attribs_p = (EGL.EGLint * len(pbuffer_attribs))(*pbuffer_attribs)
    surface = EGL.eglCreatePbufferSurface(display, egl_config, pbuffer_attribs_p)
    if surface == EGL.EGL_NO_SURFACE:
        EGL.eglDestroyContext(display, context)
        EGL.eglTerminate(display)
        raise ContextUnavailableError("Failed to create EGL pbuffer surface")

    session = EGLSession(EGL, display, surface, context)
    if not EGL.eglMakeCurrent(display, surface, surface, context):
        session.terminate()
        raise ContextUnavailableError("Failed to make EGL context current")
    return session


class GLContext:
    """GraphicsContext backed by the current OpenGL context.

    Errors raised by GL while creating, compiling or linking resources, or
    while setting up vertex attributes, become ResourceCreationError. Errors
    raised while binding, uploading or drawing become TrialExecutionError.
    ``reset_state`` does not translate errors.

    Buffers created through this object are deleted on the next
    ``reset_state()``. Shaders and programs live until ``close()``.

    Args:
        gl: Module exposing the OpenGL API. Defaults to ``OpenGL.GL``.
        gl_errors: Exception types the GL module raises on failure. Defaults
            to PyOpenGL's GLError when ``gl`` is not given.
        egl_session: EGL handles to release on ``close()``.
    """

    def __init__(
        self,
        gl: Any = None,
        gl_errors: Tuple[type, ...] = (),
        egl_session: Optional[EGLSession] = None,
    ):
        if gl is None:
            gl, gl_errors = _load_gl()
        self.gl = gl
        self.gl_errors = tuple(gl_errors)
        self.egl_session = egl_session

        self._targets = {
            BufferTarget.ARRAY: gl.GL_ARRAY_BUFFER,
            BufferTarget.ELEMENT_ARRAY: gl.GL_ELEMENT_ARRAY_BUFFER,
        }
        self._usages = {
            UsageHint.STATIC_DRAW: gl.GL_STATIC_DRAW,
            UsageHint.DYNAMIC_DRAW: gl.GL_DYNAMIC_DRAW,
            UsageHint.STREAM_DRAW: gl.GL_STREAM_DRAW,
        }
        self._primitives = {
            PrimitiveKind.POINTS: gl.GL_POINTS,
            PrimitiveKind.LINES: gl.GL_LINES,
            PrimitiveKind.TRIANGLES: gl.GL_TRIANGLES,
        }
        self._stages = {
            ShaderStage.VERTEX: gl.GL_VERTEX_SHADER,
            ShaderStage.FRAGMENT: gl.GL_FRAGMENT_SHADER,
        }

        self._buffers: List[Any] = []
        self._shaders: List[Any] = []
        self._programs: List[Any] = []
        self.closed = False

    # Buffers

    def create_buffer(self) -> Any:
        try:
            handle = self.gl.glGenBuffers(1)
        except self.gl_errors as exc:
            raise ResourceCreationError(f"glGenBuffers failed: {exc}") from exc
        if not handle:
            raise ResourceCreationError("glGenBuffers returned no buffer name")
        self._buffers.append(handle)
        return handle

    def bind_buffer(self, target: BufferTarget, handle: Optional[Any]) -> None:
        try:
            self.gl.glBindBuffer(self._targets[target], 0 if handle is None else handle)
        except self.gl_errors as exc:
            raise TrialExecutionError(f"glBindBuffer failed: {exc}") from exc

    def upload_data(self, target: BufferTarget, data: Any, usage: UsageHint) -> None:
        try:
            self.gl.glBufferData(self._targets[target], data.nbytes, data, self._usages[usage])
        except self.gl_errors as exc:
            raise TrialExecutionError(f"glBufferData failed: {exc}") from exc

    # Shaders and programs

    def create_shader(self, stage: ShaderStage) -> Any:
        try:
            shader = self.gl.glCreateShader(self._stages[stage])
        except self.gl_errors as exc:
            raise ResourceCreationError(f"glCreateShader failed: {exc}") from exc
        if not shader:
            raise ResourceCreationError(f"Could not create {stage.value} shader")
        self._shaders.append(shader)
        return shader

    def compile_shader(self, shader: Any, source: str) -> None:
        gl = self.gl
        try:
            gl.glShaderSource(shader, source)
            gl.glCompileShader(shader)
            compiled = gl.glGetShaderiv(shader, gl.GL_COMPILE_STATUS)
        except self.gl_errors as exc:
            raise ResourceCreationError(f"Shader compilation failed: {exc}") from exc
        if not compiled:
            log = _decode(gl.glGetShaderInfoLog(shader))
            raise ResourceCreationError(f"Shader compilation failed: {log.strip()}")

    def create_program(self) -> Any:
        try:
            program = self.gl.glCreateProgram()
        except self.gl_errors as exc:
            raise ResourceCreationError(f"glCreateProgram failed: {exc}") from exc
        if not program:
            raise ResourceCreationError("Could not create shader program")
        self._programs.append(program)
        return program

    def link_program(self, program: Any, shaders: Sequence[Any]) -> None:
        gl = self.gl
        try:
            for shader in shaders:
                gl.glAttachShader(program, shader)
            gl.glLinkProgram(program)
            linked = gl.glGetProgramiv(program, gl.GL_LINK_STATUS)
        except self.gl_errors as exc:
            raise ResourceCreationError(f"Program link failed: {exc}") from exc
        if not linked:
            log = _decode(gl.glGetProgramInfoLog(program))
            raise ResourceCreationError(f"Program link failed: {log.strip()}")

    def use_program(self, program: Optional[Any]) -> None:
        try:
            self.gl.glUseProgram(0 if program is None else program)
        except self.gl_errors as exc:
            raise TrialExecutionError(f"glUseProgram failed: {exc}") from exc

    def enable_attribute(self, program: Any, name: str, components: int) -> None:
        gl = self.gl
        try:
            location = gl.glGetAttribLocation(program, name)
            if location < 0:
                raise ResourceCreationError(f"Attribute {name!r} not found in program")
            gl.glEnableVertexAttribArray(location)
            gl.glVertexAttribPointer(location, components, gl.GL_FLOAT, gl.GL_FALSE, 0, None)
        except self.gl_errors as exc:
            raise ResourceCreationError(f"Vertex attribute setup failed: {exc}") from exc

    # Submission

    def draw_batch(self, primitive: PrimitiveKind, vertex_count: int) -> None:
        try:
            self.gl.glDrawArrays(self._primitives[primitive], 0, vertex_count)
        except self.gl_errors as exc:
            raise TrialExecutionError(f"glDrawArrays failed: {exc}") from exc

    def await_idle(self) -> None:
        try:
            self.gl.glFinish()
        except self.gl_errors as exc:
            raise TrialExecutionError(f"glFinish failed: {exc}") from exc

    # State

    def reset_state(self) -> None:
        gl = self.gl
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, 0)
        gl.glBindBuffer(gl.GL_ELEMENT_ARRAY_BUFFER, 0)
        gl.glUseProgram(0)
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
        gl.glBindTexture(gl.GL_TEXTURE_2D, 0)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)

        if self._buffers:
            gl.glDeleteBuffers(len(self._buffers), self._buffers)
            self._buffers = []

    def renderer_info(self) -> Dict[str, str]:
        gl = self.gl
        return {
            "vendor": _decode(gl.glGetString(gl.GL_VENDOR)),
            "renderer": _decode(gl.glGetString(gl.GL_RENDERER)),
            "version": _decode(gl.glGetString(gl.GL_VERSION)),
        }

    def close(self) -> None:
        """Release programs, shaders and buffers, then the EGL context."""
        if self.closed:
            return
        gl = self.gl
        self.reset_state()
        for program in self._programs:
            gl.glDeleteProgram(program)
        for shader in self._shaders:
            gl.glDeleteShader(shader)
        self._programs = []
        self._shaders = []
        if self.egl_session is not None:
            self.egl_session.terminate()
            self.egl_session = None
        self.closed = True

    def __enter__(self) -> GLContext:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def open_context(width: int = 256, height: int = 256) -> GLContext:
    """Open a headless OpenGL context and return a GLContext bound to it.

    Raises:
        ContextUnavailableError: If EGL or OpenGL cannot be loaded, or no
            usable context can be created.
    """
    try:
        session = _create_egl_session(width, height)
    except ContextUnavailableError:
        raise
    except Exception as exc:
        raise ContextUnavailableError(f"Could not open an EGL context: {exc}") from exc

    try:
        gl, gl_errors = _load_gl()
        context = GLContext(gl, gl_errors, egl_session=session)
        if not context.renderer_info()["version"]:
            raise ContextUnavailableError("OpenGL context reports no version")
    except Exception as exc:
        session.terminate()
        if isinstance(exc, ContextUnavailableError):
            raise
        raise ContextUnavailableError(f"OpenGL is not usable: {exc}") from exc
    return context
