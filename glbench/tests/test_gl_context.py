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

"""Tests for glbench.gl.context module."""

from unittest.mock import MagicMock

import numpy as np
import pytest

from glbench.config import BufferUploadSettings, DrawCallSettings, FairnessConfig, HarnessConfig
from glbench.core.context import (
    BufferTarget,
    GraphicsContext,
    PrimitiveKind,
    ShaderStage,
    UsageHint,
)
from glbench.core.errors import (
    ContextUnavailableError,
    ResourceCreationError,
    TrialExecutionError,
)
from glbench.gl import context as gl_context
from glbench.gl.context import GLContext, open_context
from glbench.core.runner import BenchmarkRunner
from glbench.core.sweep import SweepController
from glbench.suite import run_suite
from glbench.workloads import BufferUploadBenchmark, buffer_upload_configs


@pytest.fixture
def gl():
    mock = MagicMock(name="GL")
    mock.glGetAttribLocation.return_value = 0
    mock.glGetString.return_value = b"4.6 Mesa"
    return mock


@pytest.fixture
def ctx(gl):
    return GLContext(gl, gl_errors=(RuntimeError,))


class TestGLContext:
    """Tests for GLContext against a mocked GL module."""

    def test_satisfies_protocol(self, ctx):
        assert isinstance(ctx, GraphicsContext)

    def test_upload_passes_byte_length_and_hint(self, ctx, gl):
        data = np.zeros(256, dtype=np.float32)

        ctx.upload_data(BufferTarget.ARRAY, data, UsageHint.STREAM_DRAW)

        gl.glBufferData.assert_called_once_with(
            gl.GL_ARRAY_BUFFER, 1024, data, gl.GL_STREAM_DRAW
        )

    def test_upload_error_becomes_trial_error(self, ctx, gl):
        gl.glBufferData.side_effect = RuntimeError("GL_OUT_OF_MEMORY")

        with pytest.raises(TrialExecutionError, match="GL_OUT_OF_MEMORY"):
            ctx.upload_data(BufferTarget.ARRAY, np.zeros(4, np.float32), UsageHint.STATIC_DRAW)

    def test_create_buffer_error(self, ctx, gl):
        gl.glGenBuffers.side_effect = RuntimeError("GL_INVALID_OPERATION")

        with pytest.raises(ResourceCreationError):
            ctx.create_buffer()

    def test_create_buffer_zero_name(self, ctx, gl):
        gl.glGenBuffers.return_value = 0

        with pytest.raises(ResourceCreationError, match="no buffer"):
            ctx.create_buffer()

    def test_shader_compile_failure_carries_log(self, ctx, gl):
        gl.glGetShaderiv.return_value = 0
        gl.glGetShaderInfoLog.return_value = b"0:3: syntax error\n"
        shader = ctx.create_shader(ShaderStage.VERTEX)

        with pytest.raises(ResourceCreationError, match="0:3: syntax error"):
            ctx.compile_shader(shader, "void main( {")

    def test_create_shader_maps_stage(self, ctx, gl):
        ctx.create_shader(ShaderStage.FRAGMENT)

        gl.glCreateShader.assert_called_once_with(gl.GL_FRAGMENT_SHADER)

    def test_link_failure_carries_log(self, ctx, gl):
        gl.glGetProgramiv.return_value = 0
        gl.glGetProgramInfoLog.return_value = "varying mismatch"
        program = ctx.create_program()

        with pytest.raises(ResourceCreationError, match="varying mismatch"):
            ctx.link_program(program, [1, 2])
        assert gl.glAttachShader.call_count == 2

    def test_missing_attribute(self, ctx, gl):
        gl.glGetAttribLocation.return_value = -1

        with pytest.raises(ResourceCreationError, match="position"):
            ctx.enable_attribute(1, "position", 2)

    def test_enable_attribute(self, ctx, gl):
        gl.glGetAttribLocation.return_value = 3

        ctx.enable_attribute(1, "position", 2)

        gl.glEnableVertexAttribArray.assert_called_once_with(3)
        gl.glVertexAttribPointer.assert_called_once_with(3, 2, gl.GL_FLOAT, gl.GL_FALSE, 0, None)

    def test_attribute_setup_error(self, ctx, gl):
        gl.glVertexAttribPointer.side_effect = RuntimeError("GL_INVALID_VALUE")

        with pytest.raises(ResourceCreationError, match="GL_INVALID_VALUE"):
            ctx.enable_attribute(1, "position", 2)

    def test_bind_error_becomes_trial_error(self, ctx, gl):
        gl.glBindBuffer.side_effect = RuntimeError("GL_INVALID_OPERATION")

        with pytest.raises(TrialExecutionError, match="glBindBuffer"):
            ctx.bind_buffer(BufferTarget.ARRAY, 1)

    def test_use_program_error_becomes_trial_error(self, ctx, gl):
        gl.glUseProgram.side_effect = RuntimeError("GL_INVALID_OPERATION")

        with pytest.raises(TrialExecutionError, match="glUseProgram"):
            ctx.use_program(1)

    def test_bind_error_during_sweep_is_recorded(self, ctx, gl):
        binds = []

        def bind(target, handle):
            if handle != 0:
                binds.append(handle)
                if len(binds) == 5:
                    raise RuntimeError("GL_INVALID_OPERATION")

        gl.glBindBuffer.side_effect = bind
        controller = SweepController(ctx, BenchmarkRunner(warmup_runs=1, measurement_runs=2))
        configs = buffer_upload_configs([0.01, 0.02, 0.04])

        result = controller.run_sweep(configs, BufferUploadBenchmark())

        assert list(result.results) == configs[:1]
        assert result.failures[0].config == configs[1]
        assert isinstance(result.failures[0].error, TrialExecutionError)
        assert result.skipped == configs[2:]

    def test_draw_batch(self, ctx, gl):
        ctx.draw_batch(PrimitiveKind.TRIANGLES, 3)

        gl.glDrawArrays.assert_called_once_with(gl.GL_TRIANGLES, 0, 3)

    def test_draw_error_becomes_trial_error(self, ctx, gl):
        gl.glDrawArrays.side_effect = RuntimeError("GL_INVALID_OPERATION")

        with pytest.raises(TrialExecutionError):
            ctx.draw_batch(PrimitiveKind.TRIANGLES, 3)

    def test_await_idle_finishes(self, ctx, gl):
        ctx.await_idle()

        gl.glFinish.assert_called_once_with()

    def test_unexpected_errors_propagate(self, ctx, gl):
        gl.glDrawArrays.side_effect = KeyError("bug")

        with pytest.raises(KeyError):
            ctx.draw_batch(PrimitiveKind.TRIANGLES, 3)

    def test_reset_unbinds_and_deletes_buffers(self, ctx, gl):
        gl.glGenBuffers.side_effect = [7, 8]
        ctx.create_buffer()
        ctx.create_buffer()

        ctx.reset_state()

        gl.glBindBuffer.assert_any_call(gl.GL_ARRAY_BUFFER, 0)
        gl.glBindBuffer.assert_any_call(gl.GL_ELEMENT_ARRAY_BUFFER, 0)
        gl.glUseProgram.assert_called_with(0)
        gl.glBindFramebuffer.assert_called_with(gl.GL_FRAMEBUFFER, 0)
        gl.glBindTexture.assert_called_with(gl.GL_TEXTURE_2D, 0)
        gl.glClear.assert_called_once()
        gl.glDeleteBuffers.assert_called_once_with(2, [7, 8])

    def test_reset_twice_deletes_once(self, ctx, gl):
        ctx.create_buffer()

        ctx.reset_state()
        ctx.reset_state()

        assert gl.glDeleteBuffers.call_count == 1

    def test_renderer_info(self, ctx):
        info = ctx.renderer_info()

        assert info == {"vendor": "4.6 Mesa", "renderer": "4.6 Mesa", "version": "4.6 Mesa"}

    def test_close_is_idempotent(self, gl):
        session = MagicMock()
        ctx = GLContext(gl, gl_errors=(RuntimeError,), egl_session=session)
        ctx.create_program()
        ctx.create_shader(ShaderStage.VERTEX)

        with ctx:
            pass
        ctx.close()

        assert ctx.closed
        session.terminate.assert_called_once_with()
        gl.glDeleteProgram.assert_called_once()
        gl.glDeleteShader.assert_called_once()


class TestOpenContext:
    """Tests for open_context() failure handling."""

    def test_egl_failure_is_context_unavailable(self, monkeypatch):
        def fail(width, height):
            raise OSError("libEGL.so.1: cannot open shared object file")

        monkeypatch.setattr(gl_context, "_create_egl_session", fail)

        with pytest.raises(ContextUnavailableError, match="libEGL"):
            open_context()

    def test_context_unavailable_passes_through(self, monkeypatch):
        def fail(width, height):
            raise ContextUnavailableError("Failed to get EGL display")

        monkeypatch.setattr(gl_context, "_create_egl_session", fail)

        with pytest.raises(ContextUnavailableError, match="EGL display"):
            open_context()

    def test_missing_version_terminates_session(self, monkeypatch, gl):
        session = MagicMock()
        gl.glGetString.return_value = b""
        monkeypatch.setattr(gl_context, "_create_egl_session", lambda w, h: session)
        monkeypatch.setattr(gl_context, "_load_gl", lambda: (gl, (RuntimeError,)))

        with pytest.raises(ContextUnavailableError, match="no version"):
            open_context()
        session.terminate.assert_called_once_with()

    def test_success(self, monkeypatch, gl):
        session = MagicMock()
        monkeypatch.setattr(gl_context, "_create_egl_session", lambda w, h: session)
        monkeypatch.setattr(gl_context, "_load_gl", lambda: (gl, (RuntimeError,)))

        ctx = open_context(32, 32)

        assert ctx.egl_session is session
        assert ctx.renderer_info()["version"] == "4.6 Mesa"


@pytest.mark.gpu
class TestRealContext:
    """Smoke tests against a real headless OpenGL context."""

    def test_small_suite(self):
        config = HarnessConfig(
            fairness=FairnessConfig(warmup_runs=1, measurement_runs=3),
            buffer_upload=BufferUploadSettings(sizes_mb=[0.25, 1]),
            draw_calls=DrawCallSettings(draw_calls_per_trial=[10]),
        )

        with open_context(64, 64) as ctx:
            results = run_suite(ctx, config)

        for result in results.values():
            assert result.complete, [f.describe() for f in result.failures]
            for stats in result.results.values():
                assert stats.count == 3
                assert stats.min >= 0

    def test_renderer_info(self):
        with open_context(16, 16) as ctx:
            info = ctx.renderer_info()

        assert info["version"]
