"""
End-to-end tests for the render pipeline.
"""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from multibrotgif.assembly import GifEncoder
from multibrotgif.exceptions import EncodingFailure, InvalidParameterRange
from multibrotgif.palette import plan9_palette
from multibrotgif.pipeline import make_renderer, render_animation
from multibrotgif.renderer import render_frame
from multibrotgif.scheduler import schedule_from_config
from multibrotgif.types import Endpoint, ExecutorKind, FrameResult, FrameTask, PipelineConfig

from conftest import InstrumentedRender


class RecordingEncoder(GifEncoder):
    """Encoder that remembers every animation it was asked to write."""

    def __init__(self) -> None:
        super().__init__(plan9_palette())
        self.calls = []

    def encode(self, animation, out) -> None:
        self.calls.append(animation)
        super().encode(animation, out)


def _config(**overrides) -> PipelineConfig:
    values = dict(
        dimension=10, frames=4, delay=2, iterations=30,
        power_start=2.0, power_end=8.0, workers=2,
        executor=ExecutorKind.THREAD,
    )
    values.update(overrides)
    return PipelineConfig(**values)


class TestRenderAnimation:
    def test_writes_gif(self):
        buf = io.BytesIO()
        animation = render_animation(_config(), buf, show_progress=False)
        assert len(animation) == 4
        buf.seek(0)
        img = Image.open(buf)
        assert img.size == (10, 10)
        assert img.n_frames == len(animation)

    def test_constant_exponent_keeps_every_frame(self):
        buf = io.BytesIO()
        animation = render_animation(
            _config(frames=3, power_start=2.0, power_end=2.0), buf, show_progress=False,
        )
        buf.seek(0)
        img = Image.open(buf)
        assert img.n_frames == len(animation) == 3

    def test_frames_match_direct_render(self):
        config = _config()
        animation = render_animation(config, io.BytesIO(), show_progress=False)
        for frame, task in zip(animation.frames, schedule_from_config(config)):
            expected = render_frame(task, 256).raster
            assert frame.raster.tobytes() == expected.tobytes()

    def test_delays_and_loop(self):
        animation = render_animation(
            _config(delay=9, loop_count=2), io.BytesIO(), show_progress=False,
        )
        assert animation.delays == [9, 9, 9, 9]
        assert animation.loop_count == 2

    def test_progress_line(self):
        err = io.StringIO()
        render_animation(_config(), io.BytesIO(), progress_file=err)
        assert "Frame:    4 / 4" in err.getvalue()

    def test_process_executor(self):
        config = _config(frames=2, executor=ExecutorKind.PROCESS)
        animation = render_animation(config, io.BytesIO(), show_progress=False)
        assert len(animation) == 2


class TestScenarios:
    def test_single_frame_origin_hits_cap(self):
        config = _config(frames=1, iterations=50, power_start=2.0, power_end=2.0,
                         endpoint=Endpoint.EXCLUSIVE)
        animation = render_animation(config, io.BytesIO(), show_progress=False)
        assert len(animation) == 1
        assert animation.frames[0].raster[5, 5] == 50 % 256

    def test_inverse_completion_order(self):
        config = _config(frames=4, workers=4)
        render = InstrumentedRender(4, step_s=0.05)
        encoder = RecordingEncoder()
        animation = render_animation(
            config, io.BytesIO(), render=render, encoder=encoder, show_progress=False,
        )
        expected = [render_frame(t, 256).raster for t in schedule_from_config(config)]
        assert [f.raster.tobytes() for f in animation.frames] == [e.tobytes() for e in expected]
        assert len(encoder.calls) == 1

    @pytest.mark.parametrize("frames", [0, -5])
    def test_non_positive_frames_empty(self, frames):
        encoder = RecordingEncoder()
        out = io.BytesIO()
        animation = render_animation(
            _config(frames=frames), out, encoder=encoder, show_progress=False,
        )
        assert len(animation) == 0
        assert encoder.calls == []
        assert out.getvalue() == b""

    def test_reversed_power_range_renders_nothing(self):
        calls: list[int] = []

        def render(task: FrameTask) -> FrameResult:
            calls.append(task.index)
            return render_frame(task, 256)

        out = io.BytesIO()
        with pytest.raises(InvalidParameterRange):
            render_animation(_config(power_start=8.0, power_end=2.0), out,
                             render=render, show_progress=False)
        assert calls == []
        assert out.getvalue() == b""


class TestMakeRenderer:
    def test_binds_palette_size(self):
        config = _config()
        palette = plan9_palette()
        render = make_renderer(config, palette)
        task = next(iter(schedule_from_config(config)))
        assert np.array_equal(render(task).raster, render_frame(task, 256).raster)


class TestEncodingFailure:
    def test_propagates(self):
        class FailingEncoder(GifEncoder):
            def __init__(self):
                super().__init__(plan9_palette())

            def encode(self, animation, out):
                raise EncodingFailure("rejected")

        with pytest.raises(EncodingFailure):
            render_animation(_config(), io.BytesIO(), encoder=FailingEncoder(),
                             show_progress=False)
