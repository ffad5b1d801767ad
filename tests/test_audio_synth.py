"""Tests for laneracer.audio — procedural cue synthesis (no mixer needed)."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from laneracer.audio.cues import NullAudio
from laneracer.audio.synth import (
    CUES, FLOOR, MASTER_GAIN, PEAK, SAMPLE_RATE, WAVES,
    envelope, oscillator, render_cue, to_int16,
)


class TestOscillator:
    @pytest.mark.parametrize("wave", WAVES)
    def test_range(self, wave):
        """Every waveform stays within [-1, 1]."""
        samples = oscillator(wave, 440, 2000)
        assert samples.shape == (2000,)
        assert samples.min() >= -1.0 - 1e-9
        assert samples.max() <= 1.0 + 1e-9

    def test_square_is_two_level(self):
        assert set(np.unique(oscillator("square", 100, 1000))) == {-1.0, 1.0}

    def test_unknown_wave(self):
        with pytest.raises(ValueError, match="Unknown wave"):
            oscillator("noise", 440, 10)


class TestEnvelope:
    def test_shape(self):
        """Starts near silence, peaks after the attack, is silent after dur."""
        n = int(0.1 * SAMPLE_RATE)
        env = envelope(0.05, 1.0, n)
        assert env[0] == pytest.approx(FLOOR)
        assert env.max() == pytest.approx(PEAK, rel=1e-2)
        assert np.all(env[int(0.06 * SAMPLE_RATE):] == 0)


class TestCues:
    def test_all_cues_render(self):
        for name in CUES:
            buf = render_cue(name)
            assert buf.dtype == np.float32
            assert len(buf) > 0

    def test_crash_is_longest(self):
        """The crash cue layers a delayed second tone, so it runs past 0.25 s."""
        crash = render_cue("crashed")
        assert len(crash) > 0.25 * SAMPLE_RATE
        assert len(crash) > len(render_cue("lane_changed"))

    def test_cue_level(self):
        """Master gain keeps every cue well below full scale."""
        for name in CUES:
            assert np.abs(render_cue(name)).max() <= MASTER_GAIN * PEAK * 2 + 1e-6

    def test_unknown_cue(self):
        with pytest.raises(ValueError, match="Unknown cue"):
            render_cue("horn")

    def test_to_int16_layout(self):
        mono = to_int16(render_cue("ui_click"))
        stereo = to_int16(render_cue("ui_click"), channels=2)
        assert mono.dtype == np.int16 and mono.ndim == 1
        assert stereo.shape == (len(mono), 2)
        assert np.array_equal(stereo[:, 0], mono)


class TestNullAudio:
    def test_accepts_all_cues(self):
        audio = NullAudio()
        audio.lane_changed()
        audio.ui_click()
        audio.crashed()
        assert audio.enabled is False
