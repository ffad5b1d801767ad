from __future__ import annotations

"""Procedural sound effects — no audio assets, just numpy waveforms."""

from dataclasses import dataclass

import numpy as np

SAMPLE_RATE = 22050
MASTER_GAIN = 0.22
PEAK = 0.18
FLOOR = 0.0001
ATTACK = 0.01
TAIL = 0.02

WAVES = ("sine", "triangle", "square", "sawtooth")


@dataclass(frozen=True)
class Tone:
    freq: float
    dur: float
    wave: str = "sine"
    vol: float = 1.0
    offset: float = 0.0


# Cue name -> tones (offset in seconds from cue start)
CUES = {
    "lane_changed": (Tone(520, 0.05, "triangle", 0.8),),
    "ui_click": (Tone(660, 0.04, "square", 0.25),),
    "crashed": (
        Tone(120, 0.18, "sawtooth", 1.0),
        Tone(90, 0.20, "sawtooth", 0.9, offset=0.06),
    ),
}


def oscillator(wave: str, freq: float, n: int, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    if wave not in WAVES:
        raise ValueError(f"Unknown wave: {wave!r}. Expected one of {list(WAVES)}")
    phase = (np.arange(n) * freq / sample_rate) % 1.0
    if wave == "sine":
        return np.sin(2 * np.pi * phase)
    if wave == "square":
        return np.where(phase < 0.5, 1.0, -1.0)
    if wave == "sawtooth":
        return 2.0 * phase - 1.0
    return 1.0 - 4.0 * np.abs(phase - 0.5)


def envelope(dur: float, vol: float, n: int, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Exponential ramp FLOOR -> PEAK*vol over ATTACK, back to FLOOR at dur."""
    t = np.arange(n) / sample_rate
    peak = max(PEAK * vol, FLOOR)
    attack = np.minimum(t / ATTACK, 1.0)
    decay = np.clip((t - ATTACK) / max(dur - ATTACK, 1e-6), 0.0, 1.0)
    rise = FLOOR * (peak / FLOOR) ** attack
    fall = peak * (FLOOR / peak) ** decay
    env = np.where(t < ATTACK, rise, fall)
    env[t > dur] = 0.0
    return env


def render_tone(tone: Tone, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    n = int(round((tone.dur + TAIL) * sample_rate))
    return oscillator(tone.wave, tone.freq, n, sample_rate) * envelope(tone.dur, tone.vol, n, sample_rate)


def render_cue(name: str, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mix a cue's tones into one float32 buffer, master gain applied."""
    try:
        tones = CUES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown cue: {name!r}. Expected one of {sorted(CUES)}") from exc

    parts = [(int(round(t.offset * sample_rate)), render_tone(t, sample_rate)) for t in tones]
    length = max(start + len(buf) for start, buf in parts)
    out = np.zeros(length, dtype=np.float32)
    for start, buf in parts:
        out[start:start + len(buf)] += buf.astype(np.float32)
    return out * MASTER_GAIN


def to_int16(samples: np.ndarray, channels: int = 1) -> np.ndarray:
    """Convert to the int16 layout pygame.sndarray expects."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    if channels > 1:
        pcm = np.repeat(pcm[:, None], channels, axis=1)
    return np.ascontiguousarray(pcm)
