from .cues import NullAudio, PygameAudio, make_audio
from .synth import CUES, render_cue

__all__ = [
    'CUES',
    'NullAudio',
    'PygameAudio',
    'make_audio',
    'render_cue',
]
