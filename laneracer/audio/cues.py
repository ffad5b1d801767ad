from __future__ import annotations

"""AudioCue implementations the engine can fire into."""

from laneracer.audio.synth import CUES, SAMPLE_RATE, render_cue, to_int16


class NullAudio:
    """Swallows every cue. Used headless and when the mixer is unavailable."""

    enabled = False

    def lane_changed(self) -> None:
        pass

    def ui_click(self) -> None:
        pass

    def crashed(self) -> None:
        pass


class PygameAudio:
    def __init__(self, sample_rate: int = SAMPLE_RATE, enabled: bool = True):
        import pygame

        if not pygame.mixer.get_init():
            pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
        freq, _size, channels = pygame.mixer.get_init()
        self.enabled = enabled
        self.sounds = {
            name: pygame.sndarray.make_sound(to_int16(render_cue(name, freq), channels))
            for name in CUES
        }

    def set_enabled(self, on: bool) -> None:
        self.enabled = bool(on)

    def _play(self, name: str) -> None:
        if self.enabled:
            self.sounds[name].play()

    def lane_changed(self) -> None:
        self._play("lane_changed")

    def ui_click(self) -> None:
        self._play("ui_click")

    def crashed(self) -> None:
        self._play("crashed")


def make_audio(enabled: bool, sample_rate: int = SAMPLE_RATE):
    """PygameAudio if the mixer comes up, NullAudio otherwise."""
    import pygame

    try:
        return PygameAudio(sample_rate, enabled=enabled)
    except pygame.error as exc:
        print(f"[audio] Mixer init failed ({exc}), continuing without sound")
        return NullAudio()
