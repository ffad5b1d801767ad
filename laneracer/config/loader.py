from __future__ import annotations

from .defaults import from_legacy_config
from .schema import Settings


def load_settings(
    *,
    width: int | None = None,
    height: int | None = None,
    seed: int | None = None,
    sfx: bool | None = None,
    ensure_dirs: bool = True,
) -> Settings:
    """Load runtime settings, defaulting to values from the legacy config module."""
    settings = from_legacy_config()
    overrides = {k: v for k, v in {"width": width, "height": height, "seed": seed, "sfx": sfx}.items() if v is not None}
    if overrides:
        settings = settings.with_overrides(**overrides)
    if settings.width <= 0 or settings.height <= 0:
        raise ValueError(f"Viewport must be positive, got {settings.width}x{settings.height}")
    if ensure_dirs:
        settings.paths.ensure_dirs()
    return settings
