from __future__ import annotations

"""Named loggers for the engine and the app layer."""

import logging

ROOT = "laneracer"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT}.{name}")


def configure(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(name)s] %(levelname)s %(message)s",
    )
