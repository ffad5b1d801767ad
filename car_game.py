#!/usr/bin/env python3
"""Launcher for the LANERACER window: `python car_game.py [--width W --height H --seed S --no-sfx]`."""

import sys

from laneracer.ui.cli.main import main

if __name__ == "__main__":
    raise SystemExit(main(["play", *sys.argv[1:]]))
