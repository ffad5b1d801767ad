"""Shared configuration for LANERACER."""
from pathlib import Path

from game_engine import WIDTH, HEIGHT, FPS, LANE_COUNT, BEST_KEY

# Directories
PROJECT_DIR = Path(__file__).parent
DATA_DIR = PROJECT_DIR / "data"
RESULTS_DIR = PROJECT_DIR / "results"

# ── Window ──
WINDOW_WIDTH = WIDTH
WINDOW_HEIGHT = HEIGHT
WINDOW_TITLE = "LANERACER"

# ── Audio ──
SFX_ENABLED = True
SAMPLE_RATE = 22050

# ── Input ──
HOLD_REPEAT_SECONDS = 0.18

# Engine settings come from the canonical headless engine constants to avoid drift.

# Simulation settings
SIM_RUNS = 20
SIM_MAX_SECONDS = 180
SIM_POLICY = "dodge"

# File paths
BEST_SCORE_JSON = DATA_DIR / "best_score.json"
SIM_RESULTS_JSON = RESULTS_DIR / "simulation.json"
