from __future__ import annotations

import argparse

from laneracer.core.log import configure
from laneracer.ui.cli import commands
from simulator import available_policies


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LANERACER")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common_parent = argparse.ArgumentParser(add_help=False)
    common_parent.add_argument("--width", type=int, default=None)
    common_parent.add_argument("--height", type=int, default=None)
    common_parent.add_argument("--seed", type=int, default=None)
    common_parent.add_argument("--no-sfx", dest="sfx", action="store_false", default=None)
    common_parent.add_argument("-v", "--verbose", action="store_true")

    sub = subparsers.add_parser("play", parents=[common_parent], help="Open the game window")
    sub.set_defaults(func=commands.cmd_play)

    sub = subparsers.add_parser("simulate", parents=[common_parent], help="Run headless autopilot games")
    sub.add_argument("--runs", type=int, default=None)
    sub.add_argument("--policy", choices=available_policies(), default=None)
    sub.set_defaults(func=commands.cmd_simulate)

    sub = subparsers.add_parser("best", parents=[common_parent], help="Show or reset the best score")
    sub.add_argument("--reset", action="store_true")
    sub.set_defaults(func=commands.cmd_best)

    sub = subparsers.add_parser("report", parents=[common_parent], help="Print the saved simulation summary")
    sub.set_defaults(func=commands.cmd_report)

    sub = subparsers.add_parser("doctor", parents=[common_parent], help="Check environment/dependencies")
    sub.set_defaults(func=commands.cmd_doctor)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
