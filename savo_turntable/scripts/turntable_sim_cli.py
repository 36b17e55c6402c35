#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/scripts/turntable_sim_cli.py
--------------------------------------------------------
Dry-run CLI for the turntable rotation controller.

Purpose
-------
Run rotation requests against a `SimulatedTurntable` without ROS or hardware:
  request -> RotationScheduler -> lever -> simulated table -> angle

Useful for
----------
1) PID tuning with the real params file (`--params config/turntable_control.yaml`)
2) Checking wraparound paths (e.g. 350 deg -> index 0 turns +10, not -350)
3) Reproducing supersession / cancel behavior from a command script
4) Checking which table an operator position would select

Examples
--------
# 1) Rotate to stop 2 of 4, starting at 10 deg
turntable_sim_cli --angle 10 index 2

# 2) Neighbor stop, counter-clockwise
turntable_sim_cli --angle 95 next -1

# 3) Flip with per-tick output every 10 ticks
turntable_sim_cli --angle 300 --print-every 10 flip

# 4) Command script: start to 1, supersede with flip after 40 ticks
turntable_sim_cli cmd "index:1" "wait:40" "flip"

# 5) Selection by distance (default search radius 250)
turntable_sim_cli select --at 0 0 --table yard:100:50 --table shed:400:0
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from typing import Callable, Optional, Sequence, Tuple

from savo_turntable.constants import SEARCH_DISTANCE_DEFAULT
from savo_turntable.control import RotationScheduler, apply_command, parse_command
from savo_turntable.drivers import SimulatedTurntable, TurntableException
from savo_turntable.models import RequestResult, TaskState, TaskStep, TurntableControlConfig
from savo_turntable.registry import TurntableRegistry
from savo_turntable.utils.logging import DEFAULT_LOGGER_NAME, get_logger_adapter, log_exception
from savo_turntable.utils.param_loader import load_params, control_config_from_summary
from savo_turntable.version import get_package_version_info


EXIT_OK = 0
EXIT_NOT_CONVERGED = 1
EXIT_USAGE = 2


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def parse_direction(text: str) -> int:
    s = str(text).strip()
    if s in {"+1", "1", "cw", "+"}:
        return 1
    if s in {"-1", "ccw", "-"}:
        return -1
    raise argparse.ArgumentTypeError(f"Invalid direction: {text!r} (use +1 or -1)")


def parse_table_spec(text: str) -> Tuple[str, Tuple[float, float]]:
    """'name:x:y' -> ('name', (x, y))"""
    parts = str(text).split(":")
    if len(parts) != 3 or not parts[0].strip():
        raise argparse.ArgumentTypeError(f"Invalid table spec: {text!r} (use name:x:y)")
    try:
        return parts[0].strip(), (float(parts[1]), float(parts[2]))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid table position in {text!r}") from e


def run_until_idle(
    scheduler: RotationScheduler,
    table: SimulatedTurntable,
    *,
    dt: float,
    max_ticks: int,
    on_tick: Optional[Callable[[int, TaskStep], None]] = None,
) -> int:
    """
    Tick the scheduler and advance the simulated table until no task is active
    or `max_ticks` is reached. Returns the number of ticks run.
    """
    ticks = 0
    while scheduler.is_active() and ticks < max_ticks:
        step = scheduler.tick(dt)
        table.advance(dt)
        ticks += 1
        if step is not None and on_tick is not None:
            on_tick(ticks, step)
    return ticks


def run_ticks(scheduler: RotationScheduler, table: SimulatedTurntable, *, dt: float, count: int) -> None:
    for _ in range(max(0, int(count))):
        scheduler.tick(dt)
        table.advance(dt)


def _print_result(result: RequestResult, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict()))
        return
    if result.started:
        target = f"{result.target_angle_deg:.2f}deg" if result.target_angle_deg is not None else "-"
        print(f"request {result.kind.value}: started task={result.task_id} target={target}")
    else:
        print(f"request {result.kind.value}: REJECTED reason={result.reason}")


def _print_final(scheduler: RotationScheduler, ticks: int, *, as_json: bool) -> bool:
    task = scheduler.active_task or scheduler.last_task
    telemetry = scheduler.telemetry()
    converged = task is not None and task.state is TaskState.CONVERGED
    if as_json:
        print(json.dumps({
            "ticks": ticks,
            "converged": converged,
            "task_state": task.state.value if task is not None else None,
            "telemetry": telemetry.to_dict() if telemetry is not None else None,
        }))
    else:
        print(f"after {ticks} ticks: {telemetry.summary() if telemetry is not None else '-'}")
    return converged


# -----------------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="turntable_sim_cli",
        description="Robot Savo turntable rotation controller against a simulated turntable.",
    )
    p.add_argument("--version", action="version", version=get_package_version_info().banner())

    # Simulated table / loop
    p.add_argument("--params", default=None, help="YAML params file (ROS2 ros__parameters or flat)")
    p.add_argument("--name", default="sim_turntable", help="Simulated turntable name")
    p.add_argument("--subdivisions", type=int, default=4, help="Number of stop positions")
    p.add_argument("--angle", type=float, default=0.0, help="Initial heading (deg)")
    p.add_argument("--max-speed", type=float, default=30.0, help="Table speed at full lever (deg/s)")
    p.add_argument("--deadband", type=float, default=0.0, help="Lever deflection with no motion")
    p.add_argument("--dt", type=float, default=0.02, help="Tick period (s)")
    p.add_argument("--max-ticks", type=int, default=5000, help="Give up after this many ticks")
    p.add_argument("--print-every", type=int, default=0, help="Print telemetry every N ticks (0 = off)")
    p.add_argument("--json", action="store_true", help="Machine-readable output")
    p.add_argument("--verbose", action="store_true", help="Debug logging from the scheduler")

    sub = p.add_subparsers(dest="subcmd", required=True)

    # index
    p_index = sub.add_parser("index", help="Rotate to stop index")
    p_index.add_argument("idx", type=int, help="stop index (wrapped modulo subdivisions)")

    # next
    p_next = sub.add_parser("next", help="Rotate to the neighbor stop")
    p_next.add_argument("direction", type=parse_direction, help="+1 or -1")

    # flip
    sub.add_parser("flip", help="Rotate 180 degrees")

    # cmd
    p_cmd = sub.add_parser("cmd", help="Run a command script (topic syntax plus wait:<ticks>)")
    p_cmd.add_argument("commands", nargs="+", help='e.g. "index:1" "wait:40" "flip"')

    # select
    p_sel = sub.add_parser("select", help="Pick a turntable by operator position")
    p_sel.add_argument("--at", type=float, nargs=2, metavar=("X", "Y"), required=True)
    p_sel.add_argument("--table", type=parse_table_spec, action="append", default=[], help="name:x:y (repeatable)")
    p_sel.add_argument("--search-distance", type=float, default=None, help="Search radius (default from params, 250)")

    return p


# -----------------------------------------------------------------------------
# Subcommands
# -----------------------------------------------------------------------------
def _run_request(args, scheduler: RotationScheduler, table: SimulatedTurntable) -> int:
    if args.subcmd == "index":
        result = scheduler.start_to_index(args.idx)
    elif args.subcmd == "next":
        result = scheduler.start_to_next_position(args.direction)
    else:
        result = scheduler.start_flip()

    _print_result(result, as_json=args.json)
    if not result.started:
        return EXIT_USAGE

    ticks = run_until_idle(scheduler, table, dt=args.dt, max_ticks=args.max_ticks, on_tick=_tick_printer(args))
    return EXIT_OK if _print_final(scheduler, ticks, as_json=args.json) else EXIT_NOT_CONVERGED


def _run_script(args, scheduler: RotationScheduler, table: SimulatedTurntable, log) -> int:
    ticks = 0
    for text in args.commands:
        verb, _, arg = text.partition(":")
        if verb.strip().lower() == "wait":
            try:
                count = int(arg)
            except ValueError:
                print(f"ERROR: bad wait count in {text!r}", file=sys.stderr)
                return EXIT_USAGE
            run_ticks(scheduler, table, dt=args.dt, count=count)
            ticks += max(0, count)
            continue

        try:
            command = parse_command(text)
        except TurntableException as e:
            log_exception(log, e, message=f"bad command {text!r}", component="turntable_sim_cli")
            return EXIT_USAGE

        outcome = apply_command(scheduler, command)
        if isinstance(outcome, RequestResult):
            _print_result(outcome, as_json=args.json)
        elif not args.json:
            print(f"cancel: {'cancelled running task' if outcome else 'nothing running'}")

    ticks += run_until_idle(scheduler, table, dt=args.dt, max_ticks=args.max_ticks, on_tick=_tick_printer(args))
    _print_final(scheduler, ticks, as_json=args.json)
    return EXIT_NOT_CONVERGED if scheduler.is_active() else EXIT_OK


def _run_select(args, config_summary) -> int:
    registry = TurntableRegistry()
    for name, pos in args.table:
        registry.register(SimulatedTurntable(name=name), pos)

    radius = args.search_distance
    if radius is None:
        radius = float(config_summary.get("search_distance", SEARCH_DISTANCE_DEFAULT))

    chosen = registry.nearest_within(args.at, radius)
    ranked = registry.list_by_distance(args.at)
    if args.json:
        print(json.dumps({
            "selected": chosen.name if chosen is not None else None,
            "search_distance": radius,
            "tables": [{"name": e.name, "distance": d} for e, d in ranked],
        }))
    elif chosen is not None:
        print(f"selected {chosen.name} (within {radius:.1f})")
    else:
        print(f"no turntable within {radius:.1f}; available:")
        for entry, distance in ranked:
            print(f"  {entry.name} ({distance:.1f})")
    return EXIT_OK if chosen is not None else EXIT_NOT_CONVERGED


def _tick_printer(args) -> Optional[Callable[[int, TaskStep], None]]:
    every = int(args.print_every)
    if every <= 0 or args.json:
        return None

    def _print(tick: int, step: TaskStep) -> None:
        if tick % every == 0 or step.state.terminal:
            lever = f"{step.lever:.3f}" if step.lever is not None else "-"
            print(f"tick={tick:5d} angle={step.angle_deg:7.2f} err={step.error_deg:+7.2f} lever={lever} state={step.state.value}")

    return _print


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------
def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Basic sanity checks
    if not math.isfinite(args.dt) or args.dt <= 0.0:
        print("ERROR: --dt must be > 0", file=sys.stderr)
        return EXIT_USAGE
    if args.max_ticks <= 0:
        print("ERROR: --max-ticks must be > 0", file=sys.stderr)
        return EXIT_USAGE
    if not math.isfinite(args.angle):
        print("ERROR: --angle must be finite", file=sys.stderr)
        return EXIT_USAGE

    if args.verbose:
        logging.getLogger(DEFAULT_LOGGER_NAME).setLevel(logging.DEBUG)
    log = get_logger_adapter(name=f"{DEFAULT_LOGGER_NAME}.sim_cli")

    try:
        summary = load_params(args.params)
        config: TurntableControlConfig = control_config_from_summary(summary)
    except TurntableException as e:
        log_exception(log, e, message="invalid params", component="turntable_sim_cli")
        return EXIT_USAGE
    if args.params is not None:
        summary.log(log)

    if args.subcmd == "select":
        try:
            return _run_select(args, summary)
        except TurntableException as e:
            log_exception(log, e, message="selection failed", component="turntable_sim_cli")
            return EXIT_USAGE

    try:
        table = SimulatedTurntable(
            name=args.name,
            subdivisions=args.subdivisions,
            angle_deg=args.angle,
            max_speed_deg_s=args.max_speed,
            deadband=args.deadband,
            lever=config.neutral_lever,
        )
    except TurntableException as e:
        log_exception(log, e, message="invalid simulated turntable", component="turntable_sim_cli")
        return EXIT_USAGE

    scheduler = RotationScheduler(table, config, logger=log)

    try:
        if args.subcmd == "cmd":
            return _run_script(args, scheduler, table, log)
        return _run_request(args, scheduler, table)
    except KeyboardInterrupt:
        scheduler.center_lever()
        return 130


if __name__ == "__main__":
    sys.exit(main())
