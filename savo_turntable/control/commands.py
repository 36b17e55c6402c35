#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable.control.commands
============================================

Purpose
-------
Text command contract for the `/turntable/command` topic (std_msgs/String)
and the sim CLI `cmd` subcommand.

Accepted forms (case-insensitive, surrounding whitespace ignored)
-----------------------------------------------------------------
index:<n>        rotate to stop n            aliases: goto, track
next:+1 | next:-1
                 rotate to the neighbor stop aliases: step
next / prev      shorthand for next:+1 / next:-1 (prev takes no argument)
flip             rotate 180 degrees          aliases: turn, reverse
cancel           stop the running task       aliases: stop
lever:<v>        manual lever in [0, 1]      aliases: manual
center           manual lever back to neutral aliases: neutral

Parsing only validates the *shape* of a command. Range checks against the
turntable (subdivisions, lever bounds) stay in the scheduler, so a rejected
command is reported through `RequestResult` like any other request.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..drivers.turntable_exceptions import TurntableErrorContext, TurntableValidationError
from ..models.rotation_status import RequestResult


class CommandKind(str, Enum):
    INDEX = "index"
    NEXT = "next"
    FLIP = "flip"
    CANCEL = "cancel"
    LEVER = "lever"
    CENTER = "center"


_KIND_ALIASES = {
    "index": CommandKind.INDEX,
    "goto": CommandKind.INDEX,
    "track": CommandKind.INDEX,
    "next": CommandKind.NEXT,
    "step": CommandKind.NEXT,
    "prev": CommandKind.NEXT,
    "flip": CommandKind.FLIP,
    "turn": CommandKind.FLIP,
    "reverse": CommandKind.FLIP,
    "cancel": CommandKind.CANCEL,
    "stop": CommandKind.CANCEL,
    "lever": CommandKind.LEVER,
    "manual": CommandKind.LEVER,
    "center": CommandKind.CENTER,
    "neutral": CommandKind.CENTER,
}

# Commands that take no argument
_BARE_KINDS = {CommandKind.FLIP, CommandKind.CANCEL, CommandKind.CENTER}


@dataclass(frozen=True)
class TurntableCommand:
    kind: CommandKind
    index: Optional[int] = None
    direction: Optional[int] = None
    lever: Optional[float] = None

    def as_text(self) -> str:
        if self.kind is CommandKind.INDEX:
            return f"index:{self.index}"
        if self.kind is CommandKind.NEXT:
            return f"next:{self.direction:+d}"
        if self.kind is CommandKind.LEVER:
            return f"lever:{self.lever:.3f}"
        return self.kind.value


def _invalid(text: object, message: str) -> TurntableValidationError:
    return TurntableValidationError(
        message,
        context=TurntableErrorContext(operation="parse_command", value=repr(text)),
    )


def parse_command(text: object) -> TurntableCommand:
    """
    Parse command text into a `TurntableCommand`.

    Raises `TurntableValidationError` for unknown verbs, a missing or
    malformed argument, or an argument on a bare command.

    Examples
    --------
    parse_command("index:2")   -> TurntableCommand(INDEX, index=2)
    parse_command("next:-1")   -> TurntableCommand(NEXT, direction=-1)
    parse_command("prev")      -> TurntableCommand(NEXT, direction=-1)
    parse_command("lever:0.8") -> TurntableCommand(LEVER, lever=0.8)
    """
    if text is None:
        raise _invalid(text, "empty turntable command")
    raw = str(text).strip()
    if not raw:
        raise _invalid(text, "empty turntable command")

    verb, sep, arg = raw.partition(":")
    verb = verb.strip().lower()
    arg = arg.strip()

    kind = _KIND_ALIASES.get(verb)
    if kind is None:
        valid = ", ".join(k.value for k in CommandKind)
        raise _invalid(text, f"unknown turntable command '{verb}' (valid: {valid})")

    if kind in _BARE_KINDS:
        if arg:
            raise _invalid(text, f"'{kind.value}' takes no argument")
        return TurntableCommand(kind=kind)

    if kind is CommandKind.NEXT:
        if verb == "prev" and sep:
            raise _invalid(text, "'prev' takes no argument (use next:-1)")
        if not sep:
            return TurntableCommand(kind=kind, direction=-1 if verb == "prev" else 1)
        if arg in ("+1", "1"):
            return TurntableCommand(kind=kind, direction=1)
        if arg == "-1":
            return TurntableCommand(kind=kind, direction=-1)
        raise _invalid(text, "next direction must be +1 or -1")

    if not arg:
        raise _invalid(text, f"'{kind.value}' needs an argument, e.g. {kind.value}:1")

    if kind is CommandKind.INDEX:
        try:
            return TurntableCommand(kind=kind, index=int(arg, 10))
        except ValueError as e:
            raise _invalid(text, "index must be an integer") from e

    # CommandKind.LEVER
    try:
        value = float(arg)
    except ValueError as e:
        raise _invalid(text, "lever value must be a number") from e
    if not math.isfinite(value):
        raise _invalid(text, "lever value must be finite")
    return TurntableCommand(kind=kind, lever=value)


def apply_command(scheduler, command: TurntableCommand) -> Union[RequestResult, bool]:
    """
    Dispatch a parsed command onto a `RotationScheduler`.

    Returns the request's `RequestResult`, or for `cancel` whether a task was
    actually running.
    """
    kind = command.kind
    if kind is CommandKind.INDEX:
        return scheduler.start_to_index(command.index)
    if kind is CommandKind.NEXT:
        return scheduler.start_to_next_position(command.direction)
    if kind is CommandKind.FLIP:
        return scheduler.start_flip()
    if kind is CommandKind.CANCEL:
        return scheduler.cancel()
    if kind is CommandKind.LEVER:
        return scheduler.set_manual_lever(command.lever)
    return scheduler.center_lever()


__all__ = [
    "CommandKind",
    "TurntableCommand",
    "parse_command",
    "apply_command",
]
