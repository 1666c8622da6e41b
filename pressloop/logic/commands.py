from __future__ import annotations

"""
Shared enums used by the session and the runners.

Includes:
- SessionCmd: operator commands accepted by Session.dispatch()
- RunState: session lifecycle state
"""

from enum import IntEnum


class SessionCmd(IntEnum):
    NONE = 0
    START = 1
    STOP = 2
    RESET = 3
    APPLY_LEAK = 4
    CLEAR_LEAK = 5


class RunState(IntEnum):
    IDLE = 0
    RUNNING = 1


def parse_cmd(value) -> SessionCmd:
    """Accept an int, a SessionCmd or a name like 'apply_leak'."""
    if isinstance(value, str):
        try:
            return SessionCmd[value.strip().upper()]
        except KeyError:
            return SessionCmd.NONE
    try:
        return SessionCmd(int(value))
    except (TypeError, ValueError):
        return SessionCmd.NONE
