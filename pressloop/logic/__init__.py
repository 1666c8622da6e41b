"""Logic layer exports for the pressure-loop simulator.

Provides a stable import surface so callers can do:

  from pressloop.logic import Session, SessionCmd, RunState
"""

from .commands import SessionCmd, RunState, parse_cmd  # re-export
from .session import Session  # re-export

__all__ = [
    "SessionCmd",
    "RunState",
    "parse_cmd",
    "Session",
]
