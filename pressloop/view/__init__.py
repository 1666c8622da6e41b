"""Presentation helpers that consume StepOutput records.

Nothing here feeds back into the simulation.
"""

from .band import BandMonitor, BandThresholds  # re-export
from .trend import TrendBuffer  # re-export

__all__ = ["BandMonitor", "BandThresholds", "TrendBuffer"]
