"""pressloop: closed-loop PI pressure simulator.

Layers:
- core:  noise, plant, controller, disturbance, clock and the per-tick loop
- logic: session state machine and command intake
- view:  trend buffers and band indicator for presentation
- cli:   console runner and YAML scenario runner
"""

__version__ = "0.3.0"
