from .core import decide
from .cost import CostAccumulator, replay_halt_time, verify_prediction
from .edge import CycleTracker, Phase

__all__ = [
    "decide",
    "CostAccumulator",
    "CycleTracker",
    "Phase",
    "replay_halt_time",
    "verify_prediction",
]
