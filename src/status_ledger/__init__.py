"""
status-ledger - turn-based condition tracking for D&D 5e encounters.
"""

from .models import *
from .conditions import (
    ApplyOutcome,
    ApplyResult,
    ConcentrationBreak,
    ConditionStore,
    RemoveResult,
    SaveRequirement,
    TurnCheckResult,
)
from .sessions import SessionRegistry
from .tracker import ConditionTracker

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("status-ledger")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "Ability",
    "ConcentrationDuration",
    "ConditionInstance",
    "EffectKind",
    "MinutesDuration",
    "RestType",
    "RoundsDuration",
    "SaveTiming",
    "UntilRemovedDuration",
    "UntilRestDuration",
    "UntilSaveDuration",
    "ApplyOutcome",
    "ApplyResult",
    "ConcentrationBreak",
    "ConditionStore",
    "ConditionTracker",
    "RemoveResult",
    "SaveRequirement",
    "SessionRegistry",
    "TurnCheckResult",
]
