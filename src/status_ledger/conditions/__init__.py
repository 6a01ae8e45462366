"""
Condition tracking for status-ledger.

Provides the per-session condition store, stacking rules, turn-phase
processing, rest handling and the concentration cascade.
"""

from .concentration import ConcentrationBreak, ConcentrationLinker
from .rest import clear_on_rest
from .stacking import StackAction, StackDecision, resolve_stacking
from .store import ApplyOutcome, ApplyResult, ConditionStore, RemoveResult
from .turns import SaveRequirement, TurnCheckResult, TurnPhaseProcessor

__all__ = [
    "ApplyOutcome",
    "ApplyResult",
    "ConcentrationBreak",
    "ConcentrationLinker",
    "ConditionStore",
    "RemoveResult",
    "SaveRequirement",
    "StackAction",
    "StackDecision",
    "TurnCheckResult",
    "TurnPhaseProcessor",
    "clear_on_rest",
    "resolve_stacking",
]
