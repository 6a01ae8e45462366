"""
Stacking rules for re-applied conditions.

Pure decision logic: given the instance a creature already has for a kind (if
any) and a new application, decide whether the application creates a new
instance, refreshes the existing one, or raises the exhaustion level. The
store carries out the decision.
"""

from dataclasses import dataclass
from enum import Enum

from ..models import MAX_EXHAUSTION_LEVEL, ConditionInstance, EffectKind


class StackAction(str, Enum):
    CREATE = "create"
    REFRESH = "refresh"
    STACK = "stack"


@dataclass
class StackDecision:
    """Outcome of :func:`resolve_stacking`.

    Attributes:
        action: What the store should do.
        existing: The instance being refreshed or stacked, if any.
        level: Exhaustion level after the application (exhaustion only).
    """
    action: StackAction
    existing: ConditionInstance | None = None
    level: int | None = None

    @property
    def is_fatal(self) -> bool:
        return self.level is not None and self.level >= MAX_EXHAUSTION_LEVEL


def resolve_stacking(
    existing: ConditionInstance | None,
    kind: EffectKind,
    level_delta: int = 1,
) -> StackDecision:
    """Decide how an application of ``kind`` combines with ``existing``.

    Args:
        existing: The creature's current instance of ``kind``, or None.
        kind: The kind being applied.
        level_delta: Exhaustion levels gained. Ignored for other kinds.

    Returns:
        A StackDecision.

    Raises:
        ValueError: If ``kind`` is exhaustion and ``level_delta`` is below 1.
    """
    if kind == EffectKind.EXHAUSTION:
        if level_delta < 1:
            raise ValueError(f"Exhaustion must increase by at least 1 level, got {level_delta}")

        if existing is None:
            return StackDecision(
                action=StackAction.CREATE,
                level=min(MAX_EXHAUSTION_LEVEL, level_delta),
            )

        # A creature already at 6 stays at 6 and gets the terminal result again.
        current = existing.exhaustion_level or 1
        return StackDecision(
            action=StackAction.STACK,
            existing=existing,
            level=min(MAX_EXHAUSTION_LEVEL, current + level_delta),
        )

    if existing is None:
        return StackDecision(action=StackAction.CREATE)

    # Every other kind, concentrating included, keeps one instance per
    # creature and takes the newest duration and source.
    return StackDecision(action=StackAction.REFRESH, existing=existing)
