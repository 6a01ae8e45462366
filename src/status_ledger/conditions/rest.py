"""
Rest boundary handling.

A short rest ends conditions that last until a short rest. A long rest ends
conditions that last until either kind of rest, and also lowers exhaustion
by one level.
"""

import logging

from ..models import Duration, EffectKind, RestType, UntilRestDuration
from .store import ConditionStore

logger = logging.getLogger("status-ledger.conditions")


def _ends_on_rest(duration: Duration, rest_type: RestType) -> bool:
    if not isinstance(duration, UntilRestDuration):
        return False
    return duration.rest_type == rest_type or (
        duration.rest_type == RestType.SHORT and rest_type == RestType.LONG
    )


def clear_on_rest(
    store: ConditionStore,
    entity_id: str,
    entity_name: str,
    rest_type: RestType | str,
) -> list[str]:
    """Apply a finished rest to one creature's conditions.

    Args:
        store: The session's condition store.
        entity_id: The creature that rested.
        entity_name: Display name, kept for symmetry with the other phases.
        rest_type: "short" or "long".

    Returns:
        Descriptions of what changed, in order, e.g.
        ``["frightened (from Dragon)", "exhaustion reduced to level 1"]``.
    """
    rest_type = RestType(rest_type)
    changes: list[str] = []

    with store.lock:
        conditions = store.live(entity_id)
        if not conditions:
            return changes

        kept = []
        for instance in conditions:
            # Exhaustion only ever drops one level per long rest, whatever its duration.
            if instance.kind != EffectKind.EXHAUSTION and _ends_on_rest(instance.duration, rest_type):
                changes.append(f"{instance.kind.value} (from {instance.source})")
                continue

            if rest_type == RestType.LONG and instance.kind == EffectKind.EXHAUSTION:
                level = (instance.exhaustion_level or 1) - 1
                if level <= 0:
                    changes.append("exhaustion")
                    continue
                instance.exhaustion_level = level
                changes.append(f"exhaustion reduced to level {level}")

            kept.append(instance)

        conditions[:] = kept

    if changes:
        logger.debug(f"{entity_name} ({entity_id}) finished a {rest_type.value} rest: {changes}")
    return changes
