"""
Per-creature condition store.

The ConditionStore owns every ConditionInstance of one game session, keyed by
entity id and kept in application order. It is the only place instances are
created. The turn, rest and concentration processors operate on a store and
mutate it under its lock.

Missing creatures and missing conditions are never errors: lookups return
empty results and removals report ``removed=False``.
"""

import logging
import threading
from copy import deepcopy
from dataclasses import dataclass
from enum import Enum

from ..models import AppliedAt, ConditionInstance, Duration, EffectKind
from .descriptions import condition_effects
from .durations import initial_remaining
from .stacking import StackAction, resolve_stacking

logger = logging.getLogger("status-ledger.conditions")


class ApplyOutcome(str, Enum):
    APPLIED = "applied"
    REFRESHED = "refreshed"
    EXHAUSTION_INCREASED = "exhaustion_increased"
    EXHAUSTION_FATAL = "exhaustion_fatal"


@dataclass
class ApplyResult:
    """Result of applying a condition.

    Attributes:
        instance: The new or updated instance.
        message: Human-readable description for the table.
        outcome: Which stacking path was taken. ``EXHAUSTION_FATAL`` means the
            creature reached exhaustion level 6; acting on the death is the
            caller's job.
    """
    instance: ConditionInstance
    message: str
    outcome: ApplyOutcome

    @property
    def is_fatal(self) -> bool:
        return self.outcome == ApplyOutcome.EXHAUSTION_FATAL


@dataclass
class RemoveResult:
    removed: bool
    message: str


class ConditionStore:
    """Mapping of entity id to that creature's ordered conditions.

    One store per game session. All public methods take the store's
    re-entrant lock, so a store may be shared by several threads of one host.
    Processors that need to mutate several creatures at once hold ``lock``
    themselves and work on :meth:`live` / :meth:`live_items`.
    """

    def __init__(self) -> None:
        self._conditions: dict[str, list[ConditionInstance]] = {}
        self.lock = threading.RLock()

    # -----------------------------------------------------------------
    # Apply / Remove
    # -----------------------------------------------------------------

    def apply(
        self,
        entity_id: str,
        entity_name: str,
        kind: EffectKind,
        source: str,
        duration: Duration,
        current_round: int,
        turn_index: int,
        source_entity_id: str | None = None,
        exhaustion_level: int | None = None,
    ) -> ApplyResult:
        """Apply ``kind`` to a creature, refreshing or stacking as needed.

        Args:
            entity_id: The creature receiving the condition.
            entity_name: Display name, used only in the message.
            kind: The condition kind.
            source: What caused it (spell, trap, creature).
            duration: How the condition ends.
            current_round: Round number, stamped on new instances.
            turn_index: Initiative slot, stamped on new instances.
            source_entity_id: Who applied it, if known.
            exhaustion_level: Levels of exhaustion gained (default 1).

        Returns:
            An ApplyResult.

        Raises:
            ValueError: If exhaustion is applied with a level below 1.
        """
        kind = EffectKind(kind)
        level_delta = 1 if exhaustion_level is None else exhaustion_level

        with self.lock:
            conditions = self._conditions.setdefault(entity_id, [])
            existing = next((c for c in conditions if c.kind == kind), None)
            decision = resolve_stacking(existing, kind, level_delta)

            if decision.action == StackAction.REFRESH:
                instance = decision.existing
                instance.duration = duration
                instance.source = source
                # Only countdown policies keep a counter; anything else drops it.
                instance.remaining = initial_remaining(duration)
                logger.debug(f"Refreshed {kind.value} on {entity_id} ({instance.id})")
                return ApplyResult(
                    instance=instance,
                    message=f"{entity_name}'s {kind.value} condition has been refreshed from {source}.",
                    outcome=ApplyOutcome.REFRESHED,
                )

            if decision.action == StackAction.STACK:
                instance = decision.existing
                instance.exhaustion_level = decision.level
                instance.source = source
                if decision.is_fatal:
                    logger.info(f"{entity_id} reached exhaustion level 6")
                    return ApplyResult(
                        instance=instance,
                        message=f"{entity_name} has reached exhaustion level 6 and dies!",
                        outcome=ApplyOutcome.EXHAUSTION_FATAL,
                    )
                return ApplyResult(
                    instance=instance,
                    message=(
                        f"{entity_name}'s exhaustion increases to level {decision.level}.\n"
                        f"{condition_effects(kind, decision.level)}"
                    ),
                    outcome=ApplyOutcome.EXHAUSTION_INCREASED,
                )

            instance = ConditionInstance(
                kind=kind,
                source=source,
                source_entity_id=source_entity_id,
                duration=duration,
                remaining=initial_remaining(duration),
                applied_at=AppliedAt(round=current_round, turn_index=turn_index),
                exhaustion_level=decision.level,
            )
            conditions.append(instance)
            logger.debug(f"Applied {kind.value} to {entity_id} ({instance.id})")

            if decision.is_fatal:
                logger.info(f"{entity_id} reached exhaustion level 6")
                return ApplyResult(
                    instance=instance,
                    message=f"{entity_name} has reached exhaustion level 6 and dies!",
                    outcome=ApplyOutcome.EXHAUSTION_FATAL,
                )

            return ApplyResult(
                instance=instance,
                message=(
                    f"{entity_name} is now {kind.value} (from {source}).\n"
                    f"Effects:\n{condition_effects(kind, instance.exhaustion_level)}"
                ),
                outcome=ApplyOutcome.APPLIED,
            )

    def remove(
        self,
        entity_id: str,
        entity_name: str,
        kind_or_id: EffectKind | str,
    ) -> RemoveResult:
        """Remove the first condition matching an instance id or a kind.

        Exhaustion above level 1 is lowered by one level instead of removed,
        and the result reports ``removed=False``.
        """
        with self.lock:
            conditions = self._conditions.get(entity_id)
            if not conditions:
                return RemoveResult(removed=False, message=f"{entity_name} has no conditions.")

            index = next(
                (i for i, c in enumerate(conditions) if c.id == kind_or_id or c.kind == kind_or_id),
                None,
            )
            if index is None:
                return RemoveResult(
                    removed=False,
                    message=f"{entity_name} does not have that condition.",
                )

            instance = conditions[index]
            if instance.kind == EffectKind.EXHAUSTION and (instance.exhaustion_level or 1) > 1:
                instance.exhaustion_level -= 1
                logger.debug(f"Lowered exhaustion on {entity_id} to {instance.exhaustion_level}")
                return RemoveResult(
                    removed=False,
                    message=f"{entity_name}'s exhaustion decreases to level {instance.exhaustion_level}.",
                )

            del conditions[index]
            logger.debug(f"Removed {instance.kind.value} from {entity_id} ({instance.id})")
            return RemoveResult(removed=True, message=f"{entity_name} is no longer {instance.kind.value}.")

    def clear_combat_conditions(self, entity_id: str) -> list[ConditionInstance]:
        """Drop every condition that does not outlast combat.

        Rest-bound, until-removed and exhaustion conditions survive.

        Returns:
            The removed instances, in their former order.
        """
        with self.lock:
            conditions = self._conditions.get(entity_id)
            if not conditions:
                return []

            kept: list[ConditionInstance] = []
            removed: list[ConditionInstance] = []
            for instance in conditions:
                if (
                    instance.duration.type in ("until_rest", "until_removed")
                    or instance.kind == EffectKind.EXHAUSTION
                ):
                    kept.append(instance)
                else:
                    removed.append(instance)

            self._conditions[entity_id] = kept
            return removed

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def get_conditions(self, entity_id: str) -> list[ConditionInstance]:
        """The creature's conditions in application order (empty if none)."""
        with self.lock:
            return list(self._conditions.get(entity_id, []))

    def get_condition(self, entity_id: str, condition_id: str) -> ConditionInstance | None:
        with self.lock:
            for instance in self._conditions.get(entity_id, []):
                if instance.id == condition_id:
                    return instance
        return None

    def kind_labels(self, entity_id: str) -> list[str]:
        """Flat condition labels, e.g. ``["poisoned", "exhaustion2"]``."""
        with self.lock:
            return [c.label() for c in self._conditions.get(entity_id, [])]

    def has_condition(self, entity_id: str, kind: EffectKind | str) -> bool:
        with self.lock:
            return any(c.kind == kind for c in self._conditions.get(entity_id, []))

    def entity_ids(self) -> list[str]:
        with self.lock:
            return list(self._conditions)

    def snapshot(self) -> dict[str, list[ConditionInstance]]:
        """Deep copy of the whole store for status displays."""
        with self.lock:
            return deepcopy(self._conditions)

    # -----------------------------------------------------------------
    # Processor access (caller holds ``lock``)
    # -----------------------------------------------------------------

    def live(self, entity_id: str) -> list[ConditionInstance] | None:
        """The creature's live condition list, or None if it has no entry."""
        return self._conditions.get(entity_id)

    def live_items(self) -> list[tuple[str, list[ConditionInstance]]]:
        return list(self._conditions.items())
