"""
Start-of-turn and end-of-turn condition processing.

The turn driver calls :meth:`TurnPhaseProcessor.start_of_turn` when a creature's
turn begins and :meth:`TurnPhaseProcessor.end_of_turn` when it ends. Start of
turn only reports; end of turn ticks countdowns and removes what expired.
Saving throws are flagged, never rolled.
"""

import logging
from dataclasses import dataclass, field

from ..models import Ability, ConditionInstance, SaveTiming, UntilSaveDuration
from .store import ConditionStore

logger = logging.getLogger("status-ledger.conditions")

NEAR_EXPIRY_ROUNDS = 2


@dataclass
class SaveRequirement:
    """A saving throw the creature must attempt to end ``instance``."""
    instance: ConditionInstance
    ability: Ability
    dc: int


@dataclass
class TurnCheckResult:
    """Report of one turn phase. Not state: the caller acts on it.

    Attributes:
        expired: Instances removed by this call (end of turn only).
        save_required: Saves the caller should prompt for.
        reminders: Human-readable lines in traversal order.
    """
    expired: list[ConditionInstance] = field(default_factory=list)
    save_required: list[SaveRequirement] = field(default_factory=list)
    reminders: list[str] = field(default_factory=list)


def _flag_save(result: TurnCheckResult, instance: ConditionInstance, entity_name: str) -> None:
    duration = instance.duration
    result.save_required.append(
        SaveRequirement(instance=instance, ability=duration.ability, dc=duration.dc)
    )
    result.reminders.append(
        f"{entity_name} must make a DC {duration.dc} {duration.ability.value} save "
        f"to end {instance.kind.value} (from {instance.source})."
    )


def _near_expiry(instance: ConditionInstance, entity_name: str) -> str:
    rounds = instance.remaining
    return f"{entity_name}'s {instance.kind.value} will end in {rounds} round{'s' if rounds != 1 else ''}."


def _save_due(instance: ConditionInstance, timing: SaveTiming) -> bool:
    return isinstance(instance.duration, UntilSaveDuration) and instance.duration.timing == timing


class TurnPhaseProcessor:
    """Stateless turn-phase logic over a ConditionStore."""

    @staticmethod
    def start_of_turn(
        store: ConditionStore,
        entity_id: str,
        entity_name: str,
        current_round: int,
        near_expiry_rounds: int = NEAR_EXPIRY_ROUNDS,
    ) -> TurnCheckResult:
        """Flag start-of-turn saves and countdowns about to run out.

        Nothing is mutated.
        """
        result = TurnCheckResult()

        with store.lock:
            conditions = store.live(entity_id)
            if not conditions:
                return result

            for instance in conditions:
                if _save_due(instance, SaveTiming.START_OF_TURN):
                    _flag_save(result, instance, entity_name)

                if instance.remaining is not None and 0 < instance.remaining <= near_expiry_rounds:
                    result.reminders.append(_near_expiry(instance, entity_name))

        return result

    @staticmethod
    def end_of_turn(
        store: ConditionStore,
        entity_id: str,
        entity_name: str,
        current_round: int,
        near_expiry_rounds: int = NEAR_EXPIRY_ROUNDS,
    ) -> TurnCheckResult:
        """Tick countdowns by one round, expire finished ones, flag end-of-turn saves.

        An instance that expires in this call is not also checked for a save.
        Expired instances are removed after the traversal, in one pass.
        """
        result = TurnCheckResult()

        with store.lock:
            conditions = store.live(entity_id)
            if not conditions:
                return result

            expired_ids: set[str] = set()
            for instance in conditions:
                if instance.remaining is not None:
                    instance.remaining = max(0, instance.remaining - 1)

                    if instance.remaining <= 0:
                        result.expired.append(instance)
                        expired_ids.add(instance.id)
                        result.reminders.append(
                            f"{entity_name}'s {instance.kind.value} (from {instance.source}) has ended."
                        )
                        continue

                    if instance.remaining <= near_expiry_rounds:
                        result.reminders.append(_near_expiry(instance, entity_name))

                if _save_due(instance, SaveTiming.END_OF_TURN):
                    _flag_save(result, instance, entity_name)

            if expired_ids:
                conditions[:] = [c for c in conditions if c.id not in expired_ids]
                logger.debug(
                    f"Round {current_round}: expired {len(expired_ids)} condition(s) on {entity_id}"
                )

        return result
