"""
ConditionTracker: the interface a turn driver talks to.

Wraps one ConditionStore together with the turn, rest and concentration
processors. Create one tracker per game session and hand it to that session's
turn loop; trackers never share state.
"""

from .conditions.concentration import ConcentrationBreak, ConcentrationLinker
from .conditions.rest import clear_on_rest
from .conditions.store import ApplyResult, ConditionStore, RemoveResult
from .conditions.turns import NEAR_EXPIRY_ROUNDS, TurnCheckResult, TurnPhaseProcessor
from .models import ConditionInstance, Duration, EffectKind, RestType


class ConditionTracker:
    """Condition bookkeeping for one encounter or session.

    Typical turn loop:
    1. A spell or trap lands -> ``apply_effect()``
    2. A creature's turn begins -> ``process_start_of_turn()``
    3. The caller rolls any flagged saves -> ``handle_successful_save()``
    4. The turn ends -> ``process_end_of_turn()``
    5. A concentrating caster fails a CON save -> ``break_concentration()``
    6. The party rests -> ``clear_on_rest()``
    """

    def __init__(
        self,
        store: ConditionStore | None = None,
        near_expiry_rounds: int = NEAR_EXPIRY_ROUNDS,
    ) -> None:
        self.store = store if store is not None else ConditionStore()
        self.near_expiry_rounds = near_expiry_rounds

    def apply_effect(
        self,
        entity_id: str,
        entity_name: str,
        kind: EffectKind,
        source: str,
        duration: Duration,
        current_round: int,
        turn_index: int,
        *,
        source_entity_id: str | None = None,
        exhaustion_level: int | None = None,
    ) -> ApplyResult:
        return self.store.apply(
            entity_id,
            entity_name,
            kind,
            source,
            duration,
            current_round,
            turn_index,
            source_entity_id=source_entity_id,
            exhaustion_level=exhaustion_level,
        )

    def remove_effect(self, entity_id: str, entity_name: str, kind_or_id: EffectKind | str) -> RemoveResult:
        return self.store.remove(entity_id, entity_name, kind_or_id)

    def handle_successful_save(self, entity_id: str, entity_name: str, condition_id: str) -> RemoveResult:
        """A save succeeded against ``condition_id``; end that instance."""
        return self.store.remove(entity_id, entity_name, condition_id)

    def list_effects(self, entity_id: str) -> list[ConditionInstance]:
        return self.store.get_conditions(entity_id)

    def get_effect(self, entity_id: str, condition_id: str) -> ConditionInstance | None:
        return self.store.get_condition(entity_id, condition_id)

    def kind_labels(self, entity_id: str) -> list[str]:
        return self.store.kind_labels(entity_id)

    def has_effect(self, entity_id: str, kind: EffectKind | str) -> bool:
        return self.store.has_condition(entity_id, kind)

    def process_start_of_turn(self, entity_id: str, entity_name: str, current_round: int) -> TurnCheckResult:
        return TurnPhaseProcessor.start_of_turn(
            self.store, entity_id, entity_name, current_round, self.near_expiry_rounds
        )

    def process_end_of_turn(self, entity_id: str, entity_name: str, current_round: int) -> TurnCheckResult:
        return TurnPhaseProcessor.end_of_turn(
            self.store, entity_id, entity_name, current_round, self.near_expiry_rounds
        )

    def clear_on_rest(self, entity_id: str, entity_name: str, rest_type: RestType | str) -> list[str]:
        return clear_on_rest(self.store, entity_id, entity_name, rest_type)

    def break_concentration(self, concentrator_id: str) -> list[ConcentrationBreak]:
        return ConcentrationLinker.break_concentration(self.store, concentrator_id)

    def clear_combat_conditions(self, entity_id: str) -> list[ConditionInstance]:
        return self.store.clear_combat_conditions(entity_id)

    def snapshot_all(self) -> dict[str, list[ConditionInstance]]:
        return self.store.snapshot()
