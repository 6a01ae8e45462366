"""
Tests for the ConditionStore.

Covers:
- apply: new instances, refresh in place, exhaustion stacking and level 6
- remove: by kind, by id, gradual exhaustion removal, not-found results
- queries: labels, has_condition, snapshot isolation
- clear_combat_conditions
"""

import threading

import pytest

from status_ledger.models import (
    Ability,
    ConcentrationDuration,
    EffectKind,
    MinutesDuration,
    RestType,
    RoundsDuration,
    UntilRemovedDuration,
    UntilRestDuration,
    UntilSaveDuration,
)
from status_ledger.conditions.store import ApplyOutcome, ConditionStore


@pytest.fixture
def store() -> ConditionStore:
    return ConditionStore()


def apply(store: ConditionStore, entity_id: str, kind: EffectKind, duration=None, **kwargs):
    """Apply with sensible defaults for the round bookkeeping."""
    return store.apply(
        entity_id,
        kwargs.pop("entity_name", entity_id.title()),
        kind,
        kwargs.pop("source", "Test"),
        duration or UntilRemovedDuration(),
        kwargs.pop("current_round", 1),
        kwargs.pop("turn_index", 0),
        **kwargs,
    )


# ===========================================================================
# Apply
# ===========================================================================

class TestApply:

    def test_apply_new_condition(self, store: ConditionStore):
        result = store.apply(
            "goblin-1", "Goblin", EffectKind.POISONED, "trap",
            RoundsDuration(rounds=5), 1, 0,
        )
        assert result.outcome == ApplyOutcome.APPLIED
        assert result.instance.kind == EffectKind.POISONED
        assert result.instance.remaining == 5
        assert result.instance.applied_at.round == 1
        assert result.instance.applied_at.turn_index == 0
        assert "Goblin is now poisoned (from trap)." in result.message
        assert "Disadvantage on attack rolls" in result.message
        assert store.get_conditions("goblin-1") == [result.instance]

    def test_minutes_convert_to_rounds(self, store: ConditionStore):
        result = apply(store, "hero", EffectKind.INVISIBLE, MinutesDuration(minutes=1))
        assert result.instance.remaining == 10

    def test_non_countdown_has_no_remaining(self, store: ConditionStore):
        result = apply(store, "hero", EffectKind.CHARMED, UntilRestDuration())
        assert result.instance.remaining is None

    def test_source_entity_recorded(self, store: ConditionStore):
        result = apply(store, "hero", EffectKind.FRIGHTENED, source_entity_id="dragon")
        assert result.instance.source_entity_id == "dragon"

    def test_insertion_order_preserved(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        apply(store, "hero", EffectKind.BLINDED)
        apply(store, "hero", EffectKind.DEAFENED)
        kinds = [c.kind for c in store.get_conditions("hero")]
        assert kinds == [EffectKind.PRONE, EffectKind.BLINDED, EffectKind.DEAFENED]

    def test_refresh_keeps_single_instance_and_id(self, store: ConditionStore):
        first = apply(store, "hero", EffectKind.FRIGHTENED, RoundsDuration(rounds=2), source="Goblin")
        second = apply(store, "hero", EffectKind.FRIGHTENED, RoundsDuration(rounds=6), source="Dragon")

        assert second.outcome == ApplyOutcome.REFRESHED
        assert second.instance is first.instance
        assert second.instance.id == first.instance.id
        assert second.instance.duration == RoundsDuration(rounds=6)
        assert second.instance.remaining == 6
        assert second.instance.source == "Dragon"
        assert second.message == "Hero's frightened condition has been refreshed from Dragon."
        assert len(store.get_conditions("hero")) == 1

    def test_refresh_does_not_move_applied_at(self, store: ConditionStore):
        first = apply(store, "hero", EffectKind.PRONE, current_round=1, turn_index=2)
        apply(store, "hero", EffectKind.PRONE, current_round=4, turn_index=0)
        assert first.instance.applied_at.round == 1
        assert first.instance.applied_at.turn_index == 2

    def test_refresh_with_other_policy_type_is_accepted(self, store: ConditionStore):
        apply(store, "hero", EffectKind.FRIGHTENED, RoundsDuration(rounds=3))
        result = apply(store, "hero", EffectKind.FRIGHTENED, UntilRestDuration(rest_type=RestType.SHORT))

        assert result.outcome == ApplyOutcome.REFRESHED
        assert result.instance.duration == UntilRestDuration(rest_type=RestType.SHORT)
        assert result.instance.remaining is None

    def test_refresh_from_policy_to_countdown_seeds_counter(self, store: ConditionStore):
        apply(store, "hero", EffectKind.BLINDED, UntilRemovedDuration())
        result = apply(store, "hero", EffectKind.BLINDED, MinutesDuration(minutes=2))
        assert result.instance.remaining == 20

    def test_same_kind_on_different_entities_is_independent(self, store: ConditionStore):
        apply(store, "a", EffectKind.POISONED)
        apply(store, "b", EffectKind.POISONED)
        assert len(store.get_conditions("a")) == 1
        assert len(store.get_conditions("b")) == 1
        assert store.get_conditions("a")[0].id != store.get_conditions("b")[0].id


class TestExhaustionStacking:

    def test_first_exhaustion_is_level_one(self, store: ConditionStore):
        result = apply(store, "hero", EffectKind.EXHAUSTION)
        assert result.outcome == ApplyOutcome.APPLIED
        assert result.instance.exhaustion_level == 1

    def test_three_applications_reach_level_three(self, store: ConditionStore):
        for _ in range(3):
            apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=1)

        conditions = store.get_conditions("hero")
        assert len(conditions) == 1
        assert conditions[0].exhaustion_level == 3

    def test_increase_message(self, store: ConditionStore):
        apply(store, "hero", EffectKind.EXHAUSTION)
        result = apply(store, "hero", EffectKind.EXHAUSTION, source="Forced march")
        assert result.outcome == ApplyOutcome.EXHAUSTION_INCREASED
        assert result.message.startswith("Hero's exhaustion increases to level 2.")
        assert "Speed halved" in result.message
        assert result.instance.source == "Forced march"

    def test_five_then_six_is_fatal(self, store: ConditionStore):
        for _ in range(5):
            result = apply(store, "hero", EffectKind.EXHAUSTION)
        assert result.instance.exhaustion_level == 5
        assert not result.is_fatal

        result = apply(store, "hero", EffectKind.EXHAUSTION)
        assert result.instance.exhaustion_level == 6
        assert result.outcome == ApplyOutcome.EXHAUSTION_FATAL
        assert result.is_fatal
        assert result.message == "Hero has reached exhaustion level 6 and dies!"

    def test_no_seventh_level(self, store: ConditionStore):
        apply(store, "hero", EffectKind.EXHAUSTION, source="March", exhaustion_level=6)
        result = apply(store, "hero", EffectKind.EXHAUSTION, source="Starvation")
        assert result.outcome == ApplyOutcome.EXHAUSTION_FATAL
        assert result.is_fatal
        assert result.message == "Hero has reached exhaustion level 6 and dies!"
        assert result.instance.exhaustion_level == 6
        assert result.instance.source == "Starvation"
        assert len(store.get_conditions("hero")) == 1

    def test_large_delta_clamps(self, store: ConditionStore):
        apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=2)
        result = apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=10)
        assert result.instance.exhaustion_level == 6
        assert result.is_fatal

    def test_fresh_exhaustion_at_six_is_fatal(self, store: ConditionStore):
        result = apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=6)
        assert result.outcome == ApplyOutcome.EXHAUSTION_FATAL
        assert result.instance.exhaustion_level == 6

    def test_zero_delta_raises(self, store: ConditionStore):
        with pytest.raises(ValueError):
            apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=0)


# ===========================================================================
# Remove
# ===========================================================================

class TestRemove:

    def test_remove_by_kind(self, store: ConditionStore):
        apply(store, "hero", EffectKind.POISONED)
        result = store.remove("hero", "Hero", EffectKind.POISONED)
        assert result.removed is True
        assert result.message == "Hero is no longer poisoned."
        assert store.get_conditions("hero") == []

    def test_remove_by_kind_string(self, store: ConditionStore):
        apply(store, "hero", EffectKind.POISONED)
        assert store.remove("hero", "Hero", "poisoned").removed is True

    def test_remove_by_id(self, store: ConditionStore):
        keep = apply(store, "hero", EffectKind.PRONE).instance
        drop = apply(store, "hero", EffectKind.BLINDED).instance
        result = store.remove("hero", "Hero", drop.id)
        assert result.removed is True
        assert store.get_conditions("hero") == [keep]

    def test_remove_from_entity_without_conditions(self, store: ConditionStore):
        result = store.remove("nobody", "Nobody", EffectKind.POISONED)
        assert result.removed is False
        assert result.message == "Nobody has no conditions."

    def test_remove_missing_condition(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        result = store.remove("hero", "Hero", EffectKind.STUNNED)
        assert result.removed is False
        assert result.message == "Hero does not have that condition."

    def test_remove_unknown_id(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        assert store.remove("hero", "Hero", "cond_missing").removed is False

    def test_exhaustion_decreases_gradually(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=3)
        apply(store, "hero", EffectKind.BLINDED)

        result = store.remove("hero", "Hero", EffectKind.EXHAUSTION)
        assert result.removed is False
        assert result.message == "Hero's exhaustion decreases to level 2."
        # Still in place, not moved to the end.
        assert store.kind_labels("hero") == ["prone", "exhaustion2", "blinded"]

        store.remove("hero", "Hero", EffectKind.EXHAUSTION)
        result = store.remove("hero", "Hero", EffectKind.EXHAUSTION)
        assert result.removed is True
        assert not store.has_condition("hero", EffectKind.EXHAUSTION)

    def test_empty_entry_kept_after_last_removal(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        store.remove("hero", "Hero", EffectKind.PRONE)
        assert "hero" in store.entity_ids()
        assert store.get_conditions("hero") == []
        assert store.remove("hero", "Hero", EffectKind.PRONE).message == "Hero has no conditions."


# ===========================================================================
# Queries
# ===========================================================================

class TestQueries:

    def test_get_conditions_unknown_entity(self, store: ConditionStore):
        assert store.get_conditions("ghost") == []
        assert store.kind_labels("ghost") == []
        assert store.has_condition("ghost", EffectKind.PRONE) is False

    def test_get_conditions_returns_copy_of_list(self, store: ConditionStore):
        apply(store, "hero", EffectKind.PRONE)
        listed = store.get_conditions("hero")
        listed.clear()
        assert len(store.get_conditions("hero")) == 1

    def test_get_condition_by_id(self, store: ConditionStore):
        instance = apply(store, "hero", EffectKind.PRONE).instance
        assert store.get_condition("hero", instance.id) is instance
        assert store.get_condition("hero", "cond_nope") is None
        assert store.get_condition("ghost", instance.id) is None

    def test_kind_labels(self, store: ConditionStore):
        apply(store, "hero", EffectKind.POISONED)
        apply(store, "hero", EffectKind.EXHAUSTION, exhaustion_level=2)
        assert store.kind_labels("hero") == ["poisoned", "exhaustion2"]

    def test_has_condition_accepts_string(self, store: ConditionStore):
        apply(store, "hero", EffectKind.STUNNED)
        assert store.has_condition("hero", "stunned") is True
        assert store.has_condition("hero", EffectKind.PRONE) is False

    def test_snapshot_is_isolated(self, store: ConditionStore):
        apply(store, "goblin", EffectKind.POISONED, RoundsDuration(rounds=3))
        snapshot = store.snapshot()

        store.get_conditions("goblin")[0].remaining = 1
        apply(store, "goblin", EffectKind.PRONE)
        apply(store, "orc", EffectKind.BLINDED)

        assert list(snapshot) == ["goblin"]
        assert len(snapshot["goblin"]) == 1
        assert snapshot["goblin"][0].remaining == 3

    def test_snapshot_mutation_does_not_leak_back(self, store: ConditionStore):
        apply(store, "goblin", EffectKind.POISONED)
        snapshot = store.snapshot()
        snapshot["goblin"].clear()
        assert len(store.get_conditions("goblin")) == 1


class TestClearCombatConditions:

    def test_keeps_persistent_conditions(self, store: ConditionStore):
        apply(store, "hero", EffectKind.POISONED, RoundsDuration(rounds=3))
        apply(store, "hero", EffectKind.CHARMED, UntilRestDuration())
        apply(store, "hero", EffectKind.BLINDED, UntilRemovedDuration())
        apply(store, "hero", EffectKind.EXHAUSTION, RoundsDuration(rounds=2))
        apply(store, "hero", EffectKind.FRIGHTENED, UntilSaveDuration(ability=Ability.WISDOM, dc=13))
        apply(store, "hero", EffectKind.RESTRAINED, ConcentrationDuration(concentrator_id="mage"))

        removed = store.clear_combat_conditions("hero")

        assert [c.kind for c in removed] == [
            EffectKind.POISONED, EffectKind.FRIGHTENED, EffectKind.RESTRAINED,
        ]
        assert store.kind_labels("hero") == ["charmed", "blinded", "exhaustion1"]

    def test_unknown_entity(self, store: ConditionStore):
        assert store.clear_combat_conditions("ghost") == []


class TestLocking:

    def test_concurrent_applications_keep_one_instance(self, store: ConditionStore):
        def worker():
            for _ in range(50):
                store.apply("hero", "Hero", EffectKind.POISONED, "Test", UntilRemovedDuration(), 1, 0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.get_conditions("hero")) == 1
