"""
status-ledger MCP server.

Exposes the condition engine as FastMCP tools so a DM assistant can apply
conditions, run turn phases, resolve saves, handle rests and break
concentration for any number of independent game sessions.
"""

import logging
from typing import Annotated, Literal

from fastmcp import FastMCP
from pydantic import Field, TypeAdapter, ValidationError

from .conditions.concentration import ConcentrationBreak
from .conditions.durations import describe_duration
from .conditions.turns import TurnCheckResult
from .config import load_config
from .logutils import configure_logging
from .models import ConditionInstance, Duration, EffectKind
from .sessions import SessionRegistry
from .tracker import ConditionTracker

logger = logging.getLogger("status-ledger")

config = load_config()
configure_logging(config.log_level)

registry = SessionRegistry(near_expiry_rounds=config.near_expiry_rounds)
logger.debug("✅ Session registry initialized")

mcp = FastMCP(
    name="status-ledger"
)

_duration_adapter = TypeAdapter(Duration)

VALID_CONDITIONS = ", ".join(k.value for k in EffectKind)


def _tracker(session_id: str | None) -> ConditionTracker:
    return registry.get(session_id or config.default_session)


def _parse_condition(value: str) -> EffectKind | None:
    try:
        return EffectKind(value.strip().lower())
    except ValueError:
        return None


def _parse_duration(value: str) -> Duration:
    """Validate a JSON duration such as ``{"type": "rounds", "rounds": 3}``."""
    return _duration_adapter.validate_json(value)


# ----------------------------------------------------------------------
# Formatting helpers
# ----------------------------------------------------------------------

def _format_condition(instance: ConditionInstance) -> str:
    """One status line for a condition instance."""
    details = describe_duration(instance.duration)
    if instance.remaining is not None:
        details += f", {instance.remaining} round{'s' if instance.remaining != 1 else ''} left"
    source = f" from {instance.source}" if instance.source else ""
    return f"- **{instance.label()}**{source} ({details}) [ID: {instance.id}]"


def _format_turn_check(title: str, result: TurnCheckResult) -> str:
    lines = [f"**{title}**"]
    if result.expired:
        lines.append("Expired: " + ", ".join(e.label() for e in result.expired))
    for requirement in result.save_required:
        lines.append(
            f"🎲 Save needed: DC {requirement.dc} {requirement.ability.value} "
            f"to end {requirement.instance.kind.value} [ID: {requirement.instance.id}]"
        )
    lines.extend(f"  > {reminder}" for reminder in result.reminders)
    if len(lines) == 1:
        lines.append("No conditions need attention.")
    return "\n".join(lines)


def _format_breaks(concentrator_id: str, broken: list[ConcentrationBreak]) -> str:
    if not broken:
        return f"{concentrator_id} was not sustaining any conditions."
    lines = [f"**Concentration broken:** {concentrator_id}"]
    lines.extend(f"- {b.entity_id}: {b.kind.value} ended" for b in broken)
    return "\n".join(lines)


# ----------------------------------------------------------------------
# Tool logic (testable without the MCP wrapper)
# ----------------------------------------------------------------------

def _apply_condition_logic(
    tracker: ConditionTracker,
    entity_id: str,
    entity_name: str,
    condition: str,
    source: str,
    duration: str,
    current_round: int,
    turn_index: int,
    source_entity_id: str | None = None,
    exhaustion_level: int | None = None,
) -> str:
    """Core logic for apply_condition."""
    kind = _parse_condition(condition)
    if kind is None:
        return f"❌ Unknown condition '{condition}'. Valid conditions: {VALID_CONDITIONS}"

    try:
        parsed = _parse_duration(duration)
    except ValidationError as e:
        return f"❌ Invalid duration: {e.errors()[0]['msg']}"

    try:
        result = tracker.apply_effect(
            entity_id,
            entity_name,
            kind,
            source,
            parsed,
            current_round,
            turn_index,
            source_entity_id=source_entity_id,
            exhaustion_level=exhaustion_level,
        )
    except ValueError as e:
        return f"❌ {e}"

    icon = "💀" if result.is_fatal else "✅"
    return f"{icon} {result.message}\nCondition ID: {result.instance.id}"


def _remove_condition_logic(
    tracker: ConditionTracker,
    entity_id: str,
    entity_name: str,
    condition_or_id: str,
) -> str:
    """Core logic for remove_condition. Accepts a condition name or an instance ID."""
    kind = _parse_condition(condition_or_id)
    result = tracker.remove_effect(entity_id, entity_name, kind or condition_or_id)
    return f"{'✅' if result.removed else 'ℹ️'} {result.message}"


def _resolve_save_logic(
    tracker: ConditionTracker,
    entity_id: str,
    entity_name: str,
    condition_id: str,
) -> str:
    """Core logic for resolve_save."""
    if tracker.get_effect(entity_id, condition_id) is None:
        return f"ℹ️ {entity_name} has no condition with ID {condition_id}."
    result = tracker.handle_successful_save(entity_id, entity_name, condition_id)
    return f"{'✅' if result.removed else 'ℹ️'} {result.message}"


def _list_conditions_logic(tracker: ConditionTracker, entity_id: str) -> str:
    conditions = tracker.list_effects(entity_id)
    if not conditions:
        return f"{entity_id} has no active conditions."
    lines = [f"**Conditions on {entity_id}:**"]
    lines.extend(_format_condition(c) for c in conditions)
    return "\n".join(lines)


def _start_of_turn_logic(
    tracker: ConditionTracker,
    entity_id: str,
    entity_name: str,
    current_round: int,
) -> str:
    result = tracker.process_start_of_turn(entity_id, entity_name, current_round)
    return _format_turn_check(f"Start of {entity_name}'s turn (round {current_round})", result)


def _end_of_turn_logic(
    tracker: ConditionTracker,
    entity_id: str,
    entity_name: str,
    current_round: int,
) -> str:
    result = tracker.process_end_of_turn(entity_id, entity_name, current_round)
    return _format_turn_check(f"End of {entity_name}'s turn (round {current_round})", result)


def _rest_logic(tracker: ConditionTracker, entity_id: str, entity_name: str, rest_type: str) -> str:
    changes = tracker.clear_on_rest(entity_id, entity_name, rest_type)
    if not changes:
        return f"✅ {entity_name} finished a {rest_type} rest. No conditions changed."
    return f"✅ {entity_name} finished a {rest_type} rest: {'; '.join(changes)}"


def _break_concentration_logic(tracker: ConditionTracker, concentrator_id: str) -> str:
    """Core logic for break_concentration."""
    return _format_breaks(concentrator_id, tracker.break_concentration(concentrator_id))


def _overview_logic(tracker: ConditionTracker) -> str:
    snapshot = tracker.snapshot_all()
    populated = {entity_id: conds for entity_id, conds in snapshot.items() if conds}
    if not populated:
        return "No creature has active conditions."
    lines = ["**Active conditions:**"]
    for entity_id, conditions in populated.items():
        lines.append(f"{entity_id}: {', '.join(c.label() for c in conditions)}")
    return "\n".join(lines)


def _end_combat_logic(tracker: ConditionTracker, entity_id: str) -> str:
    removed = tracker.clear_combat_conditions(entity_id)
    if not removed:
        return f"{entity_id} had no combat-only conditions."
    return f"✅ Cleared from {entity_id}: {', '.join(c.label() for c in removed)}"


# ----------------------------------------------------------------------
# MCP tools
# ----------------------------------------------------------------------

SessionId = Annotated[
    str | None,
    Field(description="Game session ID. Omit to use the default session."),
]


@mcp.tool
def apply_condition(
    entity_id: Annotated[str, Field(description="ID of the creature receiving the condition")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    condition: Annotated[str, Field(description=f"Condition name: {VALID_CONDITIONS}")],
    source: Annotated[str, Field(description="What caused it (e.g., 'Hold Person', 'Poison trap')")],
    duration: Annotated[str, Field(description=(
        "JSON duration, one of: {\"type\":\"rounds\",\"rounds\":3}, "
        "{\"type\":\"minutes\",\"minutes\":1}, "
        "{\"type\":\"until_save\",\"ability\":\"wisdom\",\"dc\":13,\"timing\":\"end_of_turn\"}, "
        "{\"type\":\"until_rest\",\"rest_type\":\"long\"}, {\"type\":\"until_removed\"}, "
        "{\"type\":\"concentration\",\"concentrator_id\":\"caster-id\"}"
    ))] = '{"type": "until_removed"}',
    current_round: Annotated[int, Field(description="Current combat round", ge=0)] = 0,
    turn_index: Annotated[int, Field(description="Current initiative index", ge=0)] = 0,
    source_entity_id: Annotated[str | None, Field(description="ID of the creature that applied it")] = None,
    exhaustion_level: Annotated[int | None, Field(description="Exhaustion levels gained (default 1)", ge=1, le=6)] = None,
    session_id: SessionId = None,
) -> str:
    """Apply a condition to a creature.

    Re-applying a condition refreshes its duration and source instead of
    stacking. Exhaustion stacks up to level 6, which is fatal.
    """
    return _apply_condition_logic(
        _tracker(session_id), entity_id, entity_name, condition, source, duration,
        current_round, turn_index, source_entity_id, exhaustion_level,
    )


@mcp.tool
def remove_condition(
    entity_id: Annotated[str, Field(description="ID of the creature")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    condition_or_id: Annotated[str, Field(description="Condition name or condition ID")],
    session_id: SessionId = None,
) -> str:
    """Remove a condition by name or ID. Exhaustion is lowered one level at a time."""
    return _remove_condition_logic(_tracker(session_id), entity_id, entity_name, condition_or_id)


@mcp.tool
def resolve_save(
    entity_id: Annotated[str, Field(description="ID of the creature that saved")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    condition_id: Annotated[str, Field(description="ID of the condition the save was against")],
    session_id: SessionId = None,
) -> str:
    """Record a successful saving throw, ending the condition it was made against."""
    return _resolve_save_logic(_tracker(session_id), entity_id, entity_name, condition_id)


@mcp.tool
def list_conditions(
    entity_id: Annotated[str, Field(description="ID of the creature")],
    session_id: SessionId = None,
) -> str:
    """List a creature's active conditions with durations and IDs."""
    return _list_conditions_logic(_tracker(session_id), entity_id)


@mcp.tool
def start_of_turn(
    entity_id: Annotated[str, Field(description="ID of the creature whose turn starts")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    current_round: Annotated[int, Field(description="Current combat round", ge=0)],
    session_id: SessionId = None,
) -> str:
    """Report saves due at the start of a turn and conditions about to end."""
    return _start_of_turn_logic(_tracker(session_id), entity_id, entity_name, current_round)


@mcp.tool
def end_of_turn(
    entity_id: Annotated[str, Field(description="ID of the creature whose turn ends")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    current_round: Annotated[int, Field(description="Current combat round", ge=0)],
    session_id: SessionId = None,
) -> str:
    """Tick timed conditions, expire finished ones and report end-of-turn saves."""
    return _end_of_turn_logic(_tracker(session_id), entity_id, entity_name, current_round)


@mcp.tool
def rest_conditions(
    entity_id: Annotated[str, Field(description="ID of the creature that rested")],
    entity_name: Annotated[str, Field(description="Display name of the creature")],
    rest_type: Annotated[Literal["short", "long"], Field(description="Rest type")],
    session_id: SessionId = None,
) -> str:
    """Clear rest-bound conditions. A long rest also lowers exhaustion by one level."""
    return _rest_logic(_tracker(session_id), entity_id, entity_name, rest_type)


@mcp.tool
def break_concentration(
    concentrator_id: Annotated[str, Field(description="ID of the creature whose concentration broke")],
    session_id: SessionId = None,
) -> str:
    """End every condition sustained by a creature's concentration, on any creature."""
    return _break_concentration_logic(_tracker(session_id), concentrator_id)


@mcp.tool
def end_combat_conditions(
    entity_id: Annotated[str, Field(description="ID of the creature")],
    session_id: SessionId = None,
) -> str:
    """Drop conditions that only matter in combat. Rest-bound, permanent and exhaustion stay."""
    return _end_combat_logic(_tracker(session_id), entity_id)


@mcp.tool
def condition_overview(session_id: SessionId = None) -> str:
    """Summarize every creature's conditions in a session."""
    return _overview_logic(_tracker(session_id))


@mcp.tool
def close_session(
    session_id: Annotated[str, Field(description="Game session ID to discard")],
) -> str:
    """Discard all condition state for a session."""
    if registry.close(session_id):
        return f"✅ Session '{session_id}' closed."
    return f"ℹ️ No session '{session_id}' was open."


logger.debug("✅ All tools registered. status-ledger server ready 🎲")


def main() -> None:
    """Main entry point for the status-ledger MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
