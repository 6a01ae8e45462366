"""
Data models for the status-ledger condition engine.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from shortuuid import random


class EffectKind(str, Enum):
    """Closed set of condition kinds the engine can track.

    The engine treats every kind as an opaque tag except for two:
    ``EXHAUSTION`` stacks into a single leveled instance, and
    ``CONCENTRATING`` marks a creature whose concentration can be broken.
    """
    BLINDED = "blinded"
    CHARMED = "charmed"
    DEAFENED = "deafened"
    FRIGHTENED = "frightened"
    GRAPPLED = "grappled"
    INCAPACITATED = "incapacitated"
    INVISIBLE = "invisible"
    PARALYZED = "paralyzed"
    PETRIFIED = "petrified"
    POISONED = "poisoned"
    PRONE = "prone"
    RESTRAINED = "restrained"
    STUNNED = "stunned"
    UNCONSCIOUS = "unconscious"
    EXHAUSTION = "exhaustion"
    CONCENTRATING = "concentrating"


class Ability(str, Enum):
    """Ability names carried by save-to-end durations. Never evaluated."""
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"


class SaveTiming(str, Enum):
    """When a save-to-end condition asks for its saving throw."""
    START_OF_TURN = "start_of_turn"
    END_OF_TURN = "end_of_turn"


class RestType(str, Enum):
    SHORT = "short"
    LONG = "long"


MAX_EXHAUSTION_LEVEL = 6


# ---------------------------------------------------------------------------
# Duration policies
# ---------------------------------------------------------------------------
# Exactly one policy is attached to a condition at a time. The ``type`` field
# is the discriminator, so a JSON payload such as {"type": "rounds",
# "rounds": 3} validates straight into the right class.
# ---------------------------------------------------------------------------

class RoundsDuration(BaseModel):
    """Counts down once per end of the affected creature's turn."""
    type: Literal["rounds"] = "rounds"
    rounds: int = Field(ge=1, description="Number of rounds the condition lasts")


class MinutesDuration(BaseModel):
    """Counts down like rounds; one minute is ten rounds."""
    type: Literal["minutes"] = "minutes"
    minutes: int = Field(ge=1, description="Number of minutes the condition lasts")


class UntilSaveDuration(BaseModel):
    """Lasts until the creature succeeds on a saving throw.

    Attributes:
        ability: Ability used for the save (pass-through tag).
        dc: Difficulty class of the save.
        timing: Whether the save is due at the start or the end of the turn.
    """
    type: Literal["until_save"] = "until_save"
    ability: Ability
    dc: int = Field(ge=1, le=30)
    timing: SaveTiming = SaveTiming.END_OF_TURN


class UntilRestDuration(BaseModel):
    """Lasts until the creature finishes a rest of the given scope."""
    type: Literal["until_rest"] = "until_rest"
    rest_type: RestType = RestType.LONG


class UntilRemovedDuration(BaseModel):
    """Lasts until removed explicitly."""
    type: Literal["until_removed"] = "until_removed"


class ConcentrationDuration(BaseModel):
    """Lasts while ``concentrator_id`` keeps concentrating."""
    type: Literal["concentration"] = "concentration"
    concentrator_id: str


Duration = Annotated[
    Union[
        RoundsDuration,
        MinutesDuration,
        UntilSaveDuration,
        UntilRestDuration,
        UntilRemovedDuration,
        ConcentrationDuration,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Condition instances
# ---------------------------------------------------------------------------

class AppliedAt(BaseModel):
    """Round and initiative slot at which a condition was applied."""
    round: int = Field(default=0, ge=0)
    turn_index: int = Field(default=0, ge=0)


def new_condition_id() -> str:
    return f"cond_{random(length=8)}"


class ConditionInstance(BaseModel):
    """One condition applied to one creature.

    Attributes:
        id: Unique identifier for this instance. Refreshing keeps the id.
        kind: The condition kind.
        source: What caused the condition (e.g., "Hold Person", "Poison trap").
        source_entity_id: Who applied it. Informational only.
        duration: The active duration policy.
        remaining: Rounds left for rounds/minutes policies, None otherwise.
        applied_at: When the condition was first applied.
        exhaustion_level: Current level for exhaustion, None for other kinds.
    """
    id: str = Field(default_factory=new_condition_id)
    kind: EffectKind
    source: str = ""
    source_entity_id: str | None = None
    duration: Duration = Field(default_factory=UntilRemovedDuration)
    remaining: int | None = Field(
        default=None,
        ge=0,
        description="Rounds left on a countdown. None for non-countdown durations."
    )
    applied_at: AppliedAt = Field(default_factory=AppliedAt)
    exhaustion_level: int | None = Field(
        default=None,
        ge=1,
        le=MAX_EXHAUSTION_LEVEL,
        description="Exhaustion level (1-6). None for every other kind."
    )

    @property
    def is_countdown(self) -> bool:
        return self.remaining is not None

    def label(self) -> str:
        """Flat label, with exhaustion carrying its level (e.g. ``exhaustion3``)."""
        if self.kind == EffectKind.EXHAUSTION and self.exhaustion_level:
            return f"{self.kind.value}{self.exhaustion_level}"
        return self.kind.value
