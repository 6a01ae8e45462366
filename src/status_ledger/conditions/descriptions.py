"""
Reminder text for SRD conditions.

Used only to compose messages for the table. The engine never reads these
strings to make a decision.
"""

from ..models import EffectKind

CONDITION_EFFECTS: dict[EffectKind, list[str]] = {
    EffectKind.BLINDED: [
        "Cannot see, auto-fails checks requiring sight",
        "Attack rolls have disadvantage",
        "Attacks against have advantage",
    ],
    EffectKind.CHARMED: [
        "Cannot attack the charmer",
        "Charmer has advantage on social checks",
    ],
    EffectKind.DEAFENED: ["Cannot hear, auto-fails checks requiring hearing"],
    EffectKind.FRIGHTENED: [
        "Disadvantage on ability checks and attacks while source visible",
        "Cannot willingly move closer to source",
    ],
    EffectKind.GRAPPLED: ["Speed becomes 0", "Ends if grappler incapacitated or forced apart"],
    EffectKind.INCAPACITATED: ["Cannot take actions or reactions"],
    EffectKind.INVISIBLE: [
        "Cannot be seen without special sense",
        "Attack rolls have advantage",
        "Attacks against have disadvantage",
    ],
    EffectKind.PARALYZED: [
        "Incapacitated, cannot move or speak",
        "Auto-fails STR and DEX saves",
        "Attacks have advantage, crits if within 5 feet",
    ],
    EffectKind.PETRIFIED: [
        "Transformed to stone, incapacitated",
        "Resistance to all damage, immune to poison and disease",
        "Auto-fails STR and DEX saves",
    ],
    EffectKind.POISONED: ["Disadvantage on attack rolls and ability checks"],
    EffectKind.PRONE: [
        "Can only crawl (costs extra movement)",
        "Disadvantage on attack rolls",
        "Attacks within 5ft have advantage, beyond have disadvantage",
    ],
    EffectKind.RESTRAINED: [
        "Speed becomes 0",
        "Disadvantage on attack rolls and DEX saves",
        "Attacks against have advantage",
    ],
    EffectKind.STUNNED: [
        "Incapacitated, cannot move, can only speak falteringly",
        "Auto-fails STR and DEX saves",
        "Attacks against have advantage",
    ],
    EffectKind.UNCONSCIOUS: [
        "Incapacitated, cannot move or speak, unaware",
        "Drops held items, falls prone",
        "Auto-fails STR and DEX saves",
        "Attacks have advantage, crits within 5 feet",
    ],
    EffectKind.EXHAUSTION: [
        "Level 1: Disadvantage on ability checks",
        "Level 2: Speed halved",
        "Level 3: Disadvantage on attacks and saves",
        "Level 4: HP maximum halved",
        "Level 5: Speed reduced to 0",
        "Level 6: Death",
    ],
    EffectKind.CONCENTRATING: ["Must maintain concentration, CON save on damage"],
}

# Cumulative: each level adds its line on top of the lower ones.
EXHAUSTION_LEVEL_EFFECTS: list[str] = [
    "Disadvantage on ability checks",
    "Speed halved",
    "Disadvantage on attacks and saves",
    "HP maximum halved",
    "Speed reduced to 0",
    "Death",
]


def exhaustion_effects(level: int) -> str:
    """Bullet list of every exhaustion penalty in force at ``level``."""
    return "\n".join(f"  • {line}" for line in EXHAUSTION_LEVEL_EFFECTS[:max(0, level)])


def condition_effects(kind: EffectKind, exhaustion_level: int | None = None) -> str:
    """Bullet list of reminders for ``kind``."""
    if kind == EffectKind.EXHAUSTION and exhaustion_level:
        return exhaustion_effects(exhaustion_level)
    return "\n".join(f"  • {line}" for line in CONDITION_EFFECTS[kind])
