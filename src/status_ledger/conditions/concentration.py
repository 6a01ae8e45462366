"""
Concentration cascade.

When a creature's concentration breaks, every condition it sustains ends,
including ones on other creatures (an ally's Haste, an enemy's Hold Person).
This is the only operation that crosses creature boundaries, so it walks
every entry of the store under the store lock.

Whether concentration breaks (the CON save after damage) is decided by the
caller; this module only carries out the consequences.
"""

import logging
from dataclasses import dataclass

from ..models import ConcentrationDuration, EffectKind
from .store import ConditionStore

logger = logging.getLogger("status-ledger.conditions")


@dataclass
class ConcentrationBreak:
    """One condition cut by a concentration break."""
    entity_id: str
    kind: EffectKind


class ConcentrationLinker:
    """Stateless cascade removal over a ConditionStore."""

    @staticmethod
    def break_concentration(store: ConditionStore, concentrator_id: str) -> list[ConcentrationBreak]:
        """End everything ``concentrator_id`` was concentrating on.

        Removes every concentration-linked condition owned by the concentrator
        on any creature, then the concentrator's own ``concentrating`` marker.

        Args:
            store: The session's condition store.
            concentrator_id: The creature whose concentration broke.

        Returns:
            Every removed condition as (entity id, kind), scan order first and
            the marker last. Empty if nothing was linked.
        """
        broken: list[ConcentrationBreak] = []

        with store.lock:
            for entity_id, conditions in store.live_items():
                kept = []
                for instance in conditions:
                    if (
                        isinstance(instance.duration, ConcentrationDuration)
                        and instance.duration.concentrator_id == concentrator_id
                    ):
                        broken.append(ConcentrationBreak(entity_id=entity_id, kind=instance.kind))
                    else:
                        kept.append(instance)
                conditions[:] = kept

            own = store.live(concentrator_id)
            if own:
                for i, instance in enumerate(own):
                    if instance.kind == EffectKind.CONCENTRATING:
                        del own[i]
                        broken.append(
                            ConcentrationBreak(entity_id=concentrator_id, kind=EffectKind.CONCENTRATING)
                        )
                        break

        if broken:
            logger.debug(f"Concentration of {concentrator_id} broke, cut {len(broken)} condition(s)")
        return broken
