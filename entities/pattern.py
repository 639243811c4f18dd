"""
pattern.py – Catalog-defined combat actions a monster can choose from.

A Pattern is an immutable value: the catalog owns it, the AI engine only
reads it, and the combat resolver applies it.  Free-text ``intent`` holds
the tags ("attack strike", "defend heal", "opening special", …) that the
decision tables search with substring matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from settings import STATUS_EFFECT_SCORE


@dataclass(frozen=True)
class StatusEffect:
    """One status effect a pattern applies to its target."""

    kind: str
    magnitude: int = 1
    duration: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "StatusEffect":
        return cls(
            kind=str(data.get("kind", "")),
            magnitude=int(data.get("magnitude", 1)),
            duration=int(data.get("duration", 1)),
        )


@dataclass(frozen=True)
class Pattern:
    """A monster combat action as stored in the pattern catalog."""

    id: int
    name: str
    description: str = ""
    intent: str = ""                   # free-text intent tags
    attack_bonus: int = 0
    defense_bonus: int = 0
    additional_damage: int = 0
    status_effects: tuple[StatusEffect, ...] = field(default_factory=tuple)
    ignore_defense: bool = False
    attack_count: int = 1
    priority: int = 1
    monster_type: str = ""

    @property
    def status_count(self) -> int:
        return len(self.status_effects)

    def total_power(self) -> int:
        """Rough strength estimate, used for reporting only."""
        power = self.attack_bonus + self.additional_damage
        power += self.status_count * STATUS_EFFECT_SCORE
        power *= self.attack_count
        if self.ignore_defense:
            power = int(power * 1.5)
        return power

    # ── Serialisation ─────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict) -> "Pattern":
        effects = tuple(
            StatusEffect.from_dict(e) for e in data.get("status_effects", ())
        )
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description", "")),
            intent=str(data.get("intent", "")),
            attack_bonus=int(data.get("attack_bonus", 0)),
            defense_bonus=int(data.get("defense_bonus", 0)),
            additional_damage=int(data.get("additional_damage", 0)),
            status_effects=effects,
            ignore_defense=bool(data.get("ignore_defense", False)),
            attack_count=int(data.get("attack_count", 1)),
            priority=int(data.get("priority", 1)),
            monster_type=str(data.get("monster_type", "")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "intent": self.intent,
            "attack_bonus": self.attack_bonus,
            "defense_bonus": self.defense_bonus,
            "additional_damage": self.additional_damage,
            "status_effects": [
                {"kind": e.kind, "magnitude": e.magnitude, "duration": e.duration}
                for e in self.status_effects
            ],
            "ignore_defense": self.ignore_defense,
            "attack_count": self.attack_count,
            "priority": self.priority,
            "monster_type": self.monster_type,
        }

    def __str__(self) -> str:
        return f"{self.name} [{self.intent}] atk+{self.attack_bonus} def+{self.defense_bonus}"
