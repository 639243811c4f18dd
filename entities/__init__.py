"""entities package – Combatant and Pattern records."""

from .pattern import Pattern, StatusEffect
from .combatant import ActiveStatus, Combatant
