"""errors.py – Exceptions raised inside the monster AI engine."""


class MonsterAIError(Exception):
    """Base class for every monster AI failure."""


class InvalidInputError(MonsterAIError):
    """A decision was requested without a valid self or opponent."""


class CatalogUnavailableError(MonsterAIError):
    """The pattern catalog could not answer a query."""
