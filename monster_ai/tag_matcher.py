"""
tag_matcher.py – Keyword search and scoring over candidate patterns.

Patterns carry free-text intent tags rather than a structured type, so
every lookup in the engine is a substring search over a pattern's name,
description and intent.  Matching is case-sensitive by default, exactly
like the catalog content was authored; pass ``case_sensitive=False`` to
opt into normalised matching.

Lookups:
    find_all        – every pattern matching any keyword
    find_by_tags    – uniform-random pick among find_all
    find_first      – greedy first match (pattern order, then keyword order)
    find_strongest_pattern – highest score, first one wins ties
    pick_random     – uniform pick, None when empty
"""

from __future__ import annotations

import random
from typing import Iterable, Sequence

from entities.pattern import Pattern
from settings import STATUS_EFFECT_SCORE

ATTACK_TAG = "attack"


class TagMatcher:
    """Substring keyword matcher. Swap in a stricter one by subclassing."""

    def __init__(self, case_sensitive: bool = True):
        self.case_sensitive = case_sensitive

    def _norm(self, text: str) -> str:
        return text if self.case_sensitive else text.lower()

    def matches(self, pattern: Pattern, keywords: Iterable[str]) -> bool:
        """True if any keyword occurs in the name, description or intent."""
        fields = (
            self._norm(pattern.name),
            self._norm(pattern.description or ""),
            self._norm(pattern.intent or ""),
        )
        for keyword in keywords:
            kw = self._norm(keyword)
            if any(kw in f for f in fields):
                return True
        return False

    def has_tag(self, pattern: Pattern | None, tag: str) -> bool:
        """True if *tag* occurs in the pattern's intent field."""
        if pattern is None:
            return False
        return self._norm(tag) in self._norm(pattern.intent or "")

    def find_all(self, patterns: Sequence[Pattern],
                 keywords: Sequence[str]) -> list[Pattern]:
        return [p for p in patterns if self.matches(p, keywords)]

    def find_by_tags(self, patterns: Sequence[Pattern], keywords: Sequence[str],
                     rng: random.Random) -> Pattern | None:
        return pick_random(self.find_all(patterns, keywords), rng)

    def find_first(self, patterns: Sequence[Pattern],
                   keywords: Sequence[str]) -> Pattern | None:
        for pattern in patterns:
            if self.matches(pattern, keywords):
                return pattern
        return None


def pattern_score(pattern: Pattern) -> int:
    return (pattern.attack_bonus + pattern.defense_bonus
            + STATUS_EFFECT_SCORE * pattern.status_count)


def find_strongest_pattern(patterns: Sequence[Pattern], attack_only: bool = False,
                           matcher: TagMatcher | None = None) -> Pattern | None:
    """Return the highest-scoring pattern.

    Only a strictly greater score replaces the current best, so the first
    pattern with the maximum score wins.  With *attack_only*, patterns whose
    intent lacks the "attack" tag are skipped.
    """
    matcher = matcher or TagMatcher()
    best: Pattern | None = None
    best_score = 0
    for pattern in patterns:
        if attack_only and not matcher.has_tag(pattern, ATTACK_TAG):
            continue
        score = pattern_score(pattern)
        if best is None or score > best_score:
            best = pattern
            best_score = score
    return best


def pick_random(patterns: Sequence[Pattern], rng: random.Random) -> Pattern | None:
    if not patterns:
        return None
    return patterns[rng.randrange(len(patterns))]
