"""
Synergy / Conflict Analyzer
===========================

Produces qualitative compatibility notes for a pair of catalog items:
- Synergies: complementary or shared traits (era, genre, mechanics,
  complexity, platforms, mood)
- Conflicts: contradictory traits, each with a suggested resolution

Analysis is deterministic and never raises; sparse metadata simply yields
fewer notes.
"""

from typing import List, Dict, Tuple, FrozenSet
from dataclasses import dataclass

from .features import Metadata, normalize_tag
from .config import (
    AnalyzerThresholds,
    DEFAULT_ANALYZER_THRESHOLDS,
    CONFLICTING_MECHANICS,
    CONFLICTING_GENRES,
    ERA_LABELS,
    UNKNOWN_ERA,
)


@dataclass(frozen=True)
class Synergy:
    """A complementary trait shared by two items."""
    type_name: str
    description: str
    strength: float
    item_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "type": self.type_name,
            "description": self.description,
            "strength": round(self.strength, 3),
            "items": list(self.item_ids),
        }


@dataclass(frozen=True)
class Conflict:
    """A contradictory trait between two items, with a way to reconcile it."""
    type_name: str
    description: str
    severity: float
    resolution_hint: str
    item_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "type": self.type_name,
            "description": self.description,
            "severity": round(self.severity, 3),
            "resolution": self.resolution_hint,
            "items": list(self.item_ids),
        }


class SynergyConflictAnalyzer:
    """
    Annotates a pair of items with synergies and conflicts.

    Focuses on:
    - Design breadth: different genres that still share mechanics or pacing
    - Friction: opposing play-style axes and mutually exclusive mechanics
    - Actionable output: every conflict carries a resolution hint
    """

    def __init__(self, thresholds: AnalyzerThresholds = DEFAULT_ANALYZER_THRESHOLDS):
        self.thresholds = thresholds

    def analyze(self, m1: Metadata, m2: Metadata) -> Tuple[List[Synergy], List[Conflict]]:
        """
        Analyze one pair of items.

        Returns:
            Tuple of (synergies, conflicts)
        """
        return self.analyze_synergies(m1, m2), self.analyze_conflicts(m1, m2)

    # ------------------------------------------------------------------
    # Synergies
    # ------------------------------------------------------------------
    def analyze_synergies(self, m1: Metadata, m2: Metadata) -> List[Synergy]:
        pair = (m1.id, m2.id)
        synergies: List[Synergy] = []
        fv1, fv2 = m1.feature_vector, m2.feature_vector
        genres_differ = not self._same_genre(m1, m2)

        # 1. Era
        year_diff = abs(m1.year - m2.year)
        if m1.era_category == m2.era_category and m1.era_category != UNKNOWN_ERA:
            era_label = ERA_LABELS.get(m1.era_category, m1.era_category)
            synergies.append(Synergy(
                type_name="Era Match",
                description=f"Both games are from the {era_label}",
                strength=0.8,
                item_ids=pair,
            ))
        elif year_diff <= self.thresholds.close_years:
            synergies.append(Synergy(
                type_name="Era Match",
                description="Games from a similar era share technical constraints",
                strength=0.6,
                item_ids=pair,
            ))

        # 2. Genre
        if m1.primary_genre and not genres_differ:
            synergies.append(Synergy(
                type_name="Genre Match",
                description=f"Both games share {m1.primary_genre} genre expertise",
                strength=0.8,
                item_ids=pair,
            ))

        # 3. Mechanics
        for tag in self._shared_tags(m1.mechanic_tags, m2.mechanic_tags):
            if genres_differ and m1.primary_genre and m2.primary_genre:
                synergies.append(Synergy(
                    type_name="Complementary Mechanic",
                    description=(
                        f"Both feature {tag}, approached from "
                        f"{m1.primary_genre} and {m2.primary_genre} angles"
                    ),
                    strength=0.7,
                    item_ids=pair,
                ))
            else:
                synergies.append(Synergy(
                    type_name="Shared Mechanic",
                    description=f"Both games feature {tag}",
                    strength=0.6,
                    item_ids=pair,
                ))

        # 4. Complexity and pacing
        complexity_diff = abs(fv1.complexity - fv2.complexity)
        balance_diff = abs(fv1.action_strategy_balance - fv2.action_strategy_balance)
        if complexity_diff < self.thresholds.complexity_match:
            synergies.append(Synergy(
                type_name="Complexity Match",
                description="Similar complexity levels ensure a consistent experience",
                strength=0.7,
                item_ids=pair,
            ))
            if genres_differ and balance_diff < self.thresholds.balance_match:
                synergies.append(Synergy(
                    type_name="Breadth Without Friction",
                    description=(
                        "Different genres with matching complexity and pacing "
                        "widen the design without clashing"
                    ),
                    strength=0.75,
                    item_ids=pair,
                ))

        # 5. Platforms
        shared_platforms = [p for p in m1.platforms if p in m2.platforms]
        if shared_platforms:
            synergies.append(Synergy(
                type_name="Platform Match",
                description=f"Both released on: {', '.join(shared_platforms)}",
                strength=0.5,
                item_ids=pair,
            ))

        # 6. Mood
        shared_moods = self._shared_tags(m1.mood_tags, m2.mood_tags)
        if shared_moods:
            synergies.append(Synergy(
                type_name="Shared Mood",
                description=f"Both feel {', '.join(shared_moods).lower()}",
                strength=0.4,
                item_ids=pair,
            ))

        return synergies

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------
    def analyze_conflicts(self, m1: Metadata, m2: Metadata) -> List[Conflict]:
        pair = (m1.id, m2.id)
        conflicts: List[Conflict] = []
        fv1, fv2 = m1.feature_vector, m2.feature_vector

        # 1. Complexity mismatch
        complexity_diff = abs(fv1.complexity - fv2.complexity)
        if complexity_diff > self.thresholds.complexity_conflict:
            more, less = (m1, m2) if fv1.complexity >= fv2.complexity else (m2, m1)
            conflicts.append(Conflict(
                type_name="Complexity Mismatch",
                description=f"{more.name} is much more complex than {less.name}",
                severity=complexity_diff,
                resolution_hint=(
                    f"Favor the higher-complexity system from {more.name} "
                    "and ramp into it with a tutorial layer or difficulty modes"
                ),
                item_ids=pair,
            ))

        # 2. Action vs strategy
        balance_diff = abs(fv1.action_strategy_balance - fv2.action_strategy_balance)
        if balance_diff > self.thresholds.action_strategy_conflict:
            conflicts.append(Conflict(
                type_name="Gameplay Style Conflict",
                description="One game is action-focused while the other is strategy-focused",
                severity=balance_diff / 2.0,
                resolution_hint=(
                    "Create distinct gameplay modes or blend them into "
                    "real-time strategy elements"
                ),
                item_ids=pair,
            ))

        # 3. Single vs multiplayer
        players_diff = abs(fv1.single_multi_balance - fv2.single_multi_balance)
        if players_diff > self.thresholds.single_multi_conflict:
            conflicts.append(Conflict(
                type_name="Player Mode Conflict",
                description="One game is built for solo play, the other for multiple players",
                severity=players_diff / 2.0,
                resolution_hint="Offer both a single-player campaign and a versus or co-op mode",
                item_ids=pair,
            ))

        # 4. Mutually exclusive mechanics
        tags1 = {normalize_tag(t) for t in m1.mechanic_tags}
        tags2 = {normalize_tag(t) for t in m2.mechanic_tags}
        for mech_a, mech_b, hint in CONFLICTING_MECHANICS:
            key_a, key_b = normalize_tag(mech_a), normalize_tag(mech_b)
            if (
                self._dominates(tags1, key_a, key_b) and self._dominates(tags2, key_b, key_a)
            ) or (
                self._dominates(tags1, key_b, key_a) and self._dominates(tags2, key_a, key_b)
            ):
                conflicts.append(Conflict(
                    type_name="Mechanic Contradiction",
                    description=f"{mech_a} and {mech_b} pull the core loop in opposite directions",
                    severity=0.7,
                    resolution_hint=hint,
                    item_ids=pair,
                ))

        # 5. Era gap
        if abs(m1.year - m2.year) > self.thresholds.era_gap_years:
            conflicts.append(Conflict(
                type_name="Era Gap",
                description="Large era gap may create inconsistent expectations",
                severity=0.4,
                resolution_hint="Use modern quality-of-life features while preserving retro charm",
                item_ids=pair,
            ))

        # 6. Genre expectations
        for genre_a, genre_b in CONFLICTING_GENRES:
            if {m1.primary_genre, m2.primary_genre} == {genre_a, genre_b}:
                conflicts.append(Conflict(
                    type_name="Genre Conflict",
                    description=f"{genre_a} and {genre_b} have very different player expectations",
                    severity=0.6,
                    resolution_hint="Clearly communicate the genre blend in the game description",
                    item_ids=pair,
                ))

        return conflicts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _same_genre(m1: Metadata, m2: Metadata) -> bool:
        if m1.primary_genre or m2.primary_genre:
            return m1.primary_genre == m2.primary_genre
        return set(m1.genre_affinities) == set(m2.genre_affinities)

    @staticmethod
    def _shared_tags(tags1: FrozenSet[str], tags2: FrozenSet[str]) -> List[str]:
        """Tags present on both sides, compared loosely, sorted for stable output."""
        keys2 = {normalize_tag(t) for t in tags2}
        return sorted({t for t in tags1 if normalize_tag(t) in keys2})

    @staticmethod
    def _dominates(tags: set, tag: str, rival: str) -> bool:
        """The item commits to ``tag`` without also offering ``rival``."""
        return tag in tags and rival not in tags
