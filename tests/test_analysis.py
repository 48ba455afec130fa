"""Unit tests for retroblend.analysis."""

import pytest

from retroblend.analysis import SynergyConflictAnalyzer
from retroblend.config import AnalyzerThresholds
from retroblend.features import FeatureVector


def _types(notes):
    return [note.type_name for note in notes]


@pytest.fixture
def analyzer() -> SynergyConflictAnalyzer:
    return SynergyConflictAnalyzer()


def test_same_genre_and_era_synergies(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", year=1985, platforms=("NES",))
    b = metadata_factory("b", year=1986, platforms=("NES", "Arcade"))

    synergies, conflicts = analyzer.analyze(a, b)

    types = _types(synergies)
    assert "Era Match" in types
    assert "Genre Match" in types
    assert "Complexity Match" in types
    assert "Platform Match" in types
    assert "Breadth Without Friction" not in types
    assert conflicts == []
    assert all(s.item_ids == ("a", "b") for s in synergies)


def test_close_years_across_era_boundary_still_match(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", year=1989)
    b = metadata_factory("b", year=1990)
    synergies, _ = analyzer.analyze(a, b)

    era = [s for s in synergies if s.type_name == "Era Match"]
    assert len(era) == 1
    assert era[0].strength == 0.6


def test_free_form_era_category_is_described_verbatim(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", year=1985, era_category="80s")
    b = metadata_factory("b", year=1987, era_category="80s")

    synergies, _ = analyzer.analyze(a, b)

    era = [s for s in synergies if s.type_name == "Era Match"]
    assert era[0].description == "Both games are from the 80s"
    assert era[0].strength == 0.8


def test_shared_mechanic_across_genres_is_complementary(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", mechanic_tags={"Exploration", "Combat"}, primary_genre="Action")
    b = metadata_factory(
        "b",
        mechanic_tags={"exploration", "Turn-Based"},
        primary_genre="RPG",
        genre_affinities={"RPG": 1.0},
    )
    synergies, _ = analyzer.analyze(a, b)

    complementary = [s for s in synergies if s.type_name == "Complementary Mechanic"]
    assert len(complementary) == 1
    assert "Exploration" in complementary[0].description
    assert "Breadth Without Friction" in _types(synergies)


def test_shared_mechanic_within_genre(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", mechanic_tags={"Combat"})
    b = metadata_factory("b", mechanic_tags={"Combat"})
    synergies, _ = analyzer.analyze(a, b)
    assert "Shared Mechanic" in _types(synergies)


def test_opposing_axes_conflict(analyzer, metadata_factory, vector_factory) -> None:
    action = metadata_factory(
        "act",
        name="Blaster",
        feature_vector=vector_factory(complexity=0.1, action_strategy_balance=-0.9, single_multi_balance=-1.0),
    )
    strategy = metadata_factory(
        "strat",
        name="Empire",
        primary_genre="Strategy",
        genre_affinities={"Strategy": 1.0},
        feature_vector=vector_factory(complexity=0.9, action_strategy_balance=0.8, single_multi_balance=0.5),
    )

    _, conflicts = analyzer.analyze(action, strategy)
    by_type = {c.type_name: c for c in conflicts}

    assert by_type["Complexity Mismatch"].severity == pytest.approx(0.8)
    assert "Empire" in by_type["Complexity Mismatch"].resolution_hint
    assert by_type["Gameplay Style Conflict"].severity == pytest.approx(0.85)
    assert by_type["Player Mode Conflict"].severity == pytest.approx(0.75)
    assert "Genre Conflict" in by_type
    assert all(c.resolution_hint for c in conflicts)


def test_exclusive_mechanics_contradict(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", mechanic_tags={"Real-Time"})
    b = metadata_factory("b", mechanic_tags={"turn_based"})

    _, conflicts = analyzer.analyze(a, b)

    contradiction = [c for c in conflicts if c.type_name == "Mechanic Contradiction"]
    assert len(contradiction) == 1
    assert "both modes" in contradiction[0].resolution_hint


def test_item_offering_both_modes_does_not_contradict(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", mechanic_tags={"Real-Time", "Turn-Based"})
    b = metadata_factory("b", mechanic_tags={"Turn-Based"})
    _, conflicts = analyzer.analyze(a, b)
    assert "Mechanic Contradiction" not in _types(conflicts)


def test_era_gap_conflict(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", year=1981)
    b = metadata_factory("b", year=1995)
    _, conflicts = analyzer.analyze(a, b)
    assert "Era Gap" in _types(conflicts)


def test_sparse_metadata_yields_empty_lists(analyzer, metadata_factory) -> None:
    empty = FeatureVector()
    a = metadata_factory(
        "a", year=1970, primary_genre=None, genre_affinities={"Music": 1.0}, feature_vector=empty
    )
    b = metadata_factory(
        "b", year=2005, primary_genre=None, genre_affinities={"Quiz": 1.0},
        feature_vector=FeatureVector(complexity=0.15),
    )
    synergies, conflicts = analyzer.analyze(a, b)

    # Only the mild complexity closeness is notable; unknown eras never match
    assert _types(synergies) == ["Complexity Match", "Breadth Without Friction"]
    assert _types(conflicts) == ["Era Gap"]


def test_analysis_is_deterministic(analyzer, metadata_factory) -> None:
    a = metadata_factory("a", mechanic_tags={"Combat", "Exploration", "Stealth"}, mood_tags={"Tense"})
    b = metadata_factory("b", mechanic_tags={"Stealth", "Exploration"}, mood_tags={"Tense"})
    assert analyzer.analyze(a, b) == analyzer.analyze(a, b)
    shared = [s.description for s in analyzer.analyze_synergies(a, b) if s.type_name == "Shared Mechanic"]
    assert shared == ["Both games feature Exploration", "Both games feature Stealth"]


def test_thresholds_are_configurable(metadata_factory, vector_factory) -> None:
    a = metadata_factory("a", feature_vector=vector_factory(complexity=0.2))
    b = metadata_factory("b", feature_vector=vector_factory(complexity=0.5))

    strict = SynergyConflictAnalyzer(AnalyzerThresholds(complexity_conflict=0.2))
    _, conflicts = strict.analyze(a, b)
    assert "Complexity Mismatch" in _types(conflicts)
