"""Unit tests for retroblend.aggregator."""

import json

import pytest

from retroblend.aggregator import BlendAggregator, dominant_genre
from retroblend.analysis import Synergy
from retroblend.pathfinder import BlendPath


def _path(items, **kwargs) -> BlendPath:
    return BlendPath(item_ids=[m.id for m in items], total_compatibility=1.0, **kwargs)


@pytest.fixture
def aggregator() -> BlendAggregator:
    return BlendAggregator()


def test_three_distinct_genres_sum_to_one(aggregator, metadata_factory) -> None:
    items = [
        metadata_factory("a", primary_genre="Action", genre_affinities={"Action": 1.0}),
        metadata_factory("b", primary_genre="Puzzle", genre_affinities={"Puzzle": 1.0}),
        metadata_factory("c", primary_genre="RPG", genre_affinities={"RPG": 1.0}),
    ]
    result = aggregator.aggregate(items, _path(items))

    assert set(result.genres) == {"Action", "Puzzle", "RPG"}
    assert sum(result.genres.values()) == pytest.approx(1.0, abs=1e-6)


def test_primary_genre_counts_when_affinities_absent(aggregator, metadata_factory) -> None:
    items = [
        metadata_factory("a", primary_genre="Action", genre_affinities={}),
        metadata_factory("b", primary_genre="Strategy", genre_affinities={"Strategy": 0.5, "Action": 0.5}),
    ]
    genres = aggregator.merge_genres(items)
    assert genres == pytest.approx({"Action": 0.75, "Strategy": 0.25})
    assert list(genres) == ["Action", "Strategy"]


def test_zero_weight_genres_give_empty_mapping(aggregator, metadata_factory) -> None:
    items = [
        metadata_factory("a", primary_genre=None, genre_affinities={}),
        metadata_factory("b", primary_genre=None, genre_affinities={"Action": 0.0}),
    ]
    assert aggregator.merge_genres(items) == {}
    result = aggregator.aggregate(items, _path(items))
    assert result.genres == {}
    assert result.description.startswith("A experience blending 2 classic games")


def test_means_and_mechanic_union(aggregator, metadata_factory, vector_factory) -> None:
    items = [
        metadata_factory("a", mechanic_tags={"Combat"}, feature_vector=vector_factory(
            complexity=0.2, action_strategy_balance=-1.0, single_multi_balance=0.5)),
        metadata_factory("b", mechanic_tags={"Combat", "Stealth"}, feature_vector=vector_factory(
            complexity=0.6, action_strategy_balance=0.0, single_multi_balance=-0.5)),
    ]
    result = aggregator.aggregate(items, _path(items))

    assert result.mechanics == {"Combat", "Stealth"}
    assert result.complexity_score == pytest.approx(0.4)
    assert result.action_strategy_balance == pytest.approx(-0.5)
    assert result.single_multi_balance == pytest.approx(0.0)


def test_blend_names(aggregator, metadata_factory) -> None:
    two = [metadata_factory("a", name="Tetris"), metadata_factory("b", name="Doom")]
    four = two + [metadata_factory("c", name="Myst"), metadata_factory("d", name="Pong")]

    assert aggregator.generate_name(two) == "Tetris × Doom"
    assert aggregator.generate_name(four) == "Tetris meets Pong (+2)"


def test_description_names_dominant_genre_and_year_span(aggregator, metadata_factory) -> None:
    items = [
        metadata_factory("a", year=1991, primary_genre="RPG", genre_affinities={"RPG": 1.0}),
        metadata_factory("b", year=1984, primary_genre="RPG", genre_affinities={"RPG": 1.0}),
        metadata_factory("c", year=1988, primary_genre="Puzzle", genre_affinities={"Puzzle": 1.0}),
    ]
    result = aggregator.aggregate(items, _path(items))
    assert result.description == (
        "A rpg experience blending 3 classic games from 1984-1991, "
        "combining the best elements of each era"
    )


def test_dominant_genre_tie_goes_to_first_seen() -> None:
    assert dominant_genre({"Puzzle": 0.5, "Action": 0.5}) == "Puzzle"
    assert dominant_genre({}) is None


def test_art_styles_from_era_and_genre(aggregator, metadata_factory) -> None:
    items = [
        metadata_factory("a", year=1983, primary_genre="Platform"),
        metadata_factory("b", year=1990, primary_genre="RPG"),
        metadata_factory("c", year=1994, primary_genre="Platform"),
        metadata_factory("d", year=1984, art_styles=("Vector graphics",)),
    ]
    assert aggregator.determine_art_styles(items) == [
        "8-bit pixel art",
        "Limited color palette",
        "Side-scrolling perspective",
        "16-bit pixel art",
        "Vibrant colors",
        "Top-down or isometric view",
        "High-color pixel art",
        "Detailed sprites",
        "Vector graphics",
    ]


def test_recommendations_follow_genres_mechanics_and_complexity(aggregator) -> None:
    recs = aggregator.generate_recommendations(
        {"RPG": 0.6, "Puzzle": 0.4},
        {"Exploration", "real_time", "Turn-Based"},
        0.8,
    )
    assert recs == [
        "Character customization system",
        "Quest system with branching paths",
        "Environmental puzzles integrated into levels",
        "Hidden areas and secrets to discover",
        "Metroidvania-style ability gating",
        "In-depth tutorial system",
        "Codex or journal for tracking information",
        "Hint system for stuck players",
        "Pause-and-plan tactical mode",
    ]


def test_low_complexity_recommendations(aggregator) -> None:
    recs = aggregator.generate_recommendations({"Action": 0.3}, {"High Score"}, 0.2)
    assert "Pick-up-and-play design" in recs
    assert "Online leaderboards" in recs
    assert "Responsive combat with combo system" not in recs


def test_result_serializes(aggregator, metadata_factory) -> None:
    items = [metadata_factory("a", mechanic_tags={"Combat"}), metadata_factory("b")]
    synergy = Synergy("Genre Match", "Both games share Action genre expertise", 0.8, ("a", "b"))
    result = aggregator.aggregate(items, _path(items, synergies=[synergy]))

    data = json.loads(result.to_json())
    assert data["name"] == "Game a × Game b"
    assert data["items"] == ["a", "b"]
    assert data["synergies"][0]["type"] == "Genre Match"
    assert data["path"]["items"] == ["a", "b"]

    config = result.to_generation_config()
    assert config["genre_weights"] == {"Action": 1.0}
    assert config["mechanics"] == ["Combat"]
