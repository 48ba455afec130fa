"""Unit tests for retroblend.blender."""

import threading
from pathlib import Path

import pytest

from retroblend.blender import BackgroundBlender, BlendEngine, blend_from_catalog
from retroblend.errors import InsufficientSelectionError, UnknownItemError
from retroblend.pathfinder import STRATEGY_EXHAUSTIVE, STRATEGY_INPUT_ORDER

BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "retroblend" / "data" / "catalog.json"


@pytest.fixture
def engine(bundled_store) -> BlendEngine:
    return BlendEngine(bundled_store)


def test_blend_produces_full_result(engine) -> None:
    result = engine.blend(["1004", "1005", "1007"])

    assert result.item_ids == ["1004", "1005", "1007"]
    assert result.name == "Super Mario Bros. meets Final Fantasy (+1)"
    assert sorted(result.blend_path.item_ids) == ["1004", "1005", "1007"]
    assert result.blend_path.strategy == STRATEGY_EXHAUSTIVE
    assert sum(result.genres.values()) == pytest.approx(1.0)
    assert result.art_styles
    assert result.recommended_features
    assert result.synergies == result.blend_path.synergies


def test_blend_is_idempotent(engine) -> None:
    ids = ["1001", "1010", "1013", "1017"]
    assert engine.blend(ids).to_json() == engine.blend(ids).to_json()


def test_preserve_order_walks_selection(engine) -> None:
    result = engine.blend(["1013", "1001", "1018"], preserve_order=True)
    assert result.blend_path.item_ids == ["1013", "1001", "1018"]
    assert result.blend_path.strategy == STRATEGY_INPUT_ORDER


def test_blend_errors_surface(engine) -> None:
    with pytest.raises(InsufficientSelectionError):
        engine.blend(["1001"])
    with pytest.raises(UnknownItemError):
        engine.blend(["1001", "9999"])


def test_find_similar_ranks_catalog(engine, bundled_store) -> None:
    results = engine.find_similar("1004", limit=3)

    assert len(results) == 3
    assert "1004" not in [item_id for item_id, _ in results]
    assert results[0][1] >= results[1][1] >= results[2][1]
    with pytest.raises(UnknownItemError):
        engine.find_similar("9999")


def test_background_blender_delivers_result(engine) -> None:
    done = threading.Event()
    received = []

    with BackgroundBlender(engine) as worker:
        future = worker.submit(
            ["1002", "1011"],
            on_complete=lambda result: (received.append(result), done.set()),
        )
        assert done.wait(timeout=10)

    assert future.result().name == "Donkey Kong × Sonic the Hedgehog"
    assert received[0].to_dict() == future.result().to_dict()


def test_background_blender_reports_errors(engine) -> None:
    done = threading.Event()
    errors = []
    completed = []

    with BackgroundBlender(engine) as worker:
        worker.submit(
            ["1002"],
            on_complete=completed.append,
            on_error=lambda error: (errors.append(error), done.set()),
        )
        assert done.wait(timeout=10)

    assert completed == []
    assert isinstance(errors[0], InsufficientSelectionError)


def test_blend_from_catalog_returns_dict() -> None:
    data = blend_from_catalog(["1003", "1017"], catalog_path=BUNDLED_CATALOG)
    assert data["name"] == "Gradius × Doom"
    assert data["items"] == ["1003", "1017"]
