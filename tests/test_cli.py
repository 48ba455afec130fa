"""Unit tests for retroblend.cli."""

import json
from pathlib import Path

import pytest

from retroblend.cli import main

CATALOG = str(Path(__file__).resolve().parent.parent / "retroblend" / "data" / "catalog.json")


def test_blend_json_output(capsys) -> None:
    exit_code = main(["blend", "1004", "1011", "--catalog", CATALOG])

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["name"] == "Super Mario Bros. × Sonic the Hedgehog"
    assert set(data["path"]["items"]) == {"1004", "1011"}


def test_blend_config_output(capsys) -> None:
    assert main(["blend", "1007", "1018", "--catalog", CATALOG, "--format", "config"]) == 0
    config = json.loads(capsys.readouterr().out)
    assert set(config) == {
        "title", "genre_weights", "mechanics", "art_styles", "complexity", "recommended_features",
    }
    assert config["genre_weights"] == {"RPG": 1.0}


def test_blend_simple_output_with_keep_order(capsys) -> None:
    assert main(["blend", "1013", "1001", "1018", "--catalog", CATALOG,
                 "--format", "simple", "--keep-order"]) == 0
    out = capsys.readouterr().out
    assert "Blend path (input_order): 1013 -> 1001 -> 1018" in out
    assert "Sid Meier's Civilization meets Chrono Trigger (+1)" in out


def test_blend_writes_output_file(tmp_path, capsys) -> None:
    target = tmp_path / "blend.json"
    assert main(["blend", "1001", "1002", "--catalog", CATALOG, "-o", str(target)]) == 0
    assert json.loads(target.read_text(encoding="utf-8"))["name"] == "Pac-Man × Donkey Kong"
    assert "saved" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        ["blend", "1001", "--catalog", CATALOG],
        ["blend", "1001", "4242", "--catalog", CATALOG],
        ["similar", "4242", "--catalog", CATALOG],
        ["list", "--catalog", "/nonexistent/catalog.json"],
    ],
)
def test_errors_exit_with_one(argv, capsys) -> None:
    assert main(argv) == 1
    assert "Error" in capsys.readouterr().err


def test_similar_lists_ranked_games(capsys) -> None:
    assert main(["similar", "1004", "--limit", "2", "--catalog", CATALOG]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "Games similar to Super Mario Bros. (1985):"
    assert len(lines) == 3


def test_list_shows_catalog(capsys) -> None:
    assert main(["list", "--catalog", CATALOG]) == 0
    out = capsys.readouterr().out
    assert "The Legend of Zelda (1986, Adventure)" in out
    assert "Chrono Trigger (1995, RPG)" in out


def test_bad_env_override_exits_with_one(monkeypatch, capsys) -> None:
    monkeypatch.setenv("RETROBLEND_EXHAUSTIVE_THRESHOLD", "many")

    assert main(["blend", "1001", "1002", "--catalog", CATALOG]) == 1
    assert "RETROBLEND_EXHAUSTIVE_THRESHOLD" in capsys.readouterr().err
