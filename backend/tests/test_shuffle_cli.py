from __future__ import annotations

import json

import pytest

from cardvault_backend.tools.shuffle_cli import build_report, deal_layout, main

from .test_cards import GOLDEN_SEED_12345


# First derived value for the fixture entropy and its initial counter.
GOLDEN_DEAL_SEED = 6536030284999714999


def test_deal_layout_matches_start_game() -> None:
    assert deal_layout(GOLDEN_DEAL_SEED, 2) == {
        "hands": [["♦3", "♠Q"], ["♠8", "♣9"]],
        "flop": ["♥3", "♠7", "♥J"],
        "turn": "♥6",
        "river": "♣7",
    }


def test_report_includes_packed_deck() -> None:
    report = build_report(12345, None)
    assert report["deck"] == GOLDEN_SEED_12345
    assert report["packed"].startswith("012c2a02")
    assert len(bytes.fromhex(report["packed"])) == 52
    assert "deal" not in report


def test_cli_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--seed", "12345", "--players", "3"])
    report = json.loads(capsys.readouterr().out)

    assert report["seed"] == 12345
    assert len(report["deal"]["hands"]) == 3


def test_cli_rejects_bad_player_count() -> None:
    with pytest.raises(SystemExit):
        main(["--seed", "1", "--players", "12"])
