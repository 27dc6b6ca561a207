from __future__ import annotations

import argparse
import json

from cardvault_backend.engine.models import MAX_PLAYERS, MIN_PLAYERS
from cardvault_backend.utils.cards import (
    Card,
    build_shuffled_deck,
    cards_to_strings,
    deck_to_bytes,
    pop_cards,
)
from cardvault_backend.utils.logging_utils import get_logger, setup_logging


logger = get_logger(__name__)


def deal_layout(seed: int, player_count: int) -> dict[str, object]:
    """Cards StartGame hands out for a shuffle seed, in dealing order."""
    deck = build_shuffled_deck(seed)
    hands = [cards_to_strings(pop_cards(deck, 2)) for _ in range(player_count)]
    flop = pop_cards(deck, 3)
    turn: Card = deck.pop()
    river: Card = deck.pop()
    return {
        "hands": hands,
        "flop": cards_to_strings(flop),
        "turn": str(turn),
        "river": str(river),
    }


def build_report(seed: int, player_count: int | None) -> dict[str, object]:
    deck = build_shuffled_deck(seed)
    report: dict[str, object] = {
        "seed": seed,
        "deck": cards_to_strings(deck),
        "packed": deck_to_bytes(deck).hex(),
    }
    if player_count is not None:
        report["deal"] = deal_layout(seed, player_count)
    return report


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Reproduce the deck order for a shuffle seed")
    parser.add_argument("--seed", type=int, required=True)
    parser.add_argument("--players", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    if not 0 <= args.seed < 2**64:
        parser.error("--seed must be an unsigned 64-bit integer")
    if args.players is not None and not MIN_PLAYERS <= args.players <= MAX_PLAYERS:
        parser.error(f"--players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

    logger.debug("shuffling canonical deck with seed %s", args.seed)
    print(json.dumps(build_report(args.seed, args.players), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
