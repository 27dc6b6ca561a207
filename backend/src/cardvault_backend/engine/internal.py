from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from cardvault_backend.engine.randomness import RandomSource
from cardvault_backend.utils.cards import Card, build_shuffled_deck, pop_cards


@dataclass(frozen=True)
class BlockEnv:
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    random: bytes | None = None


@dataclass
class PhaseSecret:
    secret: int
    shares: list[int]


@dataclass
class DealRuntime:
    rng: RandomSource
    deck: list[Card] = field(default_factory=list)
    seed: int | None = None

    def shuffle(self) -> None:
        self.seed = self.rng.next_u64()
        self.deck = build_shuffled_deck(self.seed)

    def next_cards(self, count: int) -> list[Card]:
        return pop_cards(self.deck, count)

    def next_card(self) -> Card:
        return pop_cards(self.deck, 1)[0]
