from __future__ import annotations

from dataclasses import dataclass

from cardvault_backend.utils import hashing


# Suit order is shared with every client that renders the audit log.
SUIT_SYMBOLS = ("♣", "♦", "♥", "♠")
RANK_SYMBOLS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
DECK_SIZE = 52


@dataclass(frozen=True, order=True)
class Card:
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFF:
            raise ValueError(f"card byte out of range: {self.value}")
        if self.suit >= len(SUIT_SYMBOLS):
            raise ValueError(f"invalid suit: {self.suit}")
        if not 1 <= self.rank <= len(RANK_SYMBOLS):
            raise ValueError(f"invalid rank: {self.rank}")

    @classmethod
    def new(cls, suit: int, rank: int) -> Card:
        if not 0 <= suit < len(SUIT_SYMBOLS):
            raise ValueError(f"invalid suit: {suit}")
        if not 1 <= rank <= len(RANK_SYMBOLS):
            raise ValueError(f"invalid rank: {rank}")
        return cls((suit << 4) | rank)

    @property
    def suit(self) -> int:
        return self.value >> 4

    @property
    def rank(self) -> int:
        return self.value & 0x0F

    def to_byte(self) -> int:
        return self.value

    @classmethod
    def from_byte(cls, byte: int) -> Card:
        return cls(byte)

    def __str__(self) -> str:
        return f"{SUIT_SYMBOLS[self.suit]}{RANK_SYMBOLS[self.rank - 1]}"


def new_deck() -> list[Card]:
    return [Card.new(suit, rank) for suit in range(4) for rank in range(1, 14)]


def deck_to_bytes(deck: list[Card]) -> bytes:
    return bytes(card.to_byte() for card in deck)


def deck_from_bytes(raw: bytes) -> list[Card]:
    return [Card.from_byte(byte) for byte in raw]


def cards_to_strings(cards: list[Card]) -> list[str]:
    return [str(card) for card in cards]


def secure_random_index(seed: int, position: int) -> int:
    """Uniform index in ``[0, position]`` by rejection sampling."""
    bound = position + 1
    threshold = (hashing.U64_MASK // bound) * bound
    attempt = 0
    while True:
        candidate = hashing.shuffle_digest(seed, position, attempt)
        if candidate < threshold:
            return candidate % bound
        attempt += 1


def shuffle_deck(deck: list[Card], seed: int) -> None:
    for position in range(len(deck) - 1, 0, -1):
        swap_with = secure_random_index(seed, position)
        deck[position], deck[swap_with] = deck[swap_with], deck[position]


def build_shuffled_deck(seed: int) -> list[Card]:
    deck = new_deck()
    shuffle_deck(deck, seed)
    return deck


def pop_cards(deck: list[Card], count: int) -> list[Card]:
    if len(deck) < count:
        raise ValueError(f"cannot deal {count} cards from deck of {len(deck)}")
    return [deck.pop() for _ in range(count)]
