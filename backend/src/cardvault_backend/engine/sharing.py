from __future__ import annotations

from cardvault_backend.engine.randomness import RandomSource
from cardvault_backend.utils.hashing import U64_MASK


def additive_secret_sharing(secret: int, players: int, rng: RandomSource) -> list[int]:
    if players < 2:
        raise ValueError(f"secret sharing needs at least 2 players, got {players}")
    if not 0 <= secret <= U64_MASK:
        raise ValueError("secret must be an unsigned 64-bit value")

    shares: list[int] = []
    total = 0
    for _ in range(players - 1):
        share = rng.next_u64()
        shares.append(share)
        total = (total + share) & U64_MASK

    shares.append((secret - total) & U64_MASK)
    return shares


def reconstruct_secret(shares: list[int]) -> int:
    return sum(shares) & U64_MASK
