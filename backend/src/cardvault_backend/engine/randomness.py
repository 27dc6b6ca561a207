from __future__ import annotations

from cardvault_backend.engine.errors import HostError
from cardvault_backend.utils.hashing import derive_key


SECRET_LENGTH = 64
RANDOM_SEED_SIZE = 16
COUNTER_BYTES = 16


def init_counter(entropy: bytes | None) -> int:
    if entropy is None:
        raise HostError("No random seed available")
    if len(entropy) < RANDOM_SEED_SIZE:
        raise HostError(
            f"Random seed too short: need {RANDOM_SEED_SIZE} bytes, got {len(entropy)}",
        )
    return int.from_bytes(entropy[:RANDOM_SEED_SIZE], byteorder="little", signed=False)


class RandomSource:
    """Stream of u64 values keyed by block entropy and a persisted counter."""

    def __init__(self, entropy: bytes | None, counter: int) -> None:
        self._entropy = entropy
        self._counter = counter

    @property
    def counter(self) -> int:
        return self._counter

    def next_u64(self) -> int:
        if self._entropy is None:
            raise HostError("No random seed available")
        okm = derive_key(
            self._entropy,
            salt=bytes(SECRET_LENGTH),
            info=self._counter.to_bytes(COUNTER_BYTES, byteorder="little", signed=False),
            length=SECRET_LENGTH,
        )
        self._counter += 1
        return int.from_bytes(okm[:8], byteorder="little", signed=False)
