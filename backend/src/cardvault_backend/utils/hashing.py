from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF


U64_MASK = (1 << 64) - 1


def derive_key(
    ikm: bytes,
    *,
    salt: bytes,
    info: bytes,
    length: int,
    algorithm: hashes.HashAlgorithm | None = None,
) -> bytes:
    kdf = HKDF(
        algorithm=algorithm if algorithm is not None else hashes.SHA512(),
        length=length,
        salt=salt,
        info=info,
    )
    return kdf.derive(ikm)


def shuffle_digest(seed: int, position: int, attempt: int) -> int:
    hasher = hashlib.sha256()
    hasher.update(seed.to_bytes(8, byteorder="little", signed=False))
    hasher.update(position.to_bytes(8, byteorder="little", signed=False))
    hasher.update(attempt.to_bytes(8, byteorder="little", signed=False))
    return int.from_bytes(hasher.digest()[:8], byteorder="little", signed=False)
