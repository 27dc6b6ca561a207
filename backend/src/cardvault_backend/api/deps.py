from __future__ import annotations

import os
from datetime import datetime, timezone

from fastapi import Header

from cardvault_backend.engine.internal import BlockEnv
from cardvault_backend.engine.service import CardDealerService
from cardvault_backend.repo.in_memory import InMemoryTableRepository


ENTROPY_BYTES = 32

repository = InMemoryTableRepository()
dealer_service = CardDealerService(repository)


def block_env() -> BlockEnv:
    return BlockEnv(time=datetime.now(timezone.utc), random=os.urandom(ENTROPY_BYTES))


# Both headers are set by the authenticating gateway in front of this service.
def sender(x_sender: str = Header(...)) -> str:
    return x_sender


def viewer_public_key(x_viewer_public_key: str = Header(...)) -> str:
    return x_viewer_public_key


def get_dealer_service() -> CardDealerService:
    return dealer_service
