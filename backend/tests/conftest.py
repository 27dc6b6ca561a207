from __future__ import annotations

import pytest
import pytest_asyncio

from cardvault_backend.engine.service import CardDealerService
from cardvault_backend.repo.in_memory import InMemoryTableRepository

from .test_utils import OWNER, make_env, make_players


@pytest.fixture
def repository() -> InMemoryTableRepository:
    return InMemoryTableRepository()


@pytest_asyncio.fixture
async def engine(repository: InMemoryTableRepository) -> CardDealerService:
    service = CardDealerService(repository)
    await service.instantiate(make_env(), owner=OWNER)
    return service


@pytest_asyncio.fixture
async def started_table(engine: CardDealerService) -> int:
    await engine.start_game(make_env(), OWNER, table_id=1, hand_ref=1, players=make_players(2))
    return 1
