from __future__ import annotations

import pytest

from cardvault_backend.engine.errors import (
    GameStateError,
    InvalidSecretKey,
    PlayerNotFound,
    TableNotFound,
)
from cardvault_backend.engine.models import GameState
from cardvault_backend.engine.service import CardDealerService
from cardvault_backend.engine.sharing import reconstruct_secret
from cardvault_backend.repo.in_memory import InMemoryTableRepository
from cardvault_backend.utils.cards import cards_to_strings

from .test_utils import OWNER, PLAYER_IDS, make_env, make_players


async def _private_rows(engine: CardDealerService, table_id: int, count: int) -> list[dict]:
    rows = []
    for index in range(count):
        data = await engine.query_player_private_data(table_id, f"key{index + 1}")
        rows.append(data.model_dump(mode="json"))
    return rows


@pytest.mark.asyncio
async def test_private_data_is_returned_as_decimal_strings(
    engine: CardDealerService,
    started_table: int,
) -> None:
    data = await engine.query_player_private_data(started_table, "key1")
    payload = data.model_dump(mode="json")

    assert payload["table_id"] == started_table
    assert payload["hand_ref"] == 1
    assert cards_to_strings(data.hand) == ["♦3", "♠Q"]
    assert len(payload["hand"]) == 2
    assert payload["hand_secret"] == "16090100356791255562"
    assert payload["flop_secret_share"] == "17757974096803185251"
    for key in ("hand_secret", "flop_secret_share", "turn_secret_share", "river_secret_share"):
        assert isinstance(payload[key], str)
        assert 0 <= int(payload[key]) < 2**64


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [2, 4, 9])
async def test_summed_shares_unlock_each_phase(engine: CardDealerService, count: int) -> None:
    await engine.start_game(make_env(), OWNER, table_id=5, hand_ref=8, players=make_players(count))
    rows = await _private_rows(engine, 5, count)

    flop_key = reconstruct_secret([int(row["flop_secret_share"]) for row in rows])
    turn_key = reconstruct_secret([int(row["turn_secret_share"]) for row in rows])
    river_key = reconstruct_secret([int(row["river_secret_share"]) for row in rows])

    flop = await engine.query_community_cards(5, GameState.FLOP, flop_key)
    turn = await engine.query_community_cards(5, GameState.TURN, turn_key)
    river = await engine.query_community_cards(5, GameState.RIVER, river_key)

    assert len(flop.community_cards) == 3
    assert len(turn.community_cards) == 1
    assert len(river.community_cards) == 1
    assert flop.hand_ref == 8


@pytest.mark.asyncio
async def test_partial_shares_do_not_unlock(engine: CardDealerService, started_table: int) -> None:
    row = (await _private_rows(engine, started_table, 1))[0]

    with pytest.raises(InvalidSecretKey) as excinfo:
        await engine.query_community_cards(
            started_table,
            GameState.FLOP,
            int(row["flop_secret_share"]),
        )
    assert excinfo.value.target == "flop"


@pytest.mark.asyncio
async def test_secret_query_does_not_stamp_reveal(
    engine: CardDealerService,
    repository: InMemoryTableRepository,
    started_table: int,
) -> None:
    await engine.query_community_cards(started_table, GameState.FLOP, 4536127052627458976)

    table = repository.get_table(started_table)
    assert table is not None
    assert table.community_cards.flop.retrieved_at is None

    # Still valid once the phase has been revealed publicly.
    await engine.reveal_community_cards(make_env(), OWNER, started_table, GameState.FLOP)
    again = await engine.query_community_cards(started_table, GameState.FLOP, 4536127052627458976)
    assert cards_to_strings(again.community_cards) == ["♥3", "♠7", "♥J"]


@pytest.mark.asyncio
async def test_pre_flop_secret_query_is_a_state_error(
    engine: CardDealerService,
    started_table: int,
) -> None:
    with pytest.raises(GameStateError):
        await engine.query_community_cards(started_table, GameState.PRE_FLOP, 1)


@pytest.mark.asyncio
async def test_private_data_for_unknown_viewer(engine: CardDealerService, started_table: int) -> None:
    with pytest.raises(PlayerNotFound) as excinfo:
        await engine.query_player_private_data(started_table, "key9")
    assert excinfo.value.player == "key9"

    with pytest.raises(TableNotFound):
        await engine.query_player_private_data(404, "key1")


@pytest.mark.asyncio
async def test_showdown_query_by_secrets(engine: CardDealerService, started_table: int) -> None:
    response = await engine.query_showdown(
        started_table,
        flop_secret=4536127052627458976,
        river_secret=12305804164812119939,
        players_secrets=[8257359909030350484],
    )

    assert cards_to_strings(response.community_cards or []) == ["♥3", "♠7", "♥J", "♣7"]
    assert [player_id for player_id, _ in response.players_cards] == [PLAYER_IDS[1]]
    assert cards_to_strings(response.players_cards[0][1]) == ["♠8", "♣9"]


@pytest.mark.asyncio
async def test_showdown_query_without_secrets_is_empty(
    engine: CardDealerService,
    started_table: int,
) -> None:
    response = await engine.query_showdown(started_table)
    assert response.community_cards == []
    assert response.players_cards == []


@pytest.mark.asyncio
async def test_showdown_query_rejects_wrong_secrets(
    engine: CardDealerService,
    started_table: int,
) -> None:
    with pytest.raises(InvalidSecretKey) as excinfo:
        await engine.query_showdown(started_table, turn_secret=1)
    assert excinfo.value.target == "turn"

    with pytest.raises(InvalidSecretKey) as excinfo:
        await engine.query_showdown(
            started_table,
            flop_secret=4536127052627458976,
            players_secrets=[16090100356791255562, 12345],
        )
    assert excinfo.value.target == "player_hand"
