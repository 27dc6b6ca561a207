from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field

from cardvault_backend.api.deps import block_env, get_dealer_service, sender, viewer_public_key
from cardvault_backend.engine.errors import (
    CardsAlreadyRetrieved,
    DealerError,
    HostError,
    PlayerNotFound,
    SerializationFailed,
    TableNotFound,
    Unauthorized,
)
from cardvault_backend.engine.internal import BlockEnv
from cardvault_backend.engine.models import (
    CommunityCardsResponse,
    DecimalU64Input,
    ExecuteResponse,
    GameState,
    PlayerDataResponse,
    ShowdownResponse,
    StartGamePlayer,
)
from cardvault_backend.engine.service import CardDealerService


router = APIRouter(prefix="/api")

TableId = Annotated[int, Path(ge=0, le=2**32 - 1)]


class StartGameRequest(BaseModel):
    hand_ref: int = Field(ge=0, le=2**32 - 1)
    players: list[StartGamePlayer]
    prev_hand_showdown_players: list[UUID] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class RevealCommunityCardsRequest(BaseModel):
    game_state: GameState

    model_config = ConfigDict(extra="forbid")


class ShowdownRequest(BaseModel):
    game_state: GameState
    showdown_player_ids: list[UUID]

    model_config = ConfigDict(extra="forbid")


class CommunityCardsQuery(BaseModel):
    game_state: GameState
    secret_key: DecimalU64Input

    model_config = ConfigDict(extra="forbid")


class ShowdownQuery(BaseModel):
    flop_secret: DecimalU64Input | None = None
    turn_secret: DecimalU64Input | None = None
    river_secret: DecimalU64Input | None = None
    players_secrets: list[DecimalU64Input] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


def _status_for(exc: DealerError) -> int:
    if isinstance(exc, (TableNotFound, PlayerNotFound)):
        return 404
    if isinstance(exc, Unauthorized):
        return 403
    if isinstance(exc, CardsAlreadyRetrieved):
        return 409
    if isinstance(exc, (SerializationFailed, HostError)):
        return 500
    return 400


def _http_error(exc: DealerError) -> HTTPException:
    return HTTPException(
        status_code=_status_for(exc),
        detail=exc.to_engine_error().model_dump(mode="json"),
    )


@router.post("/tables/{table_id}/start", response_model=ExecuteResponse)
async def start_game(
    request: StartGameRequest,
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
    env: BlockEnv = Depends(block_env),
    caller: str = Depends(sender),
) -> ExecuteResponse:
    try:
        return await service.start_game(
            env,
            caller,
            table_id=table_id,
            hand_ref=request.hand_ref,
            players=request.players,
            prev_hand_showdown_players=request.prev_hand_showdown_players,
        )
    except DealerError as exc:
        raise _http_error(exc) from exc


@router.post("/tables/{table_id}/community-cards", response_model=ExecuteResponse)
async def reveal_community_cards(
    request: RevealCommunityCardsRequest,
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
    env: BlockEnv = Depends(block_env),
    caller: str = Depends(sender),
) -> ExecuteResponse:
    try:
        return await service.reveal_community_cards(
            env,
            caller,
            table_id=table_id,
            game_state=request.game_state,
        )
    except DealerError as exc:
        raise _http_error(exc) from exc


@router.post("/tables/{table_id}/showdown", response_model=ExecuteResponse)
async def showdown(
    request: ShowdownRequest,
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
    env: BlockEnv = Depends(block_env),
    caller: str = Depends(sender),
) -> ExecuteResponse:
    try:
        return await service.showdown(
            env,
            caller,
            table_id=table_id,
            game_state=request.game_state,
            showdown_player_ids=request.showdown_player_ids,
        )
    except DealerError as exc:
        raise _http_error(exc) from exc


@router.get("/tables/{table_id}/private", response_model=PlayerDataResponse)
async def player_private_data(
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
    public_key: str = Depends(viewer_public_key),
) -> PlayerDataResponse:
    try:
        return await service.query_player_private_data(table_id, public_key)
    except DealerError as exc:
        raise _http_error(exc) from exc


@router.post("/tables/{table_id}/community-cards/query", response_model=CommunityCardsResponse)
async def query_community_cards(
    request: CommunityCardsQuery,
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
) -> CommunityCardsResponse:
    try:
        return await service.query_community_cards(
            table_id,
            request.game_state,
            request.secret_key,
        )
    except DealerError as exc:
        raise _http_error(exc) from exc


@router.post("/tables/{table_id}/showdown/query", response_model=ShowdownResponse)
async def query_showdown(
    request: ShowdownQuery,
    table_id: TableId,
    service: CardDealerService = Depends(get_dealer_service),
) -> ShowdownResponse:
    try:
        return await service.query_showdown(
            table_id,
            flop_secret=request.flop_secret,
            turn_secret=request.turn_secret,
            river_secret=request.river_secret,
            players_secrets=request.players_secrets,
        )
    except DealerError as exc:
        raise _http_error(exc) from exc
