from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    WithJsonSchema,
)

from cardvault_backend.utils.cards import Card


ENGINE_VERSION = "0.1.0"
MIN_PLAYERS = 2
MAX_PLAYERS = 9
U64_MAX = (1 << 64) - 1


def _coerce_card(value: Any) -> Card:
    if isinstance(value, Card):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("card must be a packed byte")
    return Card.from_byte(value)


def _parse_decimal_u64(value: Any) -> int:
    if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
        raise ValueError("secret must be a decimal string")
    return int(value)


PackedCard = Annotated[
    Card,
    PlainValidator(_coerce_card),
    PlainSerializer(lambda card: card.to_byte(), return_type=int),
    WithJsonSchema({"type": "integer", "minimum": 0, "maximum": 255}),
]

U64 = Annotated[int, Field(ge=0, le=U64_MAX)]

# Secrets travel as decimal strings; JSON numbers lose precision above 2**53.
DecimalU64 = Annotated[
    int,
    Field(ge=0, le=U64_MAX),
    PlainSerializer(str, return_type=str),
]

DecimalU64Input = Annotated[
    int,
    BeforeValidator(_parse_decimal_u64),
    Field(ge=0, le=U64_MAX),
]


class GameState(str, Enum):
    PRE_FLOP = "pre_flop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class DealerConfig(BaseModel):
    owner: str

    model_config = ConfigDict(extra="forbid")


class StartGamePlayer(BaseModel):
    username: str
    player_id: UUID
    public_key: str

    model_config = ConfigDict(extra="forbid")


class Player(BaseModel):
    username: str
    player_id: UUID
    public_key: str
    hand: list[PackedCard]
    hand_secret: U64
    flop_secret_share: U64
    turn_secret_share: U64
    river_secret_share: U64

    model_config = ConfigDict(extra="forbid")


class Flop(BaseModel):
    cards: list[PackedCard]
    secret: U64
    retrieved_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class Turn(BaseModel):
    card: PackedCard
    secret: U64
    retrieved_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class River(BaseModel):
    card: PackedCard
    secret: U64
    retrieved_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class CommunityCards(BaseModel):
    flop: Flop
    turn: Turn
    river: River

    model_config = ConfigDict(extra="forbid")

    def all_cards(self) -> list[Card]:
        return [*self.flop.cards, self.turn.card, self.river.card]


class PokerTable(BaseModel):
    hand_ref: int
    players: list[Player]
    community_cards: CommunityCards
    showdown_retrieved_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class StartGameResponse(BaseModel):
    type: Literal["start_game"] = "start_game"
    table_id: int
    hand_ref: int
    players: list[str]

    model_config = ConfigDict(extra="forbid")


class ShowdownPlayer(BaseModel):
    username: str
    hand: list[str]

    model_config = ConfigDict(extra="forbid")


class LastHandLogResponse(BaseModel):
    type: Literal["last_hand"] = "last_hand"
    showdown_players: list[ShowdownPlayer]
    community_cards: list[str]
    flop_retrieved_at: datetime | None = None
    turn_retrieved_at: datetime | None = None
    river_retrieved_at: datetime | None = None
    showdown_retrieved_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class CommunityCardsResponse(BaseModel):
    type: Literal["community_cards"] = "community_cards"
    table_id: int
    hand_ref: int
    game_state: GameState
    community_cards: list[PackedCard]

    model_config = ConfigDict(extra="forbid")


class ShowdownResponse(BaseModel):
    type: Literal["showdown"] = "showdown"
    table_id: int
    hand_ref: int
    players_cards: list[tuple[UUID, list[PackedCard]]]
    community_cards: list[PackedCard] | None = None

    model_config = ConfigDict(extra="forbid")


ResponsePayload = Annotated[
    Union[StartGameResponse, LastHandLogResponse, CommunityCardsResponse, ShowdownResponse],
    Field(discriminator="type"),
]


class ExecuteResponse(BaseModel):
    attributes: dict[str, str]

    model_config = ConfigDict(extra="forbid")


class PlayerDataResponse(BaseModel):
    table_id: int
    hand_ref: int
    hand: list[PackedCard]
    hand_secret: DecimalU64
    flop_secret_share: DecimalU64
    turn_secret_share: DecimalU64
    river_secret_share: DecimalU64

    model_config = ConfigDict(extra="forbid")


class EngineError(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")
