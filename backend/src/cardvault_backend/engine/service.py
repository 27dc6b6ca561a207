from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from cardvault_backend.engine.errors import (
    CardsAlreadyRetrieved,
    DealerError,
    DuplicatePublicKeys,
    GameStateError,
    HostError,
    InvalidPlayerCount,
    InvalidSecretKey,
    PlayerNotFound,
    SerializationFailed,
    TableNotFound,
    Unauthorized,
)
from cardvault_backend.engine.internal import BlockEnv, DealRuntime, PhaseSecret
from cardvault_backend.engine.models import (
    CommunityCards,
    CommunityCardsResponse,
    DealerConfig,
    ExecuteResponse,
    Flop,
    GameState,
    LastHandLogResponse,
    MAX_PLAYERS,
    MIN_PLAYERS,
    Player,
    PlayerDataResponse,
    PokerTable,
    ResponsePayload,
    River,
    ShowdownPlayer,
    ShowdownResponse,
    StartGamePlayer,
    StartGameResponse,
    Turn,
)
from cardvault_backend.engine.randomness import RandomSource, init_counter
from cardvault_backend.engine.sharing import additive_secret_sharing
from cardvault_backend.repo.base import TableRepository
from cardvault_backend.utils.cards import Card, cards_to_strings


logger = logging.getLogger(__name__)

COMMUNITY_CARD_PHASES = 3
HOLE_CARDS = 2
FLOP_CARDS = 3
RESPONSE_KEY = "response"
PREVIOUS_HAND_LOG_KEY = "previous_hand_log"

_payload_adapter: TypeAdapter[ResponsePayload] = TypeAdapter(ResponsePayload)


@contextmanager
def _log_rejections(operation: str, table_id: int | None = None) -> Iterator[None]:
    try:
        yield
    except DealerError as exc:
        logger.warning("%s rejected (table=%s): %s", operation, table_id, exc.code)
        raise


class CardDealerService:
    def __init__(self, repository: TableRepository) -> None:
        self._repo = repository
        self._lock = asyncio.Lock()

    async def instantiate(self, env: BlockEnv, owner: str) -> None:
        async with self._lock:
            with _log_rejections("instantiate"):
                if self._repo.get_config() is not None:
                    raise HostError("dealer already instantiated")
                self._instantiate_locked(env, owner)

    async def ensure_instantiated(self, env: BlockEnv, owner: str) -> None:
        async with self._lock:
            with _log_rejections("ensure_instantiated"):
                config = self._repo.get_config()
                if config is None:
                    self._instantiate_locked(env, owner)
                    return
                if config.owner != owner:
                    raise HostError(f"dealer already instantiated for owner {config.owner}")
                logger.debug("dealer already instantiated for owner %s", owner)

    def _instantiate_locked(self, env: BlockEnv, owner: str) -> None:
        counter = init_counter(env.random)
        self._commit(config=DealerConfig(owner=owner), counter=counter)
        logger.info("dealer instantiated for owner %s", owner)

    async def start_game(
        self,
        env: BlockEnv,
        sender: str,
        table_id: int,
        hand_ref: int,
        players: list[StartGamePlayer],
        prev_hand_showdown_players: list[UUID] | None = None,
    ) -> ExecuteResponse:
        async with self._lock:
            with _log_rejections("start_game", table_id):
                self._authorize(sender)
                self._validate_players(players)
                previous_hand_log = self._build_previous_hand_log(
                    table_id,
                    prev_hand_showdown_players or [],
                )

                rng = RandomSource(env.random, self._load_counter())
                deal = DealRuntime(rng=rng)
                deal.shuffle()
                hands = [deal.next_cards(HOLE_CARDS) for _ in players]
                flop, turn, river = (
                    self._generate_phase_secret(rng, len(players))
                    for _ in range(COMMUNITY_CARD_PHASES)
                )
                community_cards = CommunityCards(
                    flop=Flop(cards=deal.next_cards(FLOP_CARDS), secret=flop.secret),
                    turn=Turn(card=deal.next_card(), secret=turn.secret),
                    river=River(card=deal.next_card(), secret=river.secret),
                )
                table_players = [
                    Player(
                        username=info.username,
                        player_id=info.player_id,
                        public_key=info.public_key,
                        hand=hand,
                        hand_secret=rng.next_u64(),
                        flop_secret_share=flop.shares[index],
                        turn_secret_share=turn.shares[index],
                        river_secret_share=river.shares[index],
                    )
                    for index, (info, hand) in enumerate(zip(players, hands))
                ]
                table = PokerTable(
                    hand_ref=hand_ref,
                    players=table_players,
                    community_cards=community_cards,
                )

                self._commit(tables={table_id: table}, counter=rng.counter)
                logger.info(
                    "hand %s started on table %s with %d players",
                    hand_ref,
                    table_id,
                    len(table_players),
                )

                attributes = {
                    RESPONSE_KEY: self._serialize(
                        StartGameResponse(
                            table_id=table_id,
                            hand_ref=hand_ref,
                            players=[player.username for player in table_players],
                        ),
                    ),
                }
                if previous_hand_log is not None:
                    attributes[PREVIOUS_HAND_LOG_KEY] = self._serialize(previous_hand_log)
                return ExecuteResponse(attributes=attributes)

    async def reveal_community_cards(
        self,
        env: BlockEnv,
        sender: str,
        table_id: int,
        game_state: GameState,
    ) -> ExecuteResponse:
        async with self._lock:
            with _log_rejections("reveal_community_cards", table_id):
                self._authorize(sender)
                table = self._load_table_or_error(table_id)
                stage, cards = self._phase_stage(
                    table.community_cards,
                    game_state,
                    table_id,
                    "reveal_community_cards",
                )
                if stage.retrieved_at is not None:
                    raise CardsAlreadyRetrieved(table_id, game_state.value)

                stage.retrieved_at = env.time
                self._commit(tables={table_id: table})
                logger.info(
                    "%s revealed for hand %s on table %s",
                    game_state.value,
                    table.hand_ref,
                    table_id,
                )

                payload = CommunityCardsResponse(
                    table_id=table_id,
                    hand_ref=table.hand_ref,
                    game_state=game_state,
                    community_cards=cards,
                )
                return ExecuteResponse(attributes={RESPONSE_KEY: self._serialize(payload)})

    async def showdown(
        self,
        env: BlockEnv,
        sender: str,
        table_id: int,
        game_state: GameState,
        showdown_player_ids: list[UUID],
    ) -> ExecuteResponse:
        async with self._lock:
            with _log_rejections("showdown", table_id):
                self._authorize(sender)
                table = self._load_table_or_error(table_id)
                if table.showdown_retrieved_at is not None:
                    raise CardsAlreadyRetrieved(table_id, "showdown")

                players_by_id = {player.player_id: player for player in table.players}
                players_cards: list[tuple[UUID, list[Card]]] = []
                for player_id in showdown_player_ids:
                    player = players_by_id.get(player_id)
                    if player is None:
                        raise PlayerNotFound(table_id, str(player_id))
                    players_cards.append((player.player_id, list(player.hand)))

                payload = ShowdownResponse(
                    table_id=table_id,
                    hand_ref=table.hand_ref,
                    players_cards=players_cards,
                    community_cards=self._all_in_board(table.community_cards, game_state),
                )

                table.showdown_retrieved_at = env.time
                self._commit(tables={table_id: table})
                logger.info(
                    "showdown for hand %s on table %s at %s (%d hands shown)",
                    table.hand_ref,
                    table_id,
                    game_state.value,
                    len(players_cards),
                )
                return ExecuteResponse(attributes={RESPONSE_KEY: self._serialize(payload)})

    async def query_player_private_data(
        self,
        table_id: int,
        public_key: str,
    ) -> PlayerDataResponse:
        async with self._lock:
            with _log_rejections("query_player_private_data", table_id):
                table = self._load_table_or_error(table_id)
                for player in table.players:
                    if player.public_key == public_key:
                        return PlayerDataResponse(
                            table_id=table_id,
                            hand_ref=table.hand_ref,
                            hand=player.hand,
                            hand_secret=player.hand_secret,
                            flop_secret_share=player.flop_secret_share,
                            turn_secret_share=player.turn_secret_share,
                            river_secret_share=player.river_secret_share,
                        )
                raise PlayerNotFound(table_id, public_key)

    async def query_community_cards(
        self,
        table_id: int,
        game_state: GameState,
        secret_key: int,
    ) -> CommunityCardsResponse:
        async with self._lock:
            with _log_rejections("query_community_cards", table_id):
                table = self._load_table_or_error(table_id)
                stage, cards = self._phase_stage(
                    table.community_cards,
                    game_state,
                    table_id,
                    "query_community_cards",
                )
                if stage.secret != secret_key:
                    raise InvalidSecretKey(table_id, game_state.value)
                return CommunityCardsResponse(
                    table_id=table_id,
                    hand_ref=table.hand_ref,
                    game_state=game_state,
                    community_cards=cards,
                )

    async def query_showdown(
        self,
        table_id: int,
        flop_secret: int | None = None,
        turn_secret: int | None = None,
        river_secret: int | None = None,
        players_secrets: list[int] | None = None,
    ) -> ShowdownResponse:
        async with self._lock:
            with _log_rejections("query_showdown", table_id):
                table = self._load_table_or_error(table_id)
                community = table.community_cards
                community_cards: list[Card] = []

                if flop_secret is not None:
                    if community.flop.secret != flop_secret:
                        raise InvalidSecretKey(table_id, GameState.FLOP.value)
                    community_cards.extend(community.flop.cards)
                if turn_secret is not None:
                    if community.turn.secret != turn_secret:
                        raise InvalidSecretKey(table_id, GameState.TURN.value)
                    community_cards.append(community.turn.card)
                if river_secret is not None:
                    if community.river.secret != river_secret:
                        raise InvalidSecretKey(table_id, GameState.RIVER.value)
                    community_cards.append(community.river.card)

                players_by_secret = {player.hand_secret: player for player in table.players}
                players_cards: list[tuple[UUID, list[Card]]] = []
                for secret in players_secrets or []:
                    player = players_by_secret.get(secret)
                    if player is None:
                        raise InvalidSecretKey(table_id, "player_hand")
                    players_cards.append((player.player_id, list(player.hand)))

                return ShowdownResponse(
                    table_id=table_id,
                    hand_ref=table.hand_ref,
                    players_cards=players_cards,
                    community_cards=community_cards,
                )

    def _authorize(self, sender: str) -> None:
        config = self._repo.get_config()
        if config is None:
            raise HostError("dealer not instantiated")
        if sender != config.owner:
            raise Unauthorized(sender)

    def _validate_players(self, players: list[StartGamePlayer]) -> None:
        if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
            raise InvalidPlayerCount(len(players))

        seen: set[str] = set()
        for player in players:
            if player.public_key in seen:
                raise DuplicatePublicKeys(player.public_key)
            seen.add(player.public_key)

    def _build_previous_hand_log(
        self,
        table_id: int,
        showdown_player_ids: list[UUID],
    ) -> LastHandLogResponse | None:
        table = self._repo.get_table(table_id)
        if table is None:
            return None

        players_by_id = {player.player_id: player for player in table.players}
        showdown_players = []
        for player_id in showdown_player_ids:
            player = players_by_id.get(player_id)
            if player is None:
                raise PlayerNotFound(table_id, str(player_id))
            showdown_players.append(
                ShowdownPlayer(username=player.username, hand=cards_to_strings(player.hand)),
            )

        community = table.community_cards
        return LastHandLogResponse(
            showdown_players=showdown_players,
            community_cards=cards_to_strings(community.all_cards()),
            flop_retrieved_at=community.flop.retrieved_at,
            turn_retrieved_at=community.turn.retrieved_at,
            river_retrieved_at=community.river.retrieved_at,
            showdown_retrieved_at=table.showdown_retrieved_at,
        )

    def _generate_phase_secret(self, rng: RandomSource, player_count: int) -> PhaseSecret:
        secret = rng.next_u64()
        return PhaseSecret(
            secret=secret,
            shares=additive_secret_sharing(secret, player_count, rng),
        )

    def _phase_stage(
        self,
        community: CommunityCards,
        game_state: GameState,
        table_id: int,
        method: str,
    ) -> tuple[Flop | Turn | River, list[Card]]:
        if game_state is GameState.FLOP:
            return community.flop, list(community.flop.cards)
        if game_state is GameState.TURN:
            return community.turn, [community.turn.card]
        if game_state is GameState.RIVER:
            return community.river, [community.river.card]
        raise GameStateError(method, table_id, game_state)

    def _all_in_board(
        self,
        community: CommunityCards,
        game_state: GameState,
    ) -> list[Card] | None:
        if game_state is GameState.PRE_FLOP:
            return [*community.flop.cards, community.turn.card, community.river.card]
        if game_state is GameState.FLOP:
            return [community.turn.card, community.river.card]
        if game_state is GameState.TURN:
            return [community.river.card]
        return None

    def _load_table_or_error(self, table_id: int) -> PokerTable:
        table = self._repo.get_table(table_id)
        if table is None:
            raise TableNotFound(table_id)
        return table

    def _load_counter(self) -> int:
        counter = self._repo.get_counter()
        if counter is None:
            raise HostError("random counter not initialised")
        return counter

    def _commit(
        self,
        *,
        tables: dict[int, PokerTable] | None = None,
        counter: int | None = None,
        config: DealerConfig | None = None,
    ) -> None:
        try:
            self._repo.commit(tables=tables, counter=counter, config=config)
        except (ValueError, OSError, PydanticSerializationError) as exc:
            raise HostError(f"Failed to save state: {exc}") from exc

    def _serialize(self, payload: ResponsePayload) -> str:
        try:
            return _payload_adapter.dump_json(payload).decode("utf-8")
        except PydanticSerializationError as exc:
            raise SerializationFailed(str(exc)) from exc
