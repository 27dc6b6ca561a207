from __future__ import annotations

from typing import Any

from cardvault_backend.engine.models import EngineError, GameState


class DealerError(Exception):
    code = "DEALER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_engine_error(self) -> EngineError:
        return EngineError(code=self.code, message=self.message, details=self.details())


class HostError(DealerError):
    """Failure reported by the storage or entropy collaborator."""

    code = "HOST_ERROR"


class Unauthorized(DealerError):
    code = "UNAUTHORIZED"

    def __init__(self, sender: str) -> None:
        super().__init__("Unauthorized")
        self.sender = sender

    def details(self) -> dict[str, Any]:
        return {"sender": self.sender}


class InvalidPlayerCount(DealerError):
    code = "INVALID_PLAYER_COUNT"

    def __init__(self, count: int) -> None:
        super().__init__(f"Invalid player count: {count}")
        self.count = count

    def details(self) -> dict[str, Any]:
        return {"count": self.count}


class DuplicatePublicKeys(DealerError):
    code = "DUPLICATE_PUBLIC_KEYS"

    def __init__(self, public_key: str) -> None:
        super().__init__(f"Duplicate public key: {public_key}")
        self.public_key = public_key

    def details(self) -> dict[str, Any]:
        return {"public_key": self.public_key}


class GameStateError(DealerError):
    code = "GAME_STATE_ERROR"

    def __init__(self, method: str, table_id: int, game_state: GameState | None) -> None:
        state = game_state.value if game_state is not None else None
        super().__init__(
            f"Game state error in method {method} for table {table_id}: got {state}",
        )
        self.method = method
        self.table_id = table_id
        self.game_state = game_state

    def details(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "table_id": self.table_id,
            "game_state": self.game_state.value if self.game_state is not None else None,
        }


class CardsAlreadyRetrieved(DealerError):
    code = "CARDS_ALREADY_RETRIEVED"

    def __init__(self, table_id: int, target: str) -> None:
        super().__init__(f"Cards already retrieved for {target} on table {table_id}")
        self.table_id = table_id
        self.target = target

    def details(self) -> dict[str, Any]:
        return {"table_id": self.table_id, "target": self.target}


class TableNotFound(DealerError):
    code = "TABLE_NOT_FOUND"

    def __init__(self, table_id: int) -> None:
        super().__init__(f"Table {table_id} not found")
        self.table_id = table_id

    def details(self) -> dict[str, Any]:
        return {"table_id": self.table_id}


class PlayerNotFound(DealerError):
    code = "PLAYER_NOT_FOUND"

    def __init__(self, table_id: int, player: str) -> None:
        super().__init__(f"Player {player} not found in table {table_id}")
        self.table_id = table_id
        self.player = player

    def details(self) -> dict[str, Any]:
        return {"table_id": self.table_id, "player": self.player}


class InvalidSecretKey(DealerError):
    code = "INVALID_SECRET_KEY"

    def __init__(self, table_id: int, target: str) -> None:
        super().__init__(f"Invalid secret key for {target} on table {table_id}")
        self.table_id = table_id
        self.target = target

    def details(self) -> dict[str, Any]:
        return {"table_id": self.table_id, "target": self.target}


class SerializationFailed(DealerError):
    code = "SERIALIZATION_FAILED"

    def __init__(self, error: str) -> None:
        super().__init__(f"Serialization error: {error}")
        self.error = error

    def details(self) -> dict[str, Any]:
        return {"error": self.error}
