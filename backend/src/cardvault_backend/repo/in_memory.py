from __future__ import annotations

from cardvault_backend.engine.models import DealerConfig, PokerTable
from cardvault_backend.repo.base import TableRepository


class InMemoryTableRepository(TableRepository):
    def __init__(self) -> None:
        self._tables: dict[int, str] = {}
        self._counter: int | None = None
        self._config: str | None = None

    def get_table(self, table_id: int) -> PokerTable | None:
        raw = self._tables.get(table_id)
        if raw is None:
            return None
        return PokerTable.model_validate_json(raw)

    def get_counter(self) -> int | None:
        return self._counter

    def get_config(self) -> DealerConfig | None:
        if self._config is None:
            return None
        return DealerConfig.model_validate_json(self._config)

    def commit(
        self,
        *,
        tables: dict[int, PokerTable] | None = None,
        counter: int | None = None,
        config: DealerConfig | None = None,
    ) -> None:
        # Encode everything before touching stored state.
        staged_tables = {
            table_id: table.model_dump_json() for table_id, table in (tables or {}).items()
        }
        staged_config = config.model_dump_json() if config is not None else None
        if counter is not None and counter < 0:
            raise ValueError("counter cannot be negative")

        self._tables.update(staged_tables)
        if counter is not None:
            self._counter = counter
        if staged_config is not None:
            self._config = staged_config