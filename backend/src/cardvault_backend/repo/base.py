from __future__ import annotations

from abc import ABC, abstractmethod

from cardvault_backend.engine.models import DealerConfig, PokerTable


class TableRepository(ABC):
    @abstractmethod
    def get_table(self, table_id: int) -> PokerTable | None:
        raise NotImplementedError

    @abstractmethod
    def get_counter(self) -> int | None:
        raise NotImplementedError

    @abstractmethod
    def get_config(self) -> DealerConfig | None:
        raise NotImplementedError

    @abstractmethod
    def commit(
        self,
        *,
        tables: dict[int, PokerTable] | None = None,
        counter: int | None = None,
        config: DealerConfig | None = None,
    ) -> None:
        """Write every given record, or none of them."""
        raise NotImplementedError
