"""Terminal outcomes of an order placement."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class OutcomeStatus(Enum):
    """Enumeration of order placement outcomes."""

    COMMITTED = "committed"
    ITEM_NOT_FOUND = "item_not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    TRANSACTION_FAILED = "transaction_failed"


@dataclass(frozen=True)
class Committed:
    """Order and stock decrement were both committed."""

    order_id: int

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.COMMITTED

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ItemNotFound:
    item_id: int

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.ITEM_NOT_FOUND

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class InsufficientStock:
    item_id: int
    requested: int
    available: int

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.INSUFFICIENT_STOCK

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class TransactionFailed:
    """Unit of work was rolled back after an infrastructure failure."""

    cause: Exception

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.TRANSACTION_FAILED

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Committed, ItemNotFound, InsufficientStock, TransactionFailed]
