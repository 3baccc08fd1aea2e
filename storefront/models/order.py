"""Order data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Order:
    """An immutable order ledger entry."""

    id: int
    user_id: int
    item_id: int
    quantity: int
    created_at: float
