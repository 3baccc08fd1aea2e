"""Append-only order ledger."""

from typing import List, Optional

from .models.order import Order


class OrderLedger:
    """Records orders; inserts are staged in the caller's transaction."""

    def __init__(self, database):
        self.db = database

    def insert_order(self, txn_id: str, user_id: int, item_id: int, quantity: int) -> int:
        """
        Append an order within a transaction.

        The order becomes visible, with its server-assigned timestamp, only
        when the transaction commits.

        Returns:
            int: The id assigned to the new order
        """
        return self.db.stage_order_insert(txn_id, user_id, item_id, quantity)

    def get_order(self, order_id: int) -> Optional[Order]:
        for order in self.db.list_orders():
            if order.id == order_id:
                return order
        return None

    def list_orders(self) -> List[Order]:
        return self.db.list_orders()

    def orders_for_user(self, user_id: int) -> List[Order]:
        return [order for order in self.db.list_orders() if order.user_id == user_id]

    def orders_for_item(self, item_id: int) -> List[Order]:
        return [order for order in self.db.list_orders() if order.item_id == item_id]

    def count(self) -> int:
        return self.db.order_count()
