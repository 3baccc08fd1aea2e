"""Catalog listing, admin item maintenance and order/user reports."""

import time
from typing import Any, Dict, List, Optional

from .inventory_store import InventoryStore
from .order_ledger import OrderLedger
from .models.item import Item, ItemUpdate
from .models.user import Session
from .exceptions.storefront_exception import PermissionDeniedError

DELETED_ITEM_NAME = "<deleted>"


def _format_timestamp(timestamp: float) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(timestamp))


class CatalogService:
    """Request/response glue over the store for browsing and administration."""

    def __init__(self, database, inventory=None, ledger=None):
        self.db = database
        self.inventory = inventory if inventory is not None else InventoryStore(database)
        self.ledger = ledger if ledger is not None else OrderLedger(database)

    @staticmethod
    def _require_admin(session: Optional[Session]) -> None:
        if not isinstance(session, Session) or not session.is_admin:
            raise PermissionDeniedError("Admin session required")

    @staticmethod
    def _require_user(session: Optional[Session]) -> None:
        if not isinstance(session, Session) or session.is_admin:
            raise PermissionDeniedError("You must be logged in as a user to view your cart")

    def view_items(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self.inventory.list_items()]

    def view_cart(self, session: Session) -> List[Dict[str, Any]]:
        """The session user's orders joined with item details, newest first."""
        self._require_user(session)

        items = {item.id: item for item in self.inventory.list_items()}
        cart = []
        for order in reversed(self.ledger.orders_for_user(session.user_id)):
            item = items.get(order.item_id)
            cart.append(
                {
                    "order_id": order.id,
                    "item": item.name if item else DELETED_ITEM_NAME,
                    "price": item.price if item else None,
                    "quantity": order.quantity,
                    "date": _format_timestamp(order.created_at),
                }
            )
        return cart

    # ---- admin ----

    def add_item(self, session: Session, name: str, price: float, stock: int) -> Item:
        self._require_admin(session)
        return self.inventory.add_item(name, price, stock)

    def update_item(self, session: Session, item_id: int, update: ItemUpdate) -> bool:
        self._require_admin(session)
        return self.inventory.update_item(item_id, update)

    def delete_item(self, session: Session, item_id: int) -> bool:
        self._require_admin(session)
        return self.inventory.delete_item(item_id)

    def view_all_orders(self, session: Session) -> List[Dict[str, Any]]:
        """Every order joined with username and item name, newest first."""
        self._require_admin(session)

        items = {item.id: item for item in self.inventory.list_items()}
        users = {user.id: user for user in self.db.list_users()}
        report = []
        for order in reversed(self.ledger.list_orders()):
            item = items.get(order.item_id)
            user = users.get(order.user_id)
            report.append(
                {
                    "order_id": order.id,
                    "user": user.username if user else None,
                    "item": item.name if item else DELETED_ITEM_NAME,
                    "quantity": order.quantity,
                    "date": _format_timestamp(order.created_at),
                }
            )
        return report

    def view_users(self, session: Session) -> List[Dict[str, Any]]:
        self._require_admin(session)
        return [
            {
                "id": user.id,
                "username": user.username,
                "email": user.email or "",
                "role": user.role.value,
            }
            for user in self.db.list_users()
        ]
