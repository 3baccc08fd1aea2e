"""Inventory operations: locked stock reads, decrements and catalog upkeep."""

import copy
from typing import Callable, List, Optional, Tuple

from .models.item import Item, ItemUpdate, validate_item_fields
from .exceptions.storefront_exception import (
    InsufficientStockError,
    InvalidItemError,
    ItemNotFoundError,
    TransactionError,
)


class InventoryStore:
    """
    Authoritative stock counts per item.

    Stock reads used for ordering take the item's exclusive row lock, which is
    then held until the surrounding transaction commits or rolls back.
    """

    def __init__(self, database):
        """
        Initialize inventory operations with a database instance.

        Args:
            database: StorefrontDB instance
        """
        self.db = database

    def lock_and_read_stock(self, txn_id: str, item_id: int) -> Tuple[int, bool]:
        """
        Lock an item row and read its stock within a transaction.

        Args:
            txn_id: Transaction ID
            item_id: Item to lock

        Returns:
            tuple: (stock, found); (0, False) if no such item exists

        Raises:
            LockTimeoutError: If the row lock is not granted in time
            TransactionError: If the transaction is not active
        """
        self.db.lock_row(txn_id, item_id)

        item = self.db.read_item(item_id, txn_id)
        if item is None:
            return 0, False
        return item.stock, True

    def decrement_stock(self, txn_id: str, item_id: int, amount: int) -> bool:
        """
        Decrement stock for an item within a transaction.

        The caller must already hold the row lock via ``lock_and_read_stock``
        and have checked that stock is sufficient.

        Raises:
            ItemNotFoundError: If the item no longer exists
            InsufficientStockError: If stock would go negative
            TransactionError: If the row lock is not held
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise TransactionError(f"Decrement amount must be a positive integer: {amount!r}")
        if not self.db.holds_lock(txn_id, item_id):
            raise TransactionError(
                f"Transaction {txn_id} does not hold the lock on item {item_id}"
            )

        current_item = self.db.read_item(item_id, txn_id)
        if current_item is None:
            raise ItemNotFoundError(item_id)

        new_stock = current_item.stock - amount

        # Prevent negative inventory
        if new_stock < 0:
            raise InsufficientStockError(item_id, amount, current_item.stock)

        updated_item = copy.copy(current_item)
        updated_item.stock = new_stock
        self.db.stage_item_write(txn_id, item_id, updated_item)

        print(f"Stock staged for item {item_id}: {current_item.stock} -> {new_stock}")
        return True

    # ---- catalog maintenance ----

    def _run_in_transaction(self, item_id: int, work: Callable[[str], object]):
        """Run ``work`` under the item's row lock inside its own transaction."""
        txn_id = self.db.begin_transaction()
        try:
            self.db.lock_row(txn_id, item_id)
            result = work(txn_id)
        except Exception:
            self.db.rollback_transaction(txn_id)
            raise

        if result is False:
            self.db.rollback_transaction(txn_id)
            return False

        if not self.db.commit_transaction(txn_id):
            raise TransactionError(f"Transaction {txn_id} on item {item_id} was not committed")
        return result

    def add_item(self, name: str, price: float, stock: int) -> Item:
        """Add a new item to the catalog and return it."""
        if name is None or price is None or stock is None:
            raise InvalidItemError("Name, price and stock are all required")
        validate_item_fields(name, price, stock)

        item = Item(id=self.db.next_item_id(), name=name.strip(), price=float(price), stock=stock)
        self._run_in_transaction(
            item.id, lambda txn_id: self.db.stage_item_write(txn_id, item.id, item)
        )

        print(f"Item {item.id} added: {item.name} ({item.stock} in stock)")
        return item

    def update_item(self, item_id: int, update: ItemUpdate) -> bool:
        """
        Apply the provided fields of ``update`` to an item.

        Returns:
            bool: True if updated, False if the update carried no changes

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        update.validate()
        if update.is_empty():
            print("No changes provided.")
            return False

        def work(txn_id):
            current_item = self.db.read_item(item_id, txn_id)
            if current_item is None:
                raise ItemNotFoundError(item_id)
            return self.db.stage_item_write(txn_id, item_id, update.apply_to(current_item))

        self._run_in_transaction(item_id, work)
        print(f"Item {item_id} updated.")
        return True

    def delete_item(self, item_id: int) -> bool:
        """Delete an item; returns False if it does not exist."""
        deleted = self._run_in_transaction(
            item_id, lambda txn_id: self.db.stage_item_delete(txn_id, item_id)
        )
        if deleted:
            print(f"Item {item_id} deleted.")
        else:
            print(f"Item {item_id} not found or could not be deleted.")
        return deleted

    def get_item(self, item_id: int) -> Optional[Item]:
        return self.db.read_item(item_id)

    def get_stock(self, item_id: int) -> Optional[int]:
        item = self.db.read_item(item_id)
        return item.stock if item else None

    def list_items(self) -> List[Item]:
        return self.db.list_items()
