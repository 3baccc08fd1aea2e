"""Main database class implementing transactional tables with row locks."""

import copy
import time
import threading
from typing import Dict, Any, List, Optional
from .transaction_manager import TransactionManager
from .lock_manager import LockManager
from .models.item import Item
from .models.order import Order
from .models.user import User, Role
from .exceptions.storefront_exception import (
    InvalidCredentialsError,
    RollbackError,
    TransactionError,
)


class StorefrontDB:
    """
    In-memory transactional store backing the storefront.

    Tables: ``items`` (keyed by item id), ``orders`` (append-only ledger in
    commit order) and ``users``.

    - Writes are staged in the transaction's operation log and applied
      atomically at commit, so readers outside the transaction only ever see
      committed state.
    - Writes to an item row require the transaction to hold that row's
      exclusive lock.
    """

    def __init__(self, lock_timeout: float = 5.0):
        # Committed tables
        self.items: Dict[int, Item] = {}
        self.orders: List[Order] = []
        self.users: Dict[int, User] = {}

        # Guards table structure and id counters; never held while waiting on a row lock
        self.lock = threading.RLock()

        # Component managers
        self.transaction_manager = TransactionManager()
        self.lock_manager = LockManager()

        # Configuration
        self.lock_timeout = lock_timeout

        self.item_counter = 0
        self.order_counter = 0
        self.user_counter = 0
        self.last_order_timestamp = 0.0

    # ---- transaction boundary ----

    def begin_transaction(self) -> str:
        """Begin a new unit of work."""
        return self.transaction_manager.begin_transaction()

    def _require_active(self, txn_id: str) -> None:
        if not self.transaction_manager.is_transaction_active(txn_id):
            raise TransactionError(f"Transaction {txn_id} not found or not active")

    def commit_transaction(self, txn_id: str) -> bool:
        """
        Commit transaction using two-phase commit protocol.

        On failure the transaction is rolled back, the cause is kept on
        ``Transaction.failure`` and False is returned.

        Raises:
            RollbackError: If the commit failed and its rollback was not confirmed
        """
        with self.lock:
            txn = self.transaction_manager.get_transaction(txn_id)
            if not txn:
                print(f"Transaction {txn_id} not found for commit")
                return False

            try:
                # Phase 1: Prepare
                self.transaction_manager.prepare_transaction(txn_id)

                self._apply_operations(txn.operations)

                # Phase 2: Commit
                self.transaction_manager.commit_transaction(txn_id)

            except Exception as e:
                print(f"Transaction {txn_id} failed during commit: {e}")
                txn.failure = e
                try:
                    rolled_back = self.rollback_transaction(txn_id)
                except Exception as rollback_error:
                    raise RollbackError(
                        f"Rollback of transaction {txn_id} failed: {rollback_error}"
                    ) from rollback_error
                if not rolled_back:
                    raise RollbackError(
                        f"Rollback of transaction {txn_id} could not be confirmed"
                    ) from e
                return False

            self.lock_manager.release_all(txn_id, txn.held_locks)
            return True

    def rollback_transaction(self, txn_id: str) -> bool:
        """Rollback transaction: discard staged writes and release row locks."""
        with self.lock:
            txn = self.transaction_manager.get_transaction(txn_id)
            if not txn:
                print(f"Transaction {txn_id} not found for rollback")
                return False

            print(f"Rolling back transaction {txn_id}")

            discarded = len(txn.operations)
            txn.operations.clear()
            self.transaction_manager.abort_transaction(txn_id)
            self.lock_manager.release_all(txn_id, txn.held_locks)

            print(
                f"Transaction {txn_id} rolled back successfully "
                f"({discarded} staged operations discarded)"
            )
            return True

    def _apply_operations(self, operations: List[Dict[str, Any]]) -> None:
        """Apply staged writes; every write is computed before any is applied."""
        item_writes: Dict[int, Optional[Item]] = {}
        new_orders: List[Order] = []
        last_timestamp = self.last_order_timestamp

        for operation in operations:
            if operation["table"] == "items":
                if operation["type"] == "delete":
                    item_writes[operation["key"]] = None
                else:
                    item_writes[operation["key"]] = copy.copy(operation["new_value"])

            elif operation["table"] == "orders":
                # Ledger timestamps never go backwards
                last_timestamp = max(time.time(), last_timestamp)
                row = operation["new_value"]
                new_orders.append(
                    Order(
                        id=operation["key"],
                        user_id=row["user_id"],
                        item_id=row["item_id"],
                        quantity=row["quantity"],
                        created_at=last_timestamp,
                    )
                )

            else:
                raise TransactionError(f"Unknown table: {operation['table']}")

        for item_id, item in item_writes.items():
            if item is None:
                self.items.pop(item_id, None)
            else:
                self.items[item_id] = item
        self.orders.extend(new_orders)
        self.last_order_timestamp = last_timestamp

    # ---- row locks ----

    def lock_row(self, txn_id: str, item_id: int) -> None:
        """Take the exclusive lock on an item row for the rest of the transaction."""
        self._require_active(txn_id)

        acquired = self.lock_manager.acquire(txn_id, item_id, self.lock_timeout)

        try:
            self.transaction_manager.add_held_lock(txn_id, item_id)
        except TransactionError:
            # Transaction ended while we were waiting
            if acquired:
                self.lock_manager.release(txn_id, item_id)
            raise

    def holds_lock(self, txn_id: str, item_id: int) -> bool:
        return self.lock_manager.owner(item_id) == txn_id

    # ---- items ----

    def next_item_id(self) -> int:
        with self.lock:
            self.item_counter += 1
            return self.item_counter

    def read_item(self, item_id: int, txn_id: Optional[str] = None) -> Optional[Item]:
        """
        Read an item row.

        Inside a transaction the transaction's own staged writes are visible;
        otherwise the committed row is returned. Always returns a copy.
        """
        with self.lock:
            if txn_id:
                self._require_active(txn_id)
                txn = self.transaction_manager.get_transaction(txn_id)
                for operation in reversed(txn.operations):
                    if operation["table"] == "items" and operation["key"] == item_id:
                        if operation["type"] == "delete":
                            return None
                        return copy.copy(operation["new_value"])

            item = self.items.get(item_id)
            return copy.copy(item) if item else None

    def _stage_item_operation(
        self, txn_id: str, item_id: int, op_type: str, new_value: Optional[Item]
    ) -> None:
        with self.lock:
            self._require_active(txn_id)
            if not self.holds_lock(txn_id, item_id):
                raise TransactionError(
                    f"Transaction {txn_id} must hold the lock on item {item_id} to write it"
                )

            operation = {
                "type": op_type,
                "table": "items",
                "key": item_id,
                "old_value": self.read_item(item_id, txn_id),
                "new_value": copy.copy(new_value),
                "timestamp": time.time(),
            }
            self.transaction_manager.add_operation(txn_id, operation)

    def stage_item_write(self, txn_id: str, item_id: int, item: Item) -> bool:
        """Stage an insert or update of an item row within a transaction."""
        self._stage_item_operation(txn_id, item_id, "put", item)
        print(f"PUT operation recorded in transaction {txn_id}: items[{item_id}] = {item}")
        return True

    def stage_item_delete(self, txn_id: str, item_id: int) -> bool:
        """Stage deletion of an item row within a transaction."""
        if self.read_item(item_id, txn_id) is None:
            return False

        self._stage_item_operation(txn_id, item_id, "delete", None)
        print(f"DELETE operation recorded in transaction {txn_id}: items[{item_id}]")
        return True

    def list_items(self) -> List[Item]:
        with self.lock:
            return [copy.copy(self.items[item_id]) for item_id in sorted(self.items)]

    # ---- orders ----

    def stage_order_insert(
        self, txn_id: str, user_id: int, item_id: int, quantity: int
    ) -> int:
        """Stage an order insert and return the id assigned to it."""
        with self.lock:
            self._require_active(txn_id)

            self.order_counter += 1
            order_id = self.order_counter

            operation = {
                "type": "insert",
                "table": "orders",
                "key": order_id,
                "old_value": None,
                "new_value": {
                    "user_id": user_id,
                    "item_id": item_id,
                    "quantity": quantity,
                },
                "timestamp": time.time(),
            }
            self.transaction_manager.add_operation(txn_id, operation)

            print(
                f"INSERT operation recorded in transaction {txn_id}: "
                f"orders[{order_id}] user={user_id} item={item_id} qty={quantity}"
            )
            return order_id

    def list_orders(self) -> List[Order]:
        with self.lock:
            return list(self.orders)

    def order_count(self) -> int:
        with self.lock:
            return len(self.orders)

    # ---- users ----

    def insert_user(
        self,
        username: str,
        password_hash: str,
        salt: str,
        email: Optional[str] = None,
        role: Role = Role.USER,
    ) -> User:
        with self.lock:
            if self.find_user(username) is not None:
                raise InvalidCredentialsError(f"Username {username!r} already exists")

            self.user_counter += 1
            user = User(
                id=self.user_counter,
                username=username,
                password_hash=password_hash,
                salt=salt,
                email=email,
                role=role,
            )
            self.users[user.id] = user
            return copy.copy(user)

    def find_user(self, username: str) -> Optional[User]:
        with self.lock:
            for user in self.users.values():
                if user.username == username:
                    return copy.copy(user)
            return None

    def get_user(self, user_id: int) -> Optional[User]:
        with self.lock:
            user = self.users.get(user_id)
            return copy.copy(user) if user else None

    def list_users(self) -> List[User]:
        with self.lock:
            return [copy.copy(self.users[user_id]) for user_id in sorted(self.users)]

    # ---- status ----

    def get_system_status(self) -> Dict[str, Any]:
        """Get current system status."""
        with self.lock:
            return {
                "items": len(self.items),
                "orders": len(self.orders),
                "users": len(self.users),
                "active_transactions": self.transaction_manager.get_active_transaction_count(),
                "held_locks": self.lock_manager.held_count(),
                "stock": {item_id: item.stock for item_id, item in self.items.items()},
            }

    def print_status(self) -> None:
        """Print current system status."""
        status = self.get_system_status()
        print("\n=== SYSTEM STATUS ===")
        print(f"Items: {status['items']}")
        print(f"Orders: {status['orders']}")
        print(f"Users: {status['users']}")
        print(f"Active transactions: {status['active_transactions']}")
        print(f"Held row locks: {status['held_locks']}")
        print(f"Stock levels: {status['stock']}")
        print("====================\n")
