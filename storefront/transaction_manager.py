"""Transaction management for ACID compliance."""

import time
import threading
from typing import Dict, Any, Optional
from .models.transaction import Transaction, TransactionState
from .exceptions.storefront_exception import TransactionError


class TransactionManager:
    """Manages units of work with a two-phase commit protocol."""

    def __init__(self):
        self.active_transactions: Dict[str, Transaction] = {}
        self.transaction_counter = 0
        self.lock = threading.RLock()

    def _generate_transaction_id(self) -> str:
        """Generate unique transaction ID."""
        self.transaction_counter += 1
        return f"txn_{self.transaction_counter}_{int(time.time() * 1000)}"

    def begin_transaction(self) -> str:
        """Begin a new unit of work."""
        with self.lock:
            txn_id = self._generate_transaction_id()

            transaction = Transaction(
                id=txn_id,
                state=TransactionState.ACTIVE,
                operations=[],
                timestamp=time.time(),
            )

            self.active_transactions[txn_id] = transaction
            print(f"Transaction {txn_id} started")
            return txn_id

    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.active_transactions.get(txn_id)

    def is_transaction_active(self, txn_id: str) -> bool:
        """Check if transaction exists and is active."""
        txn = self.get_transaction(txn_id)
        return txn is not None and txn.state == TransactionState.ACTIVE

    def _get_active(self, txn_id: str) -> Transaction:
        if txn_id not in self.active_transactions:
            raise TransactionError(f"Transaction {txn_id} not found")

        txn = self.active_transactions[txn_id]
        if txn.state != TransactionState.ACTIVE:
            raise TransactionError(f"Transaction {txn_id} is not in active state")
        return txn

    def add_operation(self, txn_id: str, operation: Dict[str, Any]) -> None:
        """Add operation to transaction log."""
        with self.lock:
            self._get_active(txn_id).operations.append(operation)

    def add_held_lock(self, txn_id: str, key: Any) -> None:
        """Record a row lock as owned by the transaction."""
        with self.lock:
            self._get_active(txn_id).held_locks.add(key)

    def prepare_transaction(self, txn_id: str) -> bool:
        """Phase 1 of two-phase commit: prepare transaction."""
        with self.lock:
            txn = self._get_active(txn_id)
            print(f"Phase 1: Preparing transaction {txn_id}")
            txn.state = TransactionState.PREPARING

            self._validate_transaction(txn)
            return True

    def commit_transaction(self, txn_id: str) -> bool:
        """Phase 2 of two-phase commit: commit transaction."""
        with self.lock:
            if txn_id not in self.active_transactions:
                raise TransactionError(f"Transaction {txn_id} not found")

            txn = self.active_transactions[txn_id]
            if txn.state != TransactionState.PREPARING:
                raise TransactionError(f"Transaction {txn_id} was not prepared")

            print(f"Phase 2: Committing transaction {txn_id}")
            txn.state = TransactionState.COMMITTED

            del self.active_transactions[txn_id]
            print(f"Transaction {txn_id} committed successfully")
            return True

    def abort_transaction(self, txn_id: str) -> bool:
        """Abort transaction and mark as aborted."""
        with self.lock:
            if txn_id not in self.active_transactions:
                return False

            txn = self.active_transactions[txn_id]
            txn.state = TransactionState.ABORTED
            del self.active_transactions[txn_id]
            return True

    def get_active_transaction_count(self) -> int:
        """Get count of active transactions."""
        return len(self.active_transactions)

    def _validate_transaction(self, txn: Transaction) -> bool:
        """Validate staged writes before commit (ACID consistency)."""
        for operation in txn.operations:
            table = operation["table"]
            key = operation["key"]
            value = operation.get("new_value")

            if table == "items" and operation["type"] == "put":
                if value is None:
                    raise TransactionError(f"Item {key} cannot be stored as None")
                if isinstance(value.stock, bool) or not isinstance(value.stock, int):
                    raise TransactionError(f"Stock for item {key} must be an integer")
                if value.stock < 0:
                    raise TransactionError(
                        f"Stock for item {key} cannot be negative: {value.stock}"
                    )
                if value.price < 0:
                    raise TransactionError(
                        f"Price for item {key} cannot be negative: {value.price}"
                    )

            elif table == "orders":
                quantity = value["quantity"]
                if isinstance(quantity, bool) or not isinstance(quantity, int):
                    raise TransactionError(f"Order {key} quantity must be an integer")
                if quantity <= 0:
                    raise TransactionError(
                        f"Order {key} quantity must be positive: {quantity}"
                    )

        return True
