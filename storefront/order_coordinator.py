"""Order placement: validate, lock, insert and decrement in one unit of work."""

from .inventory_store import InventoryStore
from .order_ledger import OrderLedger
from .models.outcome import (
    Committed,
    InsufficientStock,
    ItemNotFound,
    Outcome,
    TransactionFailed,
)
from .models.user import Session
from .exceptions.storefront_exception import (
    InvalidOrderError,
    PermissionDeniedError,
    RollbackError,
    TransactionError,
)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class OrderPlacementCoordinator:
    """
    Places orders against the shared stock pool.

    Each call is a single transaction:

    1. lock the item row and read its stock
    2. reject if the item is missing or stock is short
    3. insert the order
    4. decrement stock
    5. commit

    Any failure in steps 1-4 rolls the whole transaction back, so an order is
    never recorded without its stock decrement or the other way round. There
    are no internal retries; the caller decides whether to place the order
    again. Concurrent calls for the same item serialize on the row lock, calls
    for different items proceed independently.
    """

    def __init__(self, database, inventory=None, ledger=None):
        """
        Args:
            database: StorefrontDB providing the transaction boundary
            inventory: InventoryStore (defaults to one over ``database``)
            ledger: OrderLedger (defaults to one over ``database``)
        """
        self.db = database
        self.inventory = inventory if inventory is not None else InventoryStore(database)
        self.ledger = ledger if ledger is not None else OrderLedger(database)

    def place_order(self, session: Session, item_id: int, quantity: int) -> Outcome:
        """
        Place an order for ``quantity`` units of ``item_id`` on behalf of ``session``.

        Returns:
            Committed, ItemNotFound, InsufficientStock or TransactionFailed

        Raises:
            PermissionDeniedError: If the session is missing or belongs to an admin
            InvalidOrderError: If item id or quantity is not a positive integer
            RollbackError: If a rollback could not be confirmed
        """
        self._validate_request(session, item_id, quantity)

        txn_id = self.db.begin_transaction()
        try:
            stock, found = self.inventory.lock_and_read_stock(txn_id, item_id)

            if not found:
                print(f"Item {item_id} not found.")
                self._rollback(txn_id)
                return ItemNotFound(item_id=item_id)

            if stock < quantity:
                print(
                    f"Not enough stock available for item {item_id}. "
                    f"Available: {stock}, Requested: {quantity}"
                )
                self._rollback(txn_id)
                return InsufficientStock(item_id=item_id, requested=quantity, available=stock)

            order_id = self.ledger.insert_order(txn_id, session.user_id, item_id, quantity)
            self.inventory.decrement_stock(txn_id, item_id, quantity)

        except RollbackError:
            raise
        except Exception as e:
            print(f"Error placing order in transaction {txn_id}, rolling back: {e}")
            self._rollback(txn_id)
            return TransactionFailed(cause=e)

        txn = self.db.transaction_manager.get_transaction(txn_id)
        if not self.db.commit_transaction(txn_id):
            cause = txn.failure if txn is not None else None
            if cause is None:
                cause = TransactionError(f"Transaction {txn_id} could not be committed")
            return TransactionFailed(cause=cause)

        print(f"Order {order_id} placed successfully by user {session.user_id}.")
        return Committed(order_id=order_id)

    def _validate_request(self, session: Session, item_id: int, quantity: int) -> None:
        if not isinstance(session, Session):
            raise PermissionDeniedError("You must be logged in as a user to place orders")
        if session.is_admin:
            raise PermissionDeniedError("Admin sessions cannot place orders")
        if not _is_positive_int(item_id):
            raise InvalidOrderError(f"Item id must be a positive integer: {item_id!r}")
        if not _is_positive_int(quantity):
            raise InvalidOrderError(f"Quantity must be a positive integer: {quantity!r}")

    def _rollback(self, txn_id: str) -> None:
        """Roll back ``txn_id``; raises RollbackError unless the rollback is confirmed."""
        try:
            rolled_back = self.db.rollback_transaction(txn_id)
        except Exception as e:
            raise RollbackError(f"Rollback of transaction {txn_id} failed: {e}") from e

        if not rolled_back:
            raise RollbackError(f"Rollback of transaction {txn_id} could not be confirmed")
