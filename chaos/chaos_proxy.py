from typing import Callable, Any, Tuple
from .chaos_config import ChaosConfig
from storefront.inventory_store import InventoryStore
from storefront.order_ledger import OrderLedger

class ChaosProxy:

    """Base proxy that injects chaos before delegating to a wrapped collaborator.
    Operations not overridden by a subclass pass straight through to the
    wrapped object.
    """

    """Initializes the ChaosProxy with a collaborator and chaos configuration.
    Args:
        target: The collaborator to wrap.
        config (ChaosConfig): The configuration for chaos operations.
    """
    def __init__(self, target: Any, config: ChaosConfig):
        self.target = target
        self.chaos = config

    def _with_chaos(self, operation: Callable, *args, context: str, **kwargs) -> Any:
        self.chaos.maybe_fail(context)
        self.chaos.maybe_delay(context)
        return operation(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.target, name)

    def print_chaos_metrics(self):
        return self.chaos.print_metrics()


class ChaosInventoryStore(ChaosProxy):

    """Inventory store with chaos injected into the order placement path."""

    def __init__(self, store: InventoryStore, config: ChaosConfig):
        super().__init__(store, config)

    def lock_and_read_stock(self, txn_id: str, item_id: int) -> Tuple[int, bool]:
        """Locked stock read with chaos injection."""
        return self._with_chaos(
            self.target.lock_and_read_stock, txn_id, item_id, context="lock_and_read_stock"
        )

    def decrement_stock(self, txn_id: str, item_id: int, amount: int) -> bool:
        """Stock decrement with chaos injection."""
        return self._with_chaos(
            self.target.decrement_stock, txn_id, item_id, amount, context="decrement_stock"
        )


class ChaosOrderLedger(ChaosProxy):

    """Order ledger with chaos injected into inserts."""

    def __init__(self, ledger: OrderLedger, config: ChaosConfig):
        super().__init__(ledger, config)

    def insert_order(self, txn_id: str, user_id: int, item_id: int, quantity: int) -> int:
        """Order insert with chaos injection."""
        return self._with_chaos(
            self.target.insert_order, txn_id, user_id, item_id, quantity, context="insert_order"
        )
