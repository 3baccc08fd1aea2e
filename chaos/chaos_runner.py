import time
import random
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from storefront.database import StorefrontDB
from storefront.inventory_store import InventoryStore
from storefront.order_ledger import OrderLedger
from storefront.order_coordinator import OrderPlacementCoordinator
from storefront.models.user import Role, Session
from .chaos_config import ChaosConfig
from .chaos_proxy import ChaosInventoryStore, ChaosOrderLedger


def run(duration: float = 10.0, workers: int = 8, seed: int = None):
    #initalize the chaos configuration
    chaos = ChaosConfig(enabled=True, failure_rate=0.2, delay_chance=0.3, max_delay=0.2, seed=seed)

    #initialize the store and seed the catalog
    real_db = StorefrontDB(lock_timeout=1.0)
    inventory = InventoryStore(real_db)
    initial_stock = {}
    for i in range(5):
        item = inventory.add_item(f"item_{i}", 1.0 + i, 40)
        initial_stock[item.id] = item.stock

    #wrap the collaborators so every order runs through chaos
    coordinator = OrderPlacementCoordinator(
        real_db,
        inventory=ChaosInventoryStore(inventory, chaos),
        ledger=ChaosOrderLedger(OrderLedger(real_db), chaos),
    )

    sessions = [Session(user_id=i, username=f"user_{i}", role=Role.USER) for i in range(1, 4)]
    item_ids = list(initial_stock)
    outcomes = Counter()
    outcomes_lock = threading.Lock()
    rng = random.Random(seed)
    start_time = time.time()

    def worker():
        while time.time() - start_time < duration:
            outcome = coordinator.place_order(
                rng.choice(sessions), rng.choice(item_ids), rng.randint(1, 4)
            )
            with outcomes_lock:
                outcomes[outcome.status.value] += 1
            print(f"[CHAOS TEST] {outcome}")

    with ThreadPoolExecutor(max_workers=workers) as executor:
        for future in [executor.submit(worker) for _ in range(workers)]:
            future.result()

    #verify the stock invariant: initial stock minus committed quantities
    violations = []
    for item_id, stock in initial_stock.items():
        ordered = sum(order.quantity for order in real_db.list_orders() if order.item_id == item_id)
        current = real_db.read_item(item_id).stock
        if stock - ordered != current or current < 0:
            violations.append(item_id)

    print("[CHAOS TEST] Final database state:")
    real_db.print_status()
    print(f"[CHAOS TEST] Outcomes: {dict(outcomes)}")
    if violations:
        print(f"[CHAOS TEST] Stock invariant VIOLATED for items: {violations}")
    else:
        print("[CHAOS TEST] Stock invariant holds for every item.")

    print("\n[CHAOS TEST] Chaos metrics:")
    chaos.print_metrics()
    return not violations


if __name__ == "__main__":
    run()
