"""Main entry point for the storefront order placement demo."""

from concurrent.futures import ThreadPoolExecutor

from chaos.chaos_config import ChaosConfig
from chaos.chaos_proxy import ChaosInventoryStore
from storefront.auth import AuthService
from storefront.catalog import CatalogService
from storefront.database import StorefrontDB
from storefront.models.item import ItemUpdate
from storefront.models.user import Role
from storefront.order_coordinator import OrderPlacementCoordinator
from storefront.exceptions.storefront_exception import AuthenticationError


def main():
    """Walk through browsing, ordering and admin maintenance on a shared stock pool."""
    store_db = StorefrontDB(lock_timeout=5.0)
    auth = AuthService(store_db)
    catalog = CatalogService(store_db)
    coordinator = OrderPlacementCoordinator(store_db)

    print("=== STOREFRONT ===\n")

    # Test 1: Accounts and initial catalog
    print("1. Registering accounts and loading the catalog...")
    auth.register_user("admin", "s3cret-admin", email="admin@example.com", role=Role.ADMIN)
    auth.register_user("alice", "alice-pw", email="alice@example.com")
    auth.register_user("bob", "bob-pw", email="bob@example.com")

    admin = auth.login_admin("admin", "s3cret-admin")
    keyboard = catalog.add_item(admin, "Mechanical Keyboard", 89.99, 10)
    mouse = catalog.add_item(admin, "Wireless Mouse", 24.50, 5)
    monitor = catalog.add_item(admin, "27in Monitor", 229.00, 2)
    print("✓ Catalog loaded")
    store_db.print_status()

    # Test 2: Regular user places orders
    print("2. Alice browses and places an order...")
    alice = auth.login("alice", "alice-pw")
    for row in catalog.view_items():
        print(f"   {row['id']:<4} {row['name']:<25} {row['price']:>8.2f} {row['stock']:>5}")

    outcome = coordinator.place_order(alice, keyboard.id, 2)
    print(f"   Outcome: {outcome}")

    # Test 3: Rejections leave no trace
    print("3. Orders that must be rejected...")
    print(f"   Too many monitors: {coordinator.place_order(alice, monitor.id, 3)}")
    print(f"   Unknown item: {coordinator.place_order(alice, 999, 1)}")
    try:
        auth.login_admin("alice", "alice-pw")
    except AuthenticationError as e:
        print(f"   Admin login refused: {e}")
    store_db.print_status()

    # Test 4: Fault between order insert and stock decrement
    print("4. Simulating a storage fault during stock decrement...")
    chaos = ChaosConfig(
        enabled=True, failure_rate=0.0, delay_chance=0.0, fail_on=["decrement_stock"]
    )
    faulty = OrderPlacementCoordinator(
        store_db, inventory=ChaosInventoryStore(coordinator.inventory, chaos)
    )
    outcome = faulty.place_order(alice, mouse.id, 1)
    print(f"   Outcome: {outcome}")
    print("✓ Order insert and stock decrement were both rolled back")
    store_db.print_status()

    # Test 5: Two shoppers race for the last monitors
    print("5. Alice and Bob race for the last 2 monitors (each wants 2)...")
    bob = auth.login("bob", "bob-pw")
    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [
            executor.submit(coordinator.place_order, session, monitor.id, 2)
            for session in (alice, bob)
        ]
        for future in futures:
            print(f"   Outcome: {future.result()}")
    store_db.print_status()

    # Test 6: Admin maintenance and reports
    print("6. Admin restocks monitors and reviews orders...")
    catalog.update_item(admin, monitor.id, ItemUpdate(stock=4, price=219.00))
    for row in catalog.view_all_orders(admin):
        print(f"   #{row['order_id']:<3} {row['user']:<8} {row['item']:<25} x{row['quantity']}")
    for row in catalog.view_users(admin):
        print(f"   user {row['id']}: {row['username']} ({row['role']})")

    print("\n=== ALICE'S CART ===")
    for row in catalog.view_cart(alice):
        print(f"   {row['item']:<25} {row['price']:>8.2f} x{row['quantity']} {row['date']}")

    print("\n=== FINAL SYSTEM STATUS ===")
    store_db.print_status()


if __name__ == "__main__":
    main()
