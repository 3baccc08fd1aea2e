"""Integration tests for high-level storefront flows."""

import pytest
from concurrent.futures import ThreadPoolExecutor, as_completed

from chaos import chaos_runner
from storefront.auth import AuthService
from storefront.catalog import CatalogService
from storefront.database import StorefrontDB
from storefront.order_coordinator import OrderPlacementCoordinator
from storefront.models.item import ItemUpdate
from storefront.models.outcome import Committed, InsufficientStock
from storefront.models.user import Role
from storefront.exceptions.storefront_exception import PermissionDeniedError


@pytest.fixture
def storefront():
    """Provide a seeded store with an admin, two shoppers and a small catalog."""
    database = StorefrontDB(lock_timeout=2.0)
    auth = AuthService(database, iterations=1000)
    catalog = CatalogService(database)
    coordinator = OrderPlacementCoordinator(
        database, inventory=catalog.inventory, ledger=catalog.ledger
    )

    auth.register_user("root", "root-pw", role=Role.ADMIN)
    auth.register_user("alice", "alice-pw")
    auth.register_user("bob", "bob-pw")
    admin = auth.login_admin("root", "root-pw")
    catalog.add_item(admin, "Keyboard", 89.99, 10)
    catalog.add_item(admin, "Mouse", 24.50, 5)

    return {
        "db": database,
        "auth": auth,
        "catalog": catalog,
        "coordinator": coordinator,
        "admin": admin,
    }


class TestShoppingWorkflows:
    """Test complete flows from login to reports."""

    def test_login_browse_order_and_view_cart(self, storefront):
        """Test a shopper's full session."""
        alice = storefront["auth"].login("alice", "alice-pw")
        keyboard = storefront["catalog"].view_items()[0]

        outcome = storefront["coordinator"].place_order(alice, keyboard["id"], 2)

        assert isinstance(outcome, Committed)
        cart = storefront["catalog"].view_cart(alice)
        assert [(row["item"], row["quantity"]) for row in cart] == [("Keyboard", 2)]
        assert storefront["catalog"].view_items()[0]["stock"] == 8

    def test_admin_login_cannot_place_orders(self, storefront):
        """Test that admin sessions are kept out of order placement."""
        with pytest.raises(PermissionDeniedError):
            storefront["coordinator"].place_order(storefront["admin"], 1, 1)

    def test_admin_restock_then_orders_continue(self, storefront):
        """Test that a restock between orders is respected."""
        alice = storefront["auth"].login("alice", "alice-pw")
        coordinator = storefront["coordinator"]
        mouse_id = storefront["catalog"].view_items()[1]["id"]

        assert coordinator.place_order(alice, mouse_id, 5).ok
        assert isinstance(coordinator.place_order(alice, mouse_id, 1), InsufficientStock)

        storefront["catalog"].update_item(storefront["admin"], mouse_id, ItemUpdate(stock=3))
        assert coordinator.place_order(alice, mouse_id, 3).ok
        assert storefront["catalog"].view_items()[1]["stock"] == 0

    def test_admin_reports_cover_all_shoppers(self, storefront):
        """Test that the admin order report includes every shopper."""
        auth, coordinator = storefront["auth"], storefront["coordinator"]
        alice = auth.login("alice", "alice-pw")
        bob = auth.login("bob", "bob-pw")
        coordinator.place_order(alice, 1, 1)
        coordinator.place_order(bob, 2, 1)

        report = storefront["catalog"].view_all_orders(storefront["admin"])

        assert [row["user"] for row in report] == ["bob", "alice"]
        assert [row["username"] for row in storefront["catalog"].view_users(storefront["admin"])] == [
            "root",
            "alice",
            "bob",
        ]


class TestConcurrentShoppers:
    """Test many sessions ordering at once."""

    def test_stock_never_oversold(self, storefront):
        """Test that concurrent shoppers never buy more than was stocked."""
        auth, coordinator = storefront["auth"], storefront["coordinator"]
        sessions = [auth.login("alice", "alice-pw"), auth.login("bob", "bob-pw")]

        with ThreadPoolExecutor(max_workers=10) as executor:
            futures = [
                executor.submit(coordinator.place_order, sessions[i % 2], 2, 1)
                for i in range(20)
            ]
            outcomes = [future.result() for future in as_completed(futures)]

        assert sum(1 for o in outcomes if isinstance(o, Committed)) == 5
        assert sum(1 for o in outcomes if isinstance(o, InsufficientStock)) == 15
        assert storefront["catalog"].view_items()[1]["stock"] == 0
        assert storefront["db"].order_count() == 5

    def test_catalog_update_races_with_orders(self, storefront):
        """Test that stock edits and orders serialize on the same row."""
        auth, coordinator = storefront["auth"], storefront["coordinator"]
        catalog, admin = storefront["catalog"], storefront["admin"]
        alice = auth.login("alice", "alice-pw")

        with ThreadPoolExecutor(max_workers=6) as executor:
            orders = [executor.submit(coordinator.place_order, alice, 1, 1) for _ in range(5)]
            renames = [
                executor.submit(catalog.update_item, admin, 1, ItemUpdate(name=f"Keyboard v{i}"))
                for i in range(3)
            ]
            assert all(f.result().ok for f in orders)
            assert all(f.result() for f in renames)

        assert catalog.view_items()[0]["stock"] == 5
        assert catalog.view_items()[0]["name"].startswith("Keyboard v")


class TestChaosRunner:
    def test_short_chaos_run_keeps_invariant(self):
        """Test that the chaos stress run finishes with the stock invariant intact."""
        assert chaos_runner.run(duration=0.5, workers=4, seed=5) is True
