"""Unit tests for CatalogService."""

import pytest

from storefront.catalog import CatalogService, DELETED_ITEM_NAME
from storefront.database import StorefrontDB
from storefront.order_coordinator import OrderPlacementCoordinator
from storefront.models.item import ItemUpdate
from storefront.models.user import Role, Session
from storefront.exceptions.storefront_exception import (
    InvalidItemError,
    ItemNotFoundError,
    PermissionDeniedError,
)


@pytest.fixture
def database():
    return StorefrontDB(lock_timeout=0.5)


@pytest.fixture
def catalog(database):
    return CatalogService(database)


@pytest.fixture
def admin(database):
    user = database.insert_user("root", "hash", "00", role=Role.ADMIN)
    return Session(user_id=user.id, username=user.username, role=Role.ADMIN)


@pytest.fixture
def alice(database):
    user = database.insert_user("alice", "hash", "00", email="alice@example.com")
    return Session(user_id=user.id, username=user.username, role=Role.USER)


@pytest.fixture
def coordinator(database, catalog):
    return OrderPlacementCoordinator(database, inventory=catalog.inventory, ledger=catalog.ledger)


class TestBrowsing:
    """Tests for listing items."""

    def test_view_items(self, catalog, admin):
        """Test that anyone can list items with availability."""
        catalog.add_item(admin, "Widget", 2.5, 3)
        catalog.add_item(admin, "Gadget", 9.0, 0)

        rows = catalog.view_items()

        assert [row["name"] for row in rows] == ["Widget", "Gadget"]
        assert [row["in_stock"] for row in rows] == [True, False]

    def test_view_items_empty(self, catalog):
        """Test listing an empty catalog."""
        assert catalog.view_items() == []


class TestAdminMaintenance:
    """Tests for admin-only catalog operations."""

    def test_add_update_delete(self, catalog, admin):
        """Test the full item maintenance cycle."""
        item = catalog.add_item(admin, "Widget", 2.5, 3)

        assert catalog.update_item(admin, item.id, ItemUpdate(name="Widget Pro", stock=8))
        row = catalog.view_items()[0]
        assert (row["name"], row["price"], row["stock"]) == ("Widget Pro", 2.5, 8)

        assert catalog.delete_item(admin, item.id) is True
        assert catalog.view_items() == []

    def test_update_validation(self, catalog, admin):
        """Test that invalid update fields are rejected."""
        item = catalog.add_item(admin, "Widget", 2.5, 3)

        with pytest.raises(InvalidItemError):
            catalog.update_item(admin, item.id, ItemUpdate(stock=-1))

    def test_update_unknown_item(self, catalog, admin):
        """Test updating an item that does not exist."""
        with pytest.raises(ItemNotFoundError):
            catalog.update_item(admin, 404, ItemUpdate(price=1.0))

    @pytest.mark.parametrize(
        "operation",
        [
            lambda c, s: c.add_item(s, "Widget", 1.0, 1),
            lambda c, s: c.update_item(s, 1, ItemUpdate(price=1.0)),
            lambda c, s: c.delete_item(s, 1),
            lambda c, s: c.view_all_orders(s),
            lambda c, s: c.view_users(s),
        ],
    )
    def test_regular_user_denied(self, catalog, alice, operation):
        """Test that admin operations refuse regular sessions."""
        with pytest.raises(PermissionDeniedError):
            operation(catalog, alice)

    def test_missing_session_denied(self, catalog):
        """Test that admin operations refuse a missing session."""
        with pytest.raises(PermissionDeniedError):
            catalog.view_users(None)


class TestReports:
    """Tests for order and user reports."""

    def test_view_cart_newest_first(self, catalog, coordinator, admin, alice):
        """Test the user's cart joined with item details."""
        widget = catalog.add_item(admin, "Widget", 2.5, 10)
        gadget = catalog.add_item(admin, "Gadget", 9.0, 10)
        coordinator.place_order(alice, widget.id, 1)
        coordinator.place_order(alice, gadget.id, 2)

        cart = catalog.view_cart(alice)

        assert [row["item"] for row in cart] == ["Gadget", "Widget"]
        assert cart[0]["price"] == 9.0
        assert cart[0]["quantity"] == 2
        assert cart[0]["date"].endswith("Z")

    def test_view_cart_only_shows_own_orders(self, catalog, coordinator, database, admin, alice):
        """Test that other users' orders are not in the cart."""
        widget = catalog.add_item(admin, "Widget", 2.5, 10)
        bob_user = database.insert_user("bob", "hash", "00")
        bob = Session(user_id=bob_user.id, username="bob", role=Role.USER)
        coordinator.place_order(bob, widget.id, 1)

        assert catalog.view_cart(alice) == []
        assert len(catalog.view_cart(bob)) == 1

    def test_view_cart_requires_user_session(self, catalog, admin):
        """Test that admins and anonymous callers have no cart."""
        with pytest.raises(PermissionDeniedError):
            catalog.view_cart(admin)
        with pytest.raises(PermissionDeniedError):
            catalog.view_cart(None)

    def test_view_cart_with_deleted_item(self, catalog, coordinator, admin, alice):
        """Test that orders for deleted items are still reported."""
        widget = catalog.add_item(admin, "Widget", 2.5, 10)
        coordinator.place_order(alice, widget.id, 1)
        catalog.delete_item(admin, widget.id)

        row = catalog.view_cart(alice)[0]
        assert row["item"] == DELETED_ITEM_NAME
        assert row["price"] is None

    def test_view_all_orders(self, catalog, coordinator, admin, alice):
        """Test the admin order report."""
        widget = catalog.add_item(admin, "Widget", 2.5, 10)
        first = coordinator.place_order(alice, widget.id, 1)
        second = coordinator.place_order(alice, widget.id, 3)

        report = catalog.view_all_orders(admin)

        assert [row["order_id"] for row in report] == [second.order_id, first.order_id]
        assert all(row["user"] == "alice" for row in report)
        assert report[0]["item"] == "Widget"

    def test_view_users_hides_password_material(self, catalog, admin, alice):
        """Test the admin user report."""
        users = catalog.view_users(admin)

        assert users == [
            {"id": admin.user_id, "username": "root", "email": "", "role": "admin"},
            {"id": alice.user_id, "username": "alice", "email": "alice@example.com", "role": "user"},
        ]
