"""Unit tests for data models."""

import pytest

from storefront.models.item import Item, ItemUpdate
from storefront.models.outcome import (
    Committed,
    InsufficientStock,
    ItemNotFound,
    OutcomeStatus,
    TransactionFailed,
)
from storefront.models.user import Role, Session
from storefront.exceptions.storefront_exception import (
    InvalidItemError,
    InvalidOrderError,
    LockTimeoutError,
    StorefrontError,
    TransactionError,
)


class TestItemUpdate:
    """Tests for the optional-fields item update."""

    def test_empty_update(self):
        """Test that an update with no fields reports empty."""
        assert ItemUpdate().is_empty()
        assert not ItemUpdate(stock=0).is_empty()

    def test_apply_only_provided_fields(self):
        """Test that unset fields keep the item's values."""
        item = Item(id=1, name="Widget", price=2.5, stock=10)

        updated = ItemUpdate(name=" Gizmo ", stock=0).apply_to(item)

        assert updated == Item(id=1, name="Gizmo", price=2.5, stock=0)
        assert item.name == "Widget"

    @pytest.mark.parametrize(
        "update",
        [ItemUpdate(name="  "), ItemUpdate(price=-1), ItemUpdate(stock=-2), ItemUpdate(stock=False)],
    )
    def test_validate_rejects_bad_fields(self, update):
        """Test that invalid provided fields fail validation."""
        with pytest.raises(InvalidItemError):
            update.validate()

    def test_to_dict(self):
        """Test the item listing representation."""
        assert Item(1, "Widget", 2.5, 0).to_dict() == {
            "id": 1,
            "name": "Widget",
            "price": 2.5,
            "stock": 0,
            "in_stock": False,
        }


class TestOutcomes:
    """Tests for order placement outcomes."""

    def test_statuses(self):
        """Test that each outcome reports its status."""
        assert Committed(order_id=1).status == OutcomeStatus.COMMITTED
        assert ItemNotFound(item_id=1).status == OutcomeStatus.ITEM_NOT_FOUND
        assert InsufficientStock(1, 3, 2).status == OutcomeStatus.INSUFFICIENT_STOCK
        assert (
            TransactionFailed(cause=RuntimeError("x")).status
            == OutcomeStatus.TRANSACTION_FAILED
        )

    def test_only_committed_is_ok(self):
        """Test the ok flag."""
        assert Committed(order_id=1).ok
        assert not ItemNotFound(item_id=1).ok
        assert not InsufficientStock(1, 3, 2).ok
        assert not TransactionFailed(cause=RuntimeError("x")).ok


class TestSession:
    def test_is_admin(self):
        """Test the admin flag on sessions."""
        assert Session(1, "root", Role.ADMIN).is_admin
        assert not Session(2, "alice", Role.USER).is_admin


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_validation_errors_are_value_errors(self):
        """Test that validation errors can be caught as ValueError."""
        assert issubclass(InvalidOrderError, ValueError)
        assert issubclass(InvalidItemError, ValueError)

    def test_lock_timeout_is_transaction_error(self):
        """Test that lock timeouts are infrastructure failures."""
        error = LockTimeoutError("txn_1", 5, 0.5)

        assert isinstance(error, TransactionError)
        assert isinstance(error, StorefrontError)
        assert "txn_1" in error.message
        assert str(error).startswith("LockTimeoutError: ")
