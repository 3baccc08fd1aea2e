"""Exception hierarchy for the storefront."""


class StorefrontError(Exception):
    """Base class for all exceptions raised by the storefront."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{self.__class__.__name__}: {self.message}"


class InvalidOrderError(StorefrontError, ValueError):
    """Order request rejected before any transaction begins."""


class InvalidItemError(StorefrontError, ValueError):
    """Catalog item fields failed validation."""


class ItemNotFoundError(StorefrontError):
    """Referenced item does not exist."""

    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class InsufficientStockError(StorefrontError):
    """A decrement would drive stock below zero."""

    def __init__(self, item_id, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for item {item_id}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class TransactionError(StorefrontError):
    """Unit of work could not proceed (unknown, inactive or invalid)."""


class LockTimeoutError(TransactionError):
    """Exclusive row lock was not granted within the timeout."""

    def __init__(self, txn_id: str, key, timeout: float):
        super().__init__(
            f"Transaction {txn_id} timed out after {timeout}s waiting for lock on {key}"
        )
        self.txn_id = txn_id
        self.key = key
        self.timeout = timeout


class RollbackError(StorefrontError):
    """Rollback of a unit of work could not be confirmed."""


class AuthenticationError(StorefrontError):
    """Submitted credentials were rejected."""


class InvalidCredentialsError(StorefrontError, ValueError):
    """Credentials are malformed or clash with an existing account."""


class PermissionDeniedError(StorefrontError):
    """Session is not allowed to perform the operation."""
