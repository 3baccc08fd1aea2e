"""Catalog item data models."""

from dataclasses import dataclass
from typing import Optional

from ..exceptions.storefront_exception import InvalidItemError


@dataclass
class Item:
    """A catalog item and its authoritative stock count."""

    id: int
    name: str
    price: float
    stock: int

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "stock": self.stock,
            "in_stock": self.stock > 0,
        }


def validate_item_fields(
    name: Optional[str] = None,
    price: Optional[float] = None,
    stock: Optional[int] = None,
) -> None:
    """Validate whichever item fields are given; None means not provided."""
    if name is not None and not name.strip():
        raise InvalidItemError("Item name cannot be blank")
    if price is not None:
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise InvalidItemError(f"Price must be a number: {price!r}")
        if price < 0:
            raise InvalidItemError(f"Price cannot be negative: {price}")
    if stock is not None:
        if isinstance(stock, bool) or not isinstance(stock, int):
            raise InvalidItemError(f"Stock must be an integer: {stock!r}")
        if stock < 0:
            raise InvalidItemError(f"Stock cannot be negative: {stock}")


@dataclass
class ItemUpdate:
    """
    Partial update of a catalog item.

    Every field is independently optional; only the fields that are set are
    applied to the stored item.
    """

    name: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None

    def is_empty(self) -> bool:
        return self.name is None and self.price is None and self.stock is None

    def validate(self) -> None:
        validate_item_fields(self.name, self.price, self.stock)

    def apply_to(self, item: Item) -> Item:
        """Return a copy of ``item`` with the provided fields replaced."""
        return Item(
            id=item.id,
            name=self.name.strip() if self.name is not None else item.name,
            price=float(self.price) if self.price is not None else item.price,
            stock=self.stock if self.stock is not None else item.stock,
        )
