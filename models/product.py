# models/product.py
"""
Product record - purchasable catalog item.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from core.utils import check_fields, format_decimal, require_bool, require_str, to_decimal


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    commissionable: bool = True
    isSubscription: bool = False

    REQUIRED_FIELDS = ("id", "name", "price", "commissionable")
    OPTIONAL_FIELDS = ("isSubscription",)

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Product {self.id} has negative price {self.price}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": format_decimal(self.price),
            "commissionable": self.commissionable,
            "isSubscription": self.isSubscription,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        check_fields("Product", data, cls.REQUIRED_FIELDS, cls.OPTIONAL_FIELDS)
        return cls(
            id=require_str("Product", "id", data["id"]),
            name=require_str("Product", "name", data["name"]),
            price=to_decimal(data["price"]),
            commissionable=require_bool("Product", "commissionable", data["commissionable"]),
            isSubscription=require_bool("Product", "isSubscription", data.get("isSubscription", False)),
        )

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"
