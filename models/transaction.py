# models/transaction.py
"""
Transaction record - one purchase and the commissions it paid out.
Append-only: the ledger never edits a stored transaction.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from core.utils import (
    check_fields,
    exact_add,
    format_datetime,
    format_decimal,
    parse_datetime,
    require_str,
    to_decimal,
)


@dataclass(frozen=True)
class CommissionEntry:
    level: int  # 1-based position in the upline
    receiverId: str
    receiverName: str
    amount: Decimal
    rate: Decimal  # percent

    FIELDS = ("level", "receiverId", "receiverName", "amount", "rate")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "receiverId": self.receiverId,
            "receiverName": self.receiverName,
            "amount": format_decimal(self.amount),
            "rate": format_decimal(self.rate),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommissionEntry":
        check_fields("CommissionEntry", data, cls.FIELDS)
        level = data["level"]
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValueError(f"CommissionEntry.level must be a positive integer, got {level!r}")
        return cls(
            level=level,
            receiverId=require_str("CommissionEntry", "receiverId", data["receiverId"]),
            receiverName=require_str("CommissionEntry", "receiverName", data["receiverName"]),
            amount=to_decimal(data["amount"]),
            rate=to_decimal(data["rate"]),
        )


@dataclass
class Transaction:
    id: str
    buyerId: str
    buyerName: str
    productId: str
    productName: str
    amount: Decimal  # product price at purchase time
    createdAt: datetime
    commissions: List[CommissionEntry] = field(default_factory=list)

    FIELDS = (
        "id", "buyerId", "buyerName", "productId", "productName",
        "amount", "createdAt", "commissions",
    )

    @property
    def totalCommission(self) -> Decimal:
        total = Decimal("0")
        for c in self.commissions:
            total = exact_add(total, c.amount)
        return total

    def involves(self, user_id: str) -> bool:
        """True if the user bought or received a commission."""
        return self.buyerId == user_id or any(c.receiverId == user_id for c in self.commissions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "buyerId": self.buyerId,
            "buyerName": self.buyerName,
            "productId": self.productId,
            "productName": self.productName,
            "amount": format_decimal(self.amount),
            "createdAt": format_datetime(self.createdAt),
            "commissions": [c.to_dict() for c in self.commissions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        check_fields("Transaction", data, cls.FIELDS)
        if not isinstance(data["commissions"], list):
            raise ValueError("Transaction.commissions must be a list")
        return cls(
            id=require_str("Transaction", "id", data["id"]),
            buyerId=require_str("Transaction", "buyerId", data["buyerId"]),
            buyerName=require_str("Transaction", "buyerName", data["buyerName"]),
            productId=require_str("Transaction", "productId", data["productId"]),
            productName=require_str("Transaction", "productName", data["productName"]),
            amount=to_decimal(data["amount"]),
            createdAt=parse_datetime(data["createdAt"]),
            commissions=[CommissionEntry.from_dict(c) for c in data["commissions"]],
        )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, buyer={self.buyerId}, product={self.productId}, "
            f"amount={self.amount}, commissions={len(self.commissions)})>"
        )
