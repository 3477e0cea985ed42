# models/user.py
"""
User record - member of the referral forest.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from core.utils import (
    check_fields,
    exact_add,
    format_datetime,
    format_decimal,
    parse_datetime,
    require_str,
    to_decimal,
)
from models.base import _get_current_time


class Role(Enum):
    """User role."""
    ADMIN = "admin"
    MEMBER = "member"


@dataclass
class User:
    id: str
    username: str
    password: str
    name: str
    sponsorId: Optional[str]  # None only for the root user

    # Balances, mutated only by CommissionService
    balance: Decimal = Decimal("0")
    totalEarnings: Decimal = Decimal("0")

    role: Role = Role.MEMBER
    joinedAt: datetime = field(default_factory=_get_current_time)

    FIELDS = (
        "id", "username", "password", "name", "sponsorId",
        "balance", "totalEarnings", "role", "joinedAt",
    )

    @property
    def isRoot(self) -> bool:
        return self.sponsorId is None

    @property
    def isAdmin(self) -> bool:
        return self.role == Role.ADMIN

    def credit(self, amount: Decimal) -> None:
        """Add a commission to balance and lifetime earnings together."""
        if amount < 0:
            raise ValueError(f"Cannot credit negative amount {amount} to user {self.id}")
        self.balance = exact_add(self.balance, amount)
        self.totalEarnings = exact_add(self.totalEarnings, amount)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "name": self.name,
            "sponsorId": self.sponsorId,
            "balance": format_decimal(self.balance),
            "totalEarnings": format_decimal(self.totalEarnings),
            "role": self.role.value,
            "joinedAt": format_datetime(self.joinedAt),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """
        Build a User from its decoded JSON form.

        Raises:
            ValueError, TypeError: If the record is malformed
        """
        check_fields("User", data, cls.FIELDS)
        return cls(
            id=require_str("User", "id", data["id"]),
            username=require_str("User", "username", data["username"]),
            password=require_str("User", "password", data["password"]),
            name=require_str("User", "name", data["name"]),
            sponsorId=require_str("User", "sponsorId", data["sponsorId"], nullable=True),
            balance=to_decimal(data["balance"]),
            totalEarnings=to_decimal(data["totalEarnings"]),
            role=Role(data["role"]),
            joinedAt=parse_datetime(data["joinedAt"]),
        )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, sponsor={self.sponsorId}, balance={self.balance})>"
