# models/document.py
"""
Ledger document - the whole persisted state in one record.

Core operations receive a Document explicitly; the DocumentStore loads it
before the operation and saves it afterwards.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from core.utils import check_fields
from models.product import Product
from models.settings import CommissionRateTable
from models.transaction import Transaction
from models.user import User


@dataclass
class Document:
    users: List[User] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    settings: CommissionRateTable = field(default_factory=lambda: CommissionRateTable(rates=()))
    transactions: List[Transaction] = field(default_factory=list)  # chronological

    FIELDS = ("users", "products", "settings", "transactions")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "products": [p.to_dict() for p in self.products],
            "settings": self.settings.to_dict(),
            "transactions": [t.to_dict() for t in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """
        Build a Document from its decoded JSON form.

        Raises:
            ValueError, TypeError: If any record is malformed or ids collide
        """
        check_fields("Document", data, cls.FIELDS)
        for key in ("users", "products", "transactions"):
            if not isinstance(data[key], list):
                raise ValueError(f"Document.{key} must be a list")

        document = cls(
            users=[User.from_dict(u) for u in data["users"]],
            products=[Product.from_dict(p) for p in data["products"]],
            settings=CommissionRateTable.from_dict(data["settings"]),
            transactions=[Transaction.from_dict(t) for t in data["transactions"]],
        )
        document.check_unique_keys()
        return document

    def check_unique_keys(self) -> None:
        """Reject duplicate user ids, usernames, product ids and transaction ids."""
        for kind, values in (
                ("user id", [u.id for u in self.users]),
                ("username", [u.username for u in self.users]),
                ("product id", [p.id for p in self.products]),
                ("transaction id", [t.id for t in self.transactions]),
        ):
            seen = set()
            for value in values:
                if value in seen:
                    raise ValueError(f"Duplicate {kind}: {value}")
                seen.add(value)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload: str) -> "Document":
        """
        Raises:
            ValueError: On invalid JSON (json.JSONDecodeError) or schema violations
            TypeError: On wrongly typed values
        """
        return cls.from_dict(json.loads(payload))
