# mlm_system/config/defaults.py
"""
Factory defaults for a fresh ledger: root admin, reference products and
the five-level commission table.
"""
from datetime import datetime, timezone
from decimal import Decimal

from models import CommissionRateTable, Document, Product, Role, User

ROOT_USER_ID = "root"

# Level 1 to 5 (%)
DEFAULT_COMMISSION_RATES = (
    Decimal("10"),
    Decimal("5"),
    Decimal("3"),
    Decimal("2"),
    Decimal("1"),
)

# Fixed so that a reset always produces the same document
ROOT_JOINED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def default_root_user() -> User:
    return User(
        id=ROOT_USER_ID,
        username="admin",
        password="admin",
        name="System Admin",
        sponsorId=None,
        balance=Decimal("0"),
        totalEarnings=Decimal("0"),
        role=Role.ADMIN,
        joinedAt=ROOT_JOINED_AT,
    )


def default_products() -> list:
    return [
        Product(id="p1", name="Startpakke", price=Decimal("1000"), commissionable=True),
        Product(id="p2", name="Helsekost", price=Decimal("500"), commissionable=True),
        Product(
            id="sub1",
            name="Månedlig Abonnement",
            price=Decimal("200"),
            commissionable=True,
            isSubscription=True,
        ),
    ]


def default_document() -> Document:
    """Fresh document; every call returns new, equal objects."""
    return Document(
        users=[default_root_user()],
        products=default_products(),
        settings=CommissionRateTable(rates=DEFAULT_COMMISSION_RATES),
        transactions=[],
    )
