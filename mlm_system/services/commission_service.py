# mlm_system/services/commission_service.py
"""
Commission calculation service - pays a share of each purchase up the
sponsor chain, one rate per level.
"""
from decimal import Decimal
from typing import List, Optional
import logging

from core.utils import exact_percentage, generate_transaction_id
from mlm_system.services.ledger import TransactionLedger
from mlm_system.services.product_catalog import ProductCatalog
from mlm_system.services.user_directory import UserDirectory
from mlm_system.utils.time_machine import timeMachine
from models.document import Document
from models.product import Product
from models.settings import CommissionRateTable
from models.transaction import CommissionEntry, Transaction
from models.user import User

logger = logging.getLogger(__name__)


def calculate_commission(amount: Decimal, rate: Decimal) -> Decimal:
    """Percentage of a monetary amount, exact at any magnitude."""
    return exact_percentage(amount, rate)


class CommissionService:
    """Service for processing purchases and their commissions."""

    def __init__(
            self,
            document: Document,
            directory: Optional[UserDirectory] = None,
            catalog: Optional[ProductCatalog] = None,
            ledger: Optional[TransactionLedger] = None
    ):
        self.document = document
        self.directory = directory or UserDirectory(document)
        self.catalog = catalog or ProductCatalog(document)
        self.ledger = ledger or TransactionLedger(document)

    def purchase(self, buyerId: str, productId: str) -> Transaction:
        """
        Record a purchase and distribute commissions up the chain.

        Buyer and product are resolved before anything is touched, so a
        failed lookup leaves the document unchanged.

        Raises:
            UnknownUserError: If buyer not found
            UnknownProductError: If product not found
        """
        buyer = self.directory.require(buyerId)
        product = self.catalog.require(productId)

        rates = self.document.settings

        transaction = Transaction(
            id=self._allocate_transaction_id(),
            buyerId=buyer.id,
            buyerName=buyer.name,
            productId=product.id,
            productName=product.name,
            amount=product.price,
            createdAt=timeMachine.now,
            commissions=[],
        )

        if product.commissionable:
            transaction.commissions.extend(
                self._distributeCommissions(buyer, product, rates)
            )
        else:
            logger.info(f"Product {product.id} is not commissionable, no commissions paid")

        self.ledger.append(transaction)

        logger.info(
            f"Processed purchase {transaction.id}: buyer {buyer.id} bought {product.id} "
            f"for {transaction.amount}, "
            f"{len(transaction.commissions)} commissions, "
            f"total {transaction.totalCommission}"
        )

        return transaction

    def _distributeCommissions(
            self,
            buyer: User,
            product: Product,
            rates: CommissionRateTable
    ) -> List[CommissionEntry]:
        """
        Walk the upline and credit each level.

        Each level is credited as soon as it is computed; a short upline
        simply pays fewer levels.
        """
        entries = []
        upline = self.directory.resolve_upline(buyer.id, rates.levelCount)

        for level, uplineUser in enumerate(upline, start=1):
            rate = rates.rate_for(level)
            amount = calculate_commission(product.price, rate)

            if amount <= 0:
                logger.debug(f"Level {level}: user {uplineUser.id} earns nothing (rate {rate}%)")
                continue

            uplineUser.credit(amount)

            entries.append(CommissionEntry(
                level=level,
                receiverId=uplineUser.id,
                receiverName=uplineUser.name,
                amount=amount,
                rate=rate,
            ))

            logger.debug(
                f"Level {level}: user {uplineUser.id} +{amount} ({rate}% of {product.price}), "
                f"balance {uplineUser.balance}"
            )

        if len(upline) < rates.levelCount:
            logger.debug(
                f"Upline of {buyer.id} ended after {len(upline)} of {rates.levelCount} levels"
            )

        return entries

    def _allocate_transaction_id(self) -> str:
        existing = {t.id for t in self.document.transactions}
        transactionId = generate_transaction_id()
        while transactionId in existing:
            transactionId = generate_transaction_id()
        return transactionId
