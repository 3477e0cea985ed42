# mlm_system/services/ledger.py
"""
Transaction ledger - append-only purchase log.

Transactions are stored oldest first and always handed out newest first.
"""
import logging
from typing import List

from mlm_system.errors import DuplicateTransactionError
from models.document import Document
from models.transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionLedger:
    """Append-only access to the document's transactions."""

    def __init__(self, document: Document):
        self.document = document

    def append(self, transaction: Transaction) -> None:
        """
        Add a transaction to the end of the log.

        Raises:
            DuplicateTransactionError: If a transaction with the same id is already recorded
        """
        if any(t.id == transaction.id for t in self.document.transactions):
            raise DuplicateTransactionError(transaction.id)

        self.document.transactions.append(transaction)
        logger.debug(f"Ledger append: {transaction.id} ({len(self.document.transactions)} total)")

    def list_all(self) -> List[Transaction]:
        """All transactions, most recent first."""
        return list(reversed(self.document.transactions))

    def list_for(self, user_id: str) -> List[Transaction]:
        """Transactions the user bought or earned commission on, most recent first."""
        return [t for t in reversed(self.document.transactions) if t.involves(user_id)]

    def __len__(self):
        return len(self.document.transactions)
