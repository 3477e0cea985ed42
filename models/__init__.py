"""
Records and storage models for the commission ledger.
Import all models here for easy access.
"""

# Base
from models.base import Base

# Ledger records
from models.user import User, Role
from models.product import Product
from models.settings import CommissionRateTable
from models.transaction import Transaction, CommissionEntry
from models.document import Document

# Storage
from models.stored_document import StoredDocument

__all__ = [
    # Base
    'Base',

    # Records
    'User',
    'Role',
    'Product',
    'CommissionRateTable',
    'Transaction',
    'CommissionEntry',
    'Document',

    # Storage
    'StoredDocument',
]
