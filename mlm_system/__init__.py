# mlm_system/__init__.py
"""
MLM System - referral commission ledger.
"""

# Services
from mlm_system.services.user_directory import UserDirectory
from mlm_system.services.product_catalog import ProductCatalog
from mlm_system.services.commission_service import CommissionService
from mlm_system.services.ledger import TransactionLedger
from mlm_system.services.settings_service import SettingsService

# Errors
from mlm_system.errors import (
    MLMError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    UnknownUserError,
    UnknownProductError,
    UnresolvedSponsorError,
    InvalidRateTableError,
    DuplicateTransactionError,
    StorageError,
    StorageUnavailableError,
    CorruptStateError,
)

# Utilities
from mlm_system.utils.chain_walker import ChainWalker
from mlm_system.utils.time_machine import timeMachine

__all__ = [
    # Services
    'UserDirectory',
    'ProductCatalog',
    'CommissionService',
    'TransactionLedger',
    'SettingsService',

    # Errors
    'MLMError',
    'DuplicateUsernameError',
    'InvalidCredentialsError',
    'UnknownUserError',
    'UnknownProductError',
    'UnresolvedSponsorError',
    'InvalidRateTableError',
    'DuplicateTransactionError',
    'StorageError',
    'StorageUnavailableError',
    'CorruptStateError',

    # Utils
    'ChainWalker',
    'timeMachine',
]
