# mlm_system/errors.py
"""
Error taxonomy for the commission ledger.

Every failure of a core operation is raised as a subclass of MLMError so
callers can catch the whole family or a single case.
"""
from typing import Optional


class MLMError(Exception):
    """Base class for all ledger errors."""
    pass


class DuplicateUsernameError(MLMError):
    """Registration with a username that is already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' is already taken")


class InvalidCredentialsError(MLMError):
    """Username/password pair does not match any user."""

    def __init__(self):
        super().__init__("Invalid username or password")


class UnknownUserError(MLMError):
    def __init__(self, user_id: Optional[str]):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class UnknownProductError(MLMError):
    def __init__(self, product_id: Optional[str]):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class UnresolvedSponsorError(MLMError):
    """Sponsor id given at registration does not resolve to a user."""

    def __init__(self, sponsor_id: Optional[str]):
        self.sponsor_id = sponsor_id
        super().__init__(f"Sponsor {sponsor_id} not found")


class InvalidRateTableError(MLMError):
    """Commission rates are not numeric, negative or exceed the allowed total."""
    pass


class DuplicateTransactionError(MLMError):
    """Ledger append with an id that is already recorded."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} already recorded")


class StorageError(MLMError):
    """Base class for persistence failures."""
    pass


class StorageUnavailableError(StorageError):
    """No stored document, or the backing database cannot be reached."""
    pass


class CorruptStateError(StorageError):
    """Stored document cannot be decoded or violates the record schema."""
    pass
