# mlm_system/system.py
"""
MLMSystem - in-process entry point for UI/CLI callers.

Each call loads the document, runs one core operation and saves the
result, all under the store lock.
"""
import logging
from typing import Any, Iterable, List, Optional

from core.document_store import DocumentStore
from mlm_system.services.commission_service import CommissionService
from mlm_system.services.ledger import TransactionLedger
from mlm_system.services.product_catalog import ProductCatalog
from mlm_system.services.settings_service import SettingsService
from mlm_system.services.user_directory import UserDirectory
from mlm_system.utils.chain_walker import ChainWalker
from models import CommissionRateTable, Document, Product, Transaction, User

logger = logging.getLogger(__name__)

_UNSET = object()


class MLMSystem:
    """
    Facade over the ledger services.

    Usage:
        # initialize() creates the stored_documents table on a fresh database
        system = MLMSystem(DocumentStore())
        member = system.register("alice", "secret", "Alice", "root")
        tx = system.purchase(member.id, "p1")
    """

    def __init__(
            self,
            store: Optional[DocumentStore] = None,
            sponsor_policy: Optional[str] = None,
            max_rate_total: Any = _UNSET,
            auto_initialize: bool = True
    ):
        """
        Args:
            store: Document store; defaults to the configured database
            sponsor_policy: Overrides Config.SPONSOR_POLICY
            max_rate_total: Overrides Config.MAX_RATE_TOTAL (None disables the cap)
            auto_initialize: Create the default document if none is stored
        """
        self.store = store or DocumentStore()
        self.sponsor_policy = sponsor_policy
        self.max_rate_total = max_rate_total

        if auto_initialize:
            self.initialize()

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    def initialize(self, recover_corrupt: bool = False) -> None:
        self.store.initialize(recover_corrupt=recover_corrupt)

    def reset_to_defaults(self) -> None:
        self.store.reset_to_defaults()

    # ═══════════════════════════════════════════════════════════════════════
    # SERVICE FACTORIES
    # ═══════════════════════════════════════════════════════════════════════

    def _directory(self, document: Document) -> UserDirectory:
        return UserDirectory(document, sponsor_policy=self.sponsor_policy)

    def _settings(self, document: Document) -> SettingsService:
        if self.max_rate_total is _UNSET:
            return SettingsService(document)
        return SettingsService(document, max_total=self.max_rate_total)

    # ═══════════════════════════════════════════════════════════════════════
    # USER DIRECTORY
    # ═══════════════════════════════════════════════════════════════════════

    def register(self, username: str, password: str, name: str, sponsor_id: Optional[str]) -> User:
        with self.store.unit_of_work() as document:
            return self._directory(document).register(username, password, name, sponsor_id)

    def authenticate(self, username: str, password: str) -> User:
        with self.store.snapshot() as document:
            return self._directory(document).authenticate(username, password)

    def get_user(self, user_id: str) -> Optional[User]:
        with self.store.snapshot() as document:
            return self._directory(document).get(user_id)

    def list_users(self) -> List[User]:
        with self.store.snapshot() as document:
            return self._directory(document).list_users()

    def get_direct_reports(self, user_id: str) -> List[User]:
        with self.store.snapshot() as document:
            return self._directory(document).get_direct_reports(user_id)

    def resolve_upline(self, user_id: str, max_levels: Optional[int] = None) -> List[User]:
        """Upline of a user; max_levels defaults to the rate table length."""
        with self.store.snapshot() as document:
            if max_levels is None:
                max_levels = document.settings.levelCount
            return self._directory(document).resolve_upline(user_id, max_levels)

    def count_downline(self, user_id: str) -> int:
        with self.store.snapshot() as document:
            user = self._directory(document).require(user_id)
            return ChainWalker(document.users).count_downline(user, max_depth=len(document.users))

    def find_orphan_branches(self) -> set:
        with self.store.snapshot() as document:
            return ChainWalker(document.users).find_orphan_branches()

    # ═══════════════════════════════════════════════════════════════════════
    # PRODUCT CATALOG
    # ═══════════════════════════════════════════════════════════════════════

    def list_products(self) -> List[Product]:
        with self.store.snapshot() as document:
            return ProductCatalog(document).list()

    def get_product(self, product_id: str) -> Optional[Product]:
        with self.store.snapshot() as document:
            return ProductCatalog(document).get(product_id)

    # ═══════════════════════════════════════════════════════════════════════
    # COMMISSIONS / LEDGER
    # ═══════════════════════════════════════════════════════════════════════

    def purchase(self, buyer_id: str, product_id: str) -> Transaction:
        with self.store.unit_of_work() as document:
            service = CommissionService(document, directory=self._directory(document))
            return service.purchase(buyer_id, product_id)

    def list_transactions(self) -> List[Transaction]:
        with self.store.snapshot() as document:
            return TransactionLedger(document).list_all()

    def list_transactions_for(self, user_id: str) -> List[Transaction]:
        with self.store.snapshot() as document:
            return TransactionLedger(document).list_for(user_id)

    # ═══════════════════════════════════════════════════════════════════════
    # SETTINGS
    # ═══════════════════════════════════════════════════════════════════════

    def get_rates(self) -> CommissionRateTable:
        with self.store.snapshot() as document:
            return self._settings(document).get_rates()

    def set_rates(self, values: Iterable[Any]) -> CommissionRateTable:
        with self.store.unit_of_work() as document:
            return self._settings(document).set_rates(values)
