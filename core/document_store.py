# core/document_store.py
"""
Document store - persists the whole ledger document as one JSON blob.

Every core operation runs as load -> operate -> save inside
unit_of_work(), serialized by one lock, so no operation can observe
another one half-applied.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import Config
from core.db import get_db_session_ctx, get_session_factory
from mlm_system.config.defaults import default_document
from mlm_system.errors import CorruptStateError, StorageUnavailableError
from models.document import Document
from models.stored_document import StoredDocument

logger = logging.getLogger(__name__)

# One lock per (database URL, store key) for the whole process
_locks = {}
_locks_guard = threading.Lock()


def _bound_engine(session_factory):
    """Engine a sessionmaker is bound to, or None for unbound factories."""
    return getattr(session_factory, "kw", {}).get("bind")


def get_store_lock(session_factory, store_key: str) -> threading.RLock:
    """Shared RLock for every store over the same stored document."""
    engine = _bound_engine(session_factory)
    key = (str(engine.url) if engine is not None else None, store_key)
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
    return lock


class DocumentStore:
    """
    Load/save collaborator for the ledger document.

    Usage:
        store = DocumentStore()
        store.initialize()  # creates the table on a fresh database

        with store.unit_of_work() as document:
            CommissionService(document).purchase(buyer_id, "p1")
    """

    def __init__(self, session_factory=None, store_key: Optional[str] = None):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker; defaults to core.db factory
            store_key: Row key of the document; defaults to Config.STORE_KEY
        """
        self.session_factory = session_factory or get_session_factory()
        self.store_key = store_key or Config.get(Config.STORE_KEY)
        self.lock = get_store_lock(self.session_factory, self.store_key)

    # ═══════════════════════════════════════════════════════════════════════
    # LOAD / SAVE
    # ═══════════════════════════════════════════════════════════════════════

    def exists(self) -> bool:
        """
        Raises:
            StorageUnavailableError: If the database cannot be reached
        """
        try:
            with get_db_session_ctx(self.session_factory) as session:
                return session.get(StoredDocument, self.store_key) is not None
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Database unavailable: {e}") from e

    def load(self) -> Document:
        """
        Read and decode the stored document.

        Raises:
            StorageUnavailableError: No document stored or database unreachable
            CorruptStateError: Payload is not a valid document
        """
        try:
            with get_db_session_ctx(self.session_factory) as session:
                row = session.get(StoredDocument, self.store_key)
                payload = row.payload if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load document '{self.store_key}': {e}")
            raise StorageUnavailableError(f"Database unavailable: {e}") from e

        if payload is None:
            raise StorageUnavailableError(f"No document stored under '{self.store_key}'")

        try:
            return Document.from_json(payload)
        except (ValueError, TypeError, KeyError) as e:
            logger.error(f"Stored document '{self.store_key}' is corrupt: {e}")
            raise CorruptStateError(f"Stored document '{self.store_key}' is corrupt: {e}") from e

    def save(self, document: Document) -> None:
        """
        Encode and write the document, replacing the stored one.

        Raises:
            StorageUnavailableError: If the write fails
        """
        payload = document.to_json()

        try:
            with get_db_session_ctx(self.session_factory) as session:
                row = session.get(StoredDocument, self.store_key)
                if row is None:
                    row = StoredDocument(storeKey=self.store_key, payload=payload, revision=1)
                    session.add(row)
                else:
                    row.payload = payload
                    row.revision = (row.revision or 0) + 1
        except SQLAlchemyError as e:
            logger.error(f"Failed to save document '{self.store_key}': {e}")
            raise StorageUnavailableError(f"Database unavailable: {e}") from e

        logger.debug(
            f"Document '{self.store_key}' saved: {len(document.users)} users, "
            f"{len(document.transactions)} transactions"
        )

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    def ensure_table(self) -> None:
        """
        Create the stored_documents table if the database lacks it.

        Raises:
            StorageUnavailableError: If the database cannot be reached
        """
        engine = _bound_engine(self.session_factory)
        if engine is None:
            return
        try:
            StoredDocument.__table__.create(bind=engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Database unavailable: {e}") from e

    def reset_to_defaults(self) -> Document:
        """Overwrite the stored document with factory defaults."""
        with self.lock:
            self.ensure_table()
            document = default_document()
            self.save(document)
        logger.info(f"Document '{self.store_key}' initialized/reset to defaults")
        return document

    def initialize(self, recover_corrupt: bool = False) -> Document:
        """
        Make sure a valid document is stored.

        Args:
            recover_corrupt: Reset a corrupt document instead of raising

        Raises:
            CorruptStateError: Stored document corrupt and recover_corrupt is False
        """
        with self.lock:
            self.ensure_table()
            if not self.exists():
                logger.info(f"No document under '{self.store_key}', creating defaults")
                return self.reset_to_defaults()

            try:
                return self.load()
            except CorruptStateError:
                if not recover_corrupt:
                    raise
                logger.warning(f"Recovering corrupt document '{self.store_key}' by reset")
                return self.reset_to_defaults()

    # ═══════════════════════════════════════════════════════════════════════
    # UNITS OF WORK
    # ═══════════════════════════════════════════════════════════════════════

    @contextmanager
    def unit_of_work(self) -> Iterator[Document]:
        """
        Load the document, yield it for mutation and save it when the
        block exits cleanly. On exception nothing is written.
        """
        with self.lock:
            document = self.load()
            yield document
            self.save(document)

    @contextmanager
    def snapshot(self) -> Iterator[Document]:
        """Load the document for reading; changes are never written."""
        with self.lock:
            yield self.load()
