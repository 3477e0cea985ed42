# ledger.py
"""
Referral commission ledger - main entry point.
Initializes configuration, database and the stored document.
"""
import argparse
import logging
import sys

from config import Config, ConfigurationError
from core.db import setup_database
from core.document_store import DocumentStore
from mlm_system.errors import StorageError

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, Config.get(Config.LOG_LEVEL), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def initialize_ledger(reset: bool = False, recover: bool = False) -> DocumentStore:
    """
    Initialize the ledger with configuration and storage.

    Args:
        reset: Overwrite the stored document with defaults
        recover: Reset the stored document if it is corrupt

    Returns:
        Ready DocumentStore
    """
    logger.info("=" * 60)
    logger.info("LEDGER INITIALIZATION")
    logger.info("=" * 60)

    logger.info("Setting up database...")
    setup_database()

    store = DocumentStore()
    if reset:
        store.reset_to_defaults()
    else:
        store.initialize(recover_corrupt=recover)

    document = store.load()
    logger.info(
        f"Ledger '{store.store_key}' ready: {len(document.users)} users, "
        f"{len(document.products)} products, {len(document.transactions)} transactions"
    )
    return store


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Initialize the referral commission ledger')
    parser.add_argument('--reset', action='store_true',
                        help='Reset the stored document to factory defaults')
    parser.add_argument('--recover', action='store_true',
                        help='Reset the stored document if it cannot be decoded')
    args = parser.parse_args()

    try:
        Config.initialize_from_env()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.critical(f"❌ Configuration error: {e}")
        sys.exit(2)

    configure_logging()

    try:
        initialize_ledger(reset=args.reset, recover=args.recover)
    except StorageError as e:
        logger.critical(f"❌ Storage error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
