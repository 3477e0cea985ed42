# mlm_system/services/settings_service.py
"""
Settings service - admin access to the commission rate table.
"""
import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from config import Config
from mlm_system.errors import InvalidRateTableError
from models.document import Document
from models.settings import CommissionRateTable

logger = logging.getLogger(__name__)

_UNSET = object()


class SettingsService:
    """Reads and replaces the commission rate table."""

    def __init__(self, document: Document, max_total: Any = _UNSET):
        """
        Args:
            document: Loaded ledger document, mutated in place
            max_total: Cap on the sum of rates in percent, None for no cap;
                defaults to Config.MAX_RATE_TOTAL
        """
        self.document = document
        if max_total is _UNSET:
            max_total = Config.get(Config.MAX_RATE_TOTAL)
        self.max_total: Optional[Decimal] = Decimal(str(max_total)) if max_total is not None else None

    def get_rates(self) -> CommissionRateTable:
        return self.document.settings

    def set_rates(self, values: Iterable[Any]) -> CommissionRateTable:
        """
        Replace the whole rate table. Affects future purchases only.

        Args:
            values: Rates in percent, level 1 first

        Returns:
            The new table

        Raises:
            InvalidRateTableError: Non-numeric or negative rate, or total above max_total
        """
        try:
            table = CommissionRateTable.from_values(values)
        except (TypeError, ValueError) as e:
            logger.error(f"Rejected rate table {values!r}: {e}")
            raise InvalidRateTableError(str(e))

        if self.max_total is not None and table.total > self.max_total:
            message = f"Rates sum to {table.total}%, above the allowed {self.max_total}%"
            logger.error(f"Rejected rate table {values!r}: {message}")
            raise InvalidRateTableError(message)

        previous = self.document.settings
        self.document.settings = table

        logger.info(
            f"Commission rates updated: "
            f"{[str(r) for r in previous.rates]} -> {[str(r) for r in table.rates]}"
        )
        return table
