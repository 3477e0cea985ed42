# mlm_system/services/product_catalog.py
"""
Product catalog - read access to purchasable items.
"""
import logging
from typing import List, Optional

from mlm_system.errors import UnknownProductError
from models.document import Document
from models.product import Product

logger = logging.getLogger(__name__)


class ProductCatalog:
    """Read-only view over the document's products."""

    def __init__(self, document: Document):
        self.document = document

    def get(self, product_id: Optional[str]) -> Optional[Product]:
        for product in self.document.products:
            if product.id == product_id:
                return product
        return None

    def require(self, product_id: Optional[str]) -> Product:
        """
        Raises:
            UnknownProductError: If product_id is not in the catalog
        """
        product = self.get(product_id)
        if product is None:
            raise UnknownProductError(product_id)
        return product

    def list(self) -> List[Product]:
        return list(self.document.products)
