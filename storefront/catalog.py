"""
Catalog reader used by checkout

Resolves stores and products to what checkout needs: whether the product can be
bought from this store and at which price right now.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from database.models import Product, Store


@dataclass(frozen=True)
class PurchasableProduct:
    id: str
    name: str
    price: Decimal


class CatalogReader:
    def __init__(self, db: Session):
        self.db = db

    def get_store(self, store_id: str) -> Store:
        store = self.db.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        return store

    def get_purchasable_product(self, product_id: str, store_id: str) -> PurchasableProduct:
        """
        Current price and name of a product that can be bought from ``store_id``

        A product of another store is reported as missing rather than invalid so
        that one store's catalog can't be enumerated through another's checkout.
        """
        product = self.db.get(Product, product_id)
        if product is None or product.store_id != store_id:
            raise NotFoundError("Product", product_id)

        if not product.is_purchasable:
            raise ValidationError(
                f"Product {product_id} is not available for purchase",
                field="product_ids",
                product_id=product_id,
            )

        return PurchasableProduct(id=product.id, name=product.name, price=product.unit_price)
