# storefront/repos/inventory_repo.py
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientInventory, InvalidQuantity, StoreFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryRepo:
    """
    Per-product available quantity.

    Stock only ever moves through a single conditional UPDATE, so two
    concurrent checkouts can never both see enough stock and drive the
    counter below zero.
    """

    def __init__(self, db: Session):
        self.db = db

    def available(self, product_id: int) -> int | None:
        return self.db.execute(
            select(ProductModel.inventory).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def reserve(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantity(quantity)

        # UPDATE products SET inventory = inventory - q WHERE id = :id AND inventory >= q
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.inventory >= quantity)
            .values(inventory=ProductModel.inventory - quantity)
            .execution_options(synchronize_session=False)
        )

        try:
            rowcount = self.db.execute(stmt).rowcount
            if rowcount == 0:
                self.db.rollback()
                raise InsufficientInventory(product_id, quantity)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Reserve of {quantity} x product {product_id} failed: {e}")
            raise StoreFailure("inventory update failed") from e

        logger.info(f"Reserved {quantity} x product {product_id}")

    def release(self, product_id: int, quantity: int) -> None:
        """Credits back a quantity taken by reserve()."""
        if quantity <= 0:
            raise InvalidQuantity(quantity)

        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(inventory=ProductModel.inventory + quantity)
            .execution_options(synchronize_session=False)
        )

        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Release of {quantity} x product {product_id} failed: {e}")
            raise StoreFailure("inventory update failed") from e

        logger.info(f"Released {quantity} x product {product_id}")
