# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import StoreFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def find_or_create(self, user_id: int) -> CartModel:
        cart = self.get_by_user(user_id)
        if cart:
            return cart

        cart = CartModel(user_id=user_id, version=1)
        try:
            self.db.add(cart)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            # a parallel request may have created it first (unique user_id)
            existing = self.get_by_user(user_id)
            if existing:
                return existing
            raise StoreFailure("could not create cart") from e

        self.db.refresh(cart)
        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    def save(self, cart: CartModel) -> CartModel:
        try:
            self._bump_version(cart.id)
            self.db.add(cart)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Saving cart {cart.id} failed: {e}")
            raise StoreFailure("could not save cart") from e

        self.db.refresh(cart)
        return cart

    def clear(self, user_id: int, expected_version: int | None = None) -> bool:
        """
        Removes every line item but keeps the cart row for future shopping.

        With expected_version the cart is only cleared while it is still at
        that version (UPDATE ... WHERE version = :expected); a cart changed
        since then is left alone and False is returned.
        """
        try:
            cart = self.get_by_user(user_id)
            if not cart:
                return False

            cart_id = cart.id
            rowcount = self._bump_version(cart_id, expected_version)
            if rowcount == 0:
                self.db.rollback()
                logger.warning(
                    f"Cart {cart_id} of user {user_id} changed since version "
                    f"{expected_version}, not cleared"
                )
                return False

            self.db.execute(
                delete(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Clearing cart of user {user_id} failed: {e}")
            raise StoreFailure("could not clear cart") from e

        logger.info(f"Cleared cart of user {user_id}")
        return True

    def _bump_version(self, cart_id: int, expected_version: int | None = None) -> int:
        stmt = update(CartModel).where(CartModel.id == cart_id)
        if expected_version is not None:
            stmt = stmt.where(CartModel.version == expected_version)

        return self.db.execute(
            stmt.values(version=CartModel.version + 1)
            .execution_options(synchronize_session=False)
        ).rowcount
