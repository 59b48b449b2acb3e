# storefront/services/checkout_service.py
from enum import Enum
from typing import List, Tuple

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.domain.errors import (
    CartEmpty,
    CheckoutInProgress,
    NotFound,
    StoreFailure,
)
from storefront.domain.schemas import CheckoutOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.inventory_repo import InventoryRepo
from storefront.services.lock_service import LockService
from storefront.services.payment_client import PaymentClient
from storefront.tasks.cart_cleanup import clear_cart_task
from storefront.utils.settings import PAYMENT_CURRENCY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CHECKOUT_MESSAGE = "Checkout successful. Payment initiated."


class CheckoutState(str, Enum):
    STARTED = "STARTED"
    RESERVING_INVENTORY = "RESERVING_INVENTORY"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    CLEARING = "CLEARING"
    COMPLETED = "COMPLETED"


class CheckoutService:
    """
    Turns a user's cart into reserved stock and a payment intent.

    1. per-user lock (at most one checkout in flight per user)
    2. reserve every line in cart order, recording a compensation for each
    3. create the payment intent for the snapshot total
    4. clear the cart

    Any failure in 2 or 3 re-credits the stock already reserved before the
    error is re-raised, so inventory is all-or-nothing. Once the payment
    intent exists the checkout is successful no matter what happens in 4.
    """

    def __init__(
        self,
        db: Session,
        payment_client: PaymentClient,
        lock_service: LockService,
        currency: str = PAYMENT_CURRENCY,
    ):
        self.carts = CartRepo(db)
        self.inventory = InventoryRepo(db)
        self.payment_client = payment_client
        self.lock_service = lock_service
        self.currency = currency

    def checkout(self, user_id: int) -> CheckoutOut:
        token = self.lock_service.new_token()

        try:
            locked = self.lock_service.acquire_checkout_lock(user_id, token)
        except RedisError as e:
            logger.error(f"Checkout lock for user {user_id} unavailable: {e}")
            raise StoreFailure("checkout lock unavailable") from e

        if not locked:
            raise CheckoutInProgress(user_id)

        try:
            return self._checkout(user_id, attempt=token)
        finally:
            self._release_lock(user_id, token)

    def _checkout(self, user_id: int, attempt: str) -> CheckoutOut:
        state = self._transition(user_id, CheckoutState.STARTED)

        cart = self.carts.get_by_user(user_id)
        if not cart:
            raise NotFound(f"no cart for user {user_id}")

        # snapshot the lines once; prices come from the cart, never the catalog
        version = cart.version
        lines = [(i.product_id, i.quantity, i.unit_price) for i in cart.items]
        if not lines:
            raise CartEmpty()

        compensations: List[Tuple[int, int]] = []
        total = 0

        try:
            state = self._transition(user_id, CheckoutState.RESERVING_INVENTORY)
            for product_id, quantity, unit_price in lines:
                self.inventory.reserve(product_id, quantity)
                compensations.append((product_id, quantity))
                total += unit_price * quantity

            state = self._transition(user_id, CheckoutState.PAYMENT_PENDING)
            intent = self.payment_client.create_intent(
                total,
                self.currency,
                f"Storefront order for user {user_id}",
                idempotency_key=f"checkout-{user_id}-{attempt}",
            )
        except Exception as e:
            logger.warning(f"Checkout for user {user_id} failed in {state.value}: {e}")
            self._compensate(user_id, compensations)
            raise

        state = self._transition(user_id, CheckoutState.CLEARING)
        try:
            cleared = self.carts.clear(user_id, expected_version=version)
        except StoreFailure as e:
            # the payment is already taken; reporting failure would mislead the client
            logger.warning(
                f"Payment {intent.id} succeeded but clearing cart of user {user_id} failed: {e}"
            )
            self._schedule_clear(user_id, version)
        else:
            if not cleared:
                logger.warning(
                    f"Cart of user {user_id} changed during checkout, left as is after payment {intent.id}"
                )

        self._transition(user_id, CheckoutState.COMPLETED)

        return CheckoutOut(
            message=CHECKOUT_MESSAGE,
            total_paid_minor_units=total,
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
        )

    def _compensate(self, user_id: int, compensations: List[Tuple[int, int]]) -> None:
        for product_id, quantity in reversed(compensations):
            try:
                self.inventory.release(product_id, quantity)
            except StoreFailure as e:
                logger.error(
                    f"Compensation failed for user {user_id}: could not re-credit "
                    f"{quantity} x product {product_id}: {e}"
                )

    def _schedule_clear(self, user_id: int, version: int) -> None:
        try:
            clear_cart_task.delay(user_id, version)
        except Exception as e:
            logger.error(f"Could not queue deferred cart clear for user {user_id}: {e}")

    def _release_lock(self, user_id: int, token: str) -> None:
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except RedisError as e:
            # the key still expires on its own after the lock TTL
            logger.warning(f"Releasing checkout lock for user {user_id} failed: {e}")

    @staticmethod
    def _transition(user_id: int, state: CheckoutState) -> CheckoutState:
        logger.info(f"Checkout user {user_id}: {state.value}")
        return state
