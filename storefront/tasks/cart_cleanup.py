# storefront/tasks/cart_cleanup.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.errors import StoreFailure
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(
    name="storefront.tasks.cart_cleanup.clear_cart_task",
    autoretry_for=(StoreFailure,),
    retry_backoff=True,
    max_retries=5,
)
def clear_cart_task(user_id: int, expected_version: int):
    """
    Clears the cart of a user whose checkout was paid but whose cart
    could not be emptied inline.

    Only the cart as it was at checkout is cleared: if the user changed it
    in the meantime (version moved on) the task does nothing.
    """
    logger.info(f"Deferred cart clear for user {user_id} (version {expected_version}) started")

    db = SessionLocal()
    try:
        cleared = CartRepo(db).clear(user_id, expected_version=expected_version)
    finally:
        db.close()

    if not cleared:
        logger.info(f"Deferred cart clear for user {user_id} skipped, cart changed since checkout")
        return {"user_id": user_id, "status": "skipped"}

    return {"user_id": user_id, "status": "cleared"}
