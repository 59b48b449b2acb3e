# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# register tasks explicitly so the worker picks them up
celery_app.conf.imports = (
    "storefront.tasks.cart_cleanup",
)

celery_app.conf.task_acks_late = True
celery_app.conf.timezone = "UTC"
