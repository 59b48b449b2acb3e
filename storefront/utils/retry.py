# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis
import stripe

from storefront.utils.settings import PAYMENT_MAX_ATTEMPTS, PAYMENT_MAX_BACKOFF_SECONDS


def gateway_retry():
    # only transport-level failures; card/validation errors are final
    return retry(
        reraise=True,
        stop=stop_after_attempt(PAYMENT_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=PAYMENT_MAX_BACKOFF_SECONDS),
        retry=retry_if_exception_type((stripe.APIConnectionError, stripe.RateLimitError)),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )
