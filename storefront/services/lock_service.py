import uuid

import redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CHECKOUT_LOCK_TTL_SECONDS, PAYMENT_WORST_CASE_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete: only the holder of the token may release the lock
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Per-user checkout lock.
    -acquire: SET key token NX EX ttl
    -release: atomic GET + compare + DEL in lua
    """

    def __init__(
        self,
        url: str | None = None,
        ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
        client: redis.Redis | None = None,
    ):
        # the lock is held across the whole payment call, retries included
        if ttl <= PAYMENT_WORST_CASE_SECONDS:
            raise ValueError(
                f"checkout lock TTL {ttl}s must exceed the payment gateway "
                f"worst case of {PAYMENT_WORST_CASE_SECONDS}s"
            )

        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:user:{user_id}:lock"

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Acquire lock {key}")
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=self.ttl,
            )
        )

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
