import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#compare and delete, atomic in redis
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#lua runs single threaded inside redis, nothing can slip in between GET and DEL
#so a lock that expired and was taken by someone else is never deleted by us


class LockService:
    """
    Short lived redis locks:
    -acquire with SET NX EX, the lock expires by itself
    -release only by the owner (lua compare and delete)
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def idempotency_key_lock(user_id: str, key: str) -> str:
        return f"idempotency:{user_id}:{key}:lock"

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int) -> bool:
        logger.info(f"Acquire lock {name} for {owner}")
        #SET idempotency:usr_...:abc:lock "idk_..." NX EX 30
        return bool(
            self.redis.set(
                name=name,
                value=owner,
                nx=True,  # only if nobody holds it
                ex=ttl,  # expires even if the owner dies
            )
        )

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        logger.info(f"Release lock {name} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, name, owner)
        return bool(res)
