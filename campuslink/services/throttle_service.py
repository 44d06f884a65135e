# campuslink/services/throttle_service.py
import redis

from campuslink.domain.errors import RateLimited
from campuslink.utils.retry import redis_retry
from campuslink.utils.settings import (
    REDIS_URL,
    VERIFICATION_MAX_SENDS,
    VERIFICATION_THROTTLE_WINDOW_SECONDS,
)
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)

# INCR + EXPIRE przy pierwszym trafieniu, jedno okno stale na klucz
_HIT_LUA = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return current
"""


class ThrottleService:
    """
    -limit wysylek kodow weryfikacyjnych na usera i na numer
    -licznik w redisie, okno wygasa samo (EXPIRE)
    """

    def __init__(
        self,
        url: str | None = None,
        limit: int = VERIFICATION_MAX_SENDS,
        window_seconds: int = VERIFICATION_THROTTLE_WINDOW_SECONDS,
    ):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.limit = limit
        self.window = window_seconds

    @redis_retry()
    def _incr(self, key: str) -> int:
        return int(self.redis.eval(_HIT_LUA, 1, key, self.window))

    def hit(self, scope: str, identity: str) -> int:
        key = f"verification:{scope}:{identity}:sends"
        count = self._incr(key)
        if count > self.limit:
            logger.warning(f"Throttled verification send for {scope} {identity} ({count}/{self.limit})")
            raise RateLimited()
        return count
