"""Failed-login throttling keyed on client address and username.

Counters live in process memory, so they reset on restart and are not shared
between workers.
"""

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from policydesk.config import settings


class LoginThrottle:
    def __init__(self, limit: str):
        self.limit = parse(limit)
        self._storage = MemoryStorage()
        self._limiter = MovingWindowRateLimiter(self._storage)

    def is_blocked(self, client: str, username: str) -> bool:
        return not self._limiter.test(self.limit, "login", client, username.lower())

    def record_failure(self, client: str, username: str) -> None:
        self._limiter.hit(self.limit, "login", client, username.lower())

    def reset(self) -> None:
        self._storage.reset()


login_throttle = LoginThrottle(settings.LOGIN_RATE_LIMIT)
