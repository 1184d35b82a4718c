"""Rate limiter shared by the app (SlowAPI).

Every route gets the default limit through SlowAPIMiddleware.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.rate_limit],
    enabled=_settings.rate_limit_enabled,
)
