from slowapi import Limiter
from slowapi.util import get_remote_address

from config import Settings

# per client address
PUBLIC_GENERATION_LIMIT = "2/day"


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )
