from slowapi import Limiter
from slowapi.util import get_remote_address

from syllabus_hub import config

AUTH_LIMIT = "20/15 minutes"
SEARCH_LIMIT = "50/5 minutes"

limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)
