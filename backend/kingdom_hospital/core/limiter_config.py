import os

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Global Limiter instance to be imported by controllers.
# create_app() binds it and disables it when RATE_LIMIT_ENABLED=0.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["500 per hour", "100 per minute"],
    storage_uri=os.getenv("LIMITER_STORAGE_URI", "memory://"),
)

# Applied to every write endpoint
WRITE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "30 per minute")
