from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# ======================
# Database
# ======================
db = SQLAlchemy()
migrate = Migrate()

# ======================
# Rate Limiter
# ======================
# Storage comes from RATELIMIT_STORAGE_URI (Redis in production, memory locally).
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],              # No global limits by default
)


def write_limit():
    """Per-endpoint limit for mutating API calls (WRITE_RATE_LIMIT)."""
    return limiter.limit(lambda: current_app.config.get("WRITE_RATE_LIMIT", "60 per minute"))
