import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("CONFIG_FILE", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()

DEFAULT_ACCESS_SECRET = "dev-access-secret-change-in-production"
DEFAULT_REFRESH_SECRET = "dev-refresh-secret-change-in-production"
DEFAULT_ADMIN_API_KEY = "test-admin-key-12345"


def _setting(key, default):
    """Environment variable wins over env.yaml; both fall back to default."""
    raw = os.environ.get(key)
    if raw is None:
        return data.get(key, default)
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


class ApplicationConfig:
    DB_URI = _setting("DB_URI", "sqlite+aiosqlite:///./test.db")
    AUTO_CREATE_TABLES = bool(_setting("AUTO_CREATE_TABLES", True))
    REDIS_URL = _setting("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = _setting("CACHE_BACKEND", "redis")
    CACHE_TTL = int(_setting("CACHE_TTL", 1800))
    API_PORT = int(_setting("API_PORT", 8000))
    API_HOST = _setting("API_HOST", "0.0.0.0")
    CORS_ORIGINS = _setting("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = bool(_setting("CORS_ALLOW_CREDENTIALS", True))
    LOG_LEVEL = _setting("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(_setting("ENABLE_LOGGING_MIDDLEWARE", True))
    ENVIRONMENT = _setting("ENVIRONMENT", "development")
    COOKIE_SECURE = ENVIRONMENT == "production"

    ACCESS_SECRET = _setting("ACCESS_SECRET", DEFAULT_ACCESS_SECRET)
    ACCESS_EXPIRY = int(_setting("ACCESS_EXPIRY", 900))
    ACCESS_ALGORITHM = _setting("ACCESS_ALGORITHM", "HS256")
    REFRESH_SECRET = _setting("REFRESH_SECRET", DEFAULT_REFRESH_SECRET)
    REFRESH_EXPIRY = int(_setting("REFRESH_EXPIRY", 604800))
    REFRESH_ALGORITHM = _setting("REFRESH_ALGORITHM", "HS512")

    SWEEP_INTERVAL = int(_setting("SWEEP_INTERVAL", 3600))
    ADMIN_API_KEY = _setting("ADMIN_API_KEY", DEFAULT_ADMIN_API_KEY)


def insecure_defaults(config) -> list:
    """Names of secrets still set to their built-in value when running in production."""
    if config.ENVIRONMENT != "production":
        return []
    defaults = {
        "ACCESS_SECRET": DEFAULT_ACCESS_SECRET,
        "REFRESH_SECRET": DEFAULT_REFRESH_SECRET,
        "ADMIN_API_KEY": DEFAULT_ADMIN_API_KEY,
    }
    return [key for key, value in defaults.items() if getattr(config, key) == value]
