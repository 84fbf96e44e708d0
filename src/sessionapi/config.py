from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = "memory://"  # mongodb://host/db, or memory:// for an in-process store
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    api_prefix: str = "/api/v2"
    cors_origins: list[str] = []
    session_cookie_name: str = "SESSIONAPI_SID"
    session_ttl: int = 30 * 24 * 60 * 60  # Idle lifetime in seconds, measured from the last refresh
    cookie_secure: bool = False  # Set to True in production with HTTPS
    forwarded_allow_ips: str = "127.0.0.1"  # Proxies trusted for X-Forwarded-* when cookie_secure is on
    admin_username: str = "admin"  # Bootstrap identity created on startup if missing
    admin_password: str = "admin"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SESSIONAPI_",
        "extra": "ignore",
    }
