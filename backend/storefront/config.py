from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = True
    allowed_origins: str = "http://localhost:3000"

    # Upstream storefront API
    api_base_url: str = ""
    http_timeout_seconds: float = 15.0

    # First-admin bootstrap (server-side only, never sent to the browser)
    super_admin_bootstrap_secret: str = ""

    # Pending account setup slot
    pending_setup_backend: str = "memory"  # memory | redis
    pending_setup_ttl_seconds: int = 0  # 0 = no expiry

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def bootstrap_enabled(self) -> bool:
        return bool(self.super_admin_bootstrap_secret.strip())


settings = Settings()
