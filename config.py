from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # Storage
    DB_PATH: str = "prices.db"

    # Browser
    HEADLESS: bool = True
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    )
    NAVIGATION_TIMEOUT_MS: int = 30000

    # Upper bound on waiting for each site's listing to render
    DMX_WAIT_MS: int = 8000
    WELLHOME_WAIT_MS: int = 3000
    QUANGHANH_WAIT_MS: int = 4000

    # Pause between products to stay under the sites' rate limits
    INTER_PRODUCT_DELAY_MS: int = 2000

    # API
    PORT: int = 3000
    CORS_ORIGINS: str = "*"

    class Config:
        env_file = ".env"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
