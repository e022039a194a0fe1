from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "LM_", "env_file": ".env", "env_file_encoding": "utf-8"}

    db_path: str = Field(default="langmap.db")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    default_locale: str = Field(default="en", min_length=2)
    listing_cache_ttl_seconds: int = Field(default=300, ge=0)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
