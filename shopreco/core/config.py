from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ShopReco"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "shopreco"
    MONGO_TLS: bool = False
    mongo_timeout_ms: int = 5000               # bounds server selection, connect and socket reads

    # Redis (empty => cache disabled, endpoints run uncached)
    REDIS_URL: str = ""

    # Cache TTLs (seconds)
    products_cache_ttl: int = 15 * 60
    chat_cache_ttl: int = 15 * 60
    bundles_cache_ttl: int = 30 * 60
    trending_cache_ttl: int = 15 * 60
    reco_user_cache_ttl: int = 30 * 60
    reco_featured_cache_ttl: int = 60 * 60
    reco_recently_viewed_cache_ttl: int = 15 * 60
    reco_bought_together_cache_ttl: int = 60 * 60
    smart_collaborative_cache_ttl: int = 30 * 60
    smart_item_cache_ttl: int = 60 * 60
    smart_trending_cache_ttl: int = 15 * 60
    analytics_counter_ttl: int = 30 * 24 * 3600

    # OpenAI (empty key => keyword classifier only)
    OPENAI_API_KEY: str = ""
    OPENAI_CLASSIFIER_MODEL: str = "gpt-4o-mini"
    classifier_timeout_s: float = 5.0
    classifier_max_tokens: int = 100

    # Admin routes
    ADMIN_API_KEY: str = ""

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
