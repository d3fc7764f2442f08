from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_provider: str = ""
    mongo_connection_string: str = "mongodb://localhost:27017"
    mongo_database_name: str = "newsletter"
    mongo_collection_name: str = "subscribers"

    auth0_domain: str = ""
    auth0_audience: str = ""
    auth0_issuer: str = ""
    auth0_algorithms: str = "RS256"

    model_config = SettingsConfigDict(env_file=".newsletter.env", frozen=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
