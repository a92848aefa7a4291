from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    data_file: Path = Path("formlytics.json")
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "FORMLYTICS_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
