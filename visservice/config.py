from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    cache_backend: Literal["memory", "grid"] = Field(default="memory", alias="CACHE_BACKEND")
    grid_url: str = Field(default="redis://localhost:6379/0", alias="GRID_URL")
    grid_map_name: str = Field(default="datasets", alias="GRID_MAP_NAME")

    vis_compiler: str = Field(default="", alias="VIS_COMPILER")
    match_engine: str = Field(default="", alias="MATCH_ENGINE")

    default_width: int = Field(default=800, alias="DEFAULT_WIDTH")
    default_height: int = Field(default=600, alias="DEFAULT_HEIGHT")
    min_dimension: int = Field(default=5, alias="MIN_DIMENSION")
    default_files_location: str = Field(default="../../brunelsupport", alias="DEFAULT_FILES_LOCATION")
    controls_element_id: str = Field(default="controls", alias="CONTROLS_ELEMENT_ID")
    controls_factory: str = Field(default="BrunelJQueryControlFactory", alias="CONTROLS_FACTORY")

    url_read_timeout_seconds: float = Field(default=10.0, alias="URL_READ_TIMEOUT_SECONDS")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
