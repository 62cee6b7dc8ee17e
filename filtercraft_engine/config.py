from pydantic_settings import BaseSettings, SettingsConfigDict

from filtercraft_data_model.filter_config import FilterConfig


class Settings(BaseSettings):
    case_sensitive: bool = False
    max_depth: int = 3
    enable_cache: bool = False
    predicate_cache_size: int = 500
    result_cache_collections: int = 64
    performance_max_samples: int = 1000

    model_config = SettingsConfigDict(env_prefix="FILTERCRAFT_")

    def default_filter_config(self) -> FilterConfig:
        return FilterConfig(
            case_sensitive=self.case_sensitive,
            max_depth=self.max_depth,
            enable_cache=self.enable_cache,
        )


settings = Settings()
