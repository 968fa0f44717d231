from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TierProfile(BaseModel):
    model: str
    max_attempts: int = 1
    base_delay_seconds: float = 1.0
    temperature: float = 0.7
    max_tokens: int = 1500


def _default_primary_tier() -> TierProfile:
    return TierProfile(
        model="gpt-4.1-nano",
        max_attempts=3,
        base_delay_seconds=1.0,
        temperature=0.7,
        max_tokens=2000,
    )


def _default_secondary_tier() -> TierProfile:
    return TierProfile(
        model="gpt-4o-mini",
        max_attempts=2,
        base_delay_seconds=1.5,
        temperature=0.5,
        max_tokens=1500,
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    llm_timeout_seconds: float = Field(default=60.0, alias="LLM_TIMEOUT_SECONDS")
    llm_num_retries: int = Field(default=0, alias="LLM_NUM_RETRIES")

    primary_tier: TierProfile = Field(default_factory=_default_primary_tier, alias="PRIMARY_TIER")
    secondary_tier: TierProfile = Field(default_factory=_default_secondary_tier, alias="SECONDARY_TIER")
    rhetoric_temperature: float = Field(default=0.8, alias="RHETORIC_TEMPERATURE")
    rhetoric_max_tokens: int = Field(default=1000, alias="RHETORIC_MAX_TOKENS")

    local_store_path: str = Field(default="data/resomate_offline.db", alias="LOCAL_STORE_PATH")
    remote_store_url: str = Field(default="", alias="REMOTE_STORE_URL")
    remote_store_token: str = Field(default="", alias="REMOTE_STORE_TOKEN")
    remote_timeout_seconds: float = Field(default=30.0, alias="REMOTE_TIMEOUT_SECONDS")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        for tier in (self.primary_tier, self.secondary_tier):
            tier.max_attempts = max(tier.max_attempts, 1)
            tier.base_delay_seconds = max(tier.base_delay_seconds, 0.0)
        self.remote_store_url = self.remote_store_url.strip().rstrip("/")

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_store_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
