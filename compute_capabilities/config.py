from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COMPUTE_", env_file=".env", extra="ignore"
    )

    capability_source: Literal["static", "http"] = Field(default="static")

    supports_pause_unpause: bool = Field(default=False)
    supports_start_stop: bool = Field(default=True)
    supports_suspend_resume: bool = Field(default=False)
    vlan_supported: bool = Field(default=False)
    vlan_subscribed: bool = Field(default=False)
    shell_keys_supported: bool = Field(default=True)

    provider_url: str = Field(default="http://localhost:8774")
    provider_auth_token: str | None = Field(default=None)
    request_timeout_sec: float = Field(default=10.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
