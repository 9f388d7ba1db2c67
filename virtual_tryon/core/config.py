from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_txt_path: str = Field(default="", alias="API_TXT_PATH")

    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash-image-preview", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta", alias="GEMINI_BASE_URL"
    )
    gemini_read_timeout: float = Field(default=600.0, alias="GEMINI_READ_TIMEOUT")
    proxy_url: str = Field(default="", alias="PROXY_URL")

    sample_timeout: float = Field(default=30.0, alias="SAMPLE_TIMEOUT")
    max_upload_mb: int = Field(default=5, alias="MAX_UPLOAD_MB")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_keys_from_txt(path: str) -> None:
    p = Path(path)
    if not p.exists():
        raise RuntimeError(f"api.txt not found at: {path}")

    for raw in p.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and value:
            os.environ[key] = value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    temp = Settings()
    if not temp.api_txt_path:
        return temp

    # keys from the file win over .env, so re-read after exporting them
    load_keys_from_txt(temp.api_txt_path)
    return Settings()
