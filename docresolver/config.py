# docresolver/config.py
"""
Configuration management using Pydantic Settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    LOG_LEVEL: str = "INFO"
    # Content provider authorities
    EXTERNAL_STORAGE_AUTHORITY: str = "com.android.externalstorage.documents"
    DOWNLOADS_AUTHORITY: str = "com.android.providers.downloads.documents"
    # Shared storage layout as seen by the legacy downloads provider
    SHARED_STORAGE_ROOT: str = "/storage/emulated/0"
    PRIMARY_VOLUME: str = "primary"
    DOWNLOAD_FOLDER_NAME: str = "Download"
    # Platform API level; 30+ restricts listing of the downloads root
    PLATFORM_API_LEVEL: int = Field(30, ge=1)
    # Raw filesystem fallback: device paths are resolved under this base
    FILESYSTEM_BASE_PATH: Optional[str] = None
    FILESYSTEM_FALLBACK_ENABLED: bool = True

settings = Settings()
