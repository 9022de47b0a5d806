"""
Configuration settings for bezelgen.

Uses Pydantic Settings to load environment variables for file locations, the
probe app build, simulator timing and logging. CLI options are layered on top
with `Settings.model_copy(update=...)`.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Record files
    database_path: Path = Field(Path("./apple-device-database.json"), alias="BEZEL_DATABASE")
    output_path: Path = Field(
        Path("../Sources/BezelKit/Resources/bezel.min.json"), alias="BEZEL_OUTPUT"
    )
    docs_input_path: Path = Field(
        Path("../Sources/BezelKit/Resources/bezel.min.json"), alias="BEZEL_DOCS_INPUT"
    )
    docs_output_path: Path = Field(Path("../SupportedDeviceList.md"), alias="BEZEL_DOCS_OUTPUT")

    # Probe app
    project_path: Path = Field(Path("./FetchBezel/FetchBezel.xcodeproj"), alias="BEZEL_PROJECT")
    scheme: str = Field("FetchBezel", alias="BEZEL_SCHEME")
    bundle_id: str = Field("com.markbattistella.FetchBezel", alias="BEZEL_BUNDLE_ID")
    app_output_dir: Path = Field(Path("./output"), alias="BEZEL_APP_OUTPUT")

    # Tooling
    xcrun_path: str = Field("/usr/bin/xcrun", alias="XCRUN_PATH")
    xcodebuild_path: str = Field("/usr/bin/xcodebuild", alias="XCODEBUILD_PATH")
    command_timeout_seconds: Optional[float] = Field(None, alias="BEZEL_COMMAND_TIMEOUT")

    # Simulator timing
    launch_settle_seconds: float = Field(5.0, alias="BEZEL_LAUNCH_SETTLE_SECONDS")
    teardown_settle_seconds: float = Field(5.0, alias="BEZEL_TEARDOWN_SETTLE_SECONDS")

    # Application
    verbose: bool = Field(True, alias="BEZEL_VERBOSE")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")
    log_dir: Path = Field(Path("./logs"), alias="BEZEL_LOG_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
