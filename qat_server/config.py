"""Server configuration."""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables with QAT_ prefix.
    Example: QAT_BIN_DIR=/opt/qat/linux/x64 QAT_TOOL_TIMEOUT=60 uv run qat-server
    """

    model_config = SettingsConfigDict(env_prefix="QAT_")

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Toolchain. bin_dir defaults to qat_server/bin/<platform>/<arch>
    bin_dir: Optional[Path] = None
    tool_path: Optional[Path] = None
    temp_dir: Optional[Path] = None
    tool_timeout: Optional[float] = None  # None: wait until the host gives up

    # Proxy
    proxy_timeout: float = 60.0


settings = Settings()
