"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "reel-pipeline"
    app_env: str = "dev"
    log_level: str = ""
    port: int = Field(default=0, ge=0, le=65535)
    auto_publish: bool | None = None
    strict_env: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    script_api_key: str = ""
    script_model: str = "deepseek-chat"
    script_base_url: str = "https://api.deepseek.com"
    script_timeout_s: float = Field(default=30.0, ge=0.5)
    script_max_retries: int = Field(default=1, ge=0)
    script_backoff_s: float = Field(default=0.5, ge=0.0)

    video_api_key: str = ""
    video_base_url: str = "https://api.kie.ai/api/v1/runway"
    video_timeout_s: float = Field(default=30.0, ge=0.5)
    video_poll_max_attempts: int = Field(default=20, ge=1)
    video_poll_base_delay_s: float = Field(default=2.0, ge=0.0)
    video_poll_multiplier: float = Field(default=1.3, ge=1.0)

    voice_api_key: str = ""

    youtube_client_id: str = ""
    youtube_client_secret: str = ""
    youtube_refresh_token: str = ""

    face_data_path: Path = PROJECT_ROOT / "data" / "faces.json"
    upload_dir: Path = PROJECT_ROOT / "uploads"
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="REEL_PIPELINE_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_log_level(self) -> str:
        return (self.log_level or os.getenv("LOG_LEVEL", "") or "info").upper()

    def resolved_port(self) -> int:
        if self.port:
            return self.port
        raw_value = os.getenv("PORT", "")
        try:
            return int(raw_value)
        except ValueError:
            return 4000

    def resolved_auto_publish(self) -> bool:
        if self.auto_publish is not None:
            return self.auto_publish
        return os.getenv("AUTO_PUBLISH", "").strip().lower() in _TRUTHY

    def resolved_script_api_key(self) -> str:
        return self.script_api_key or os.getenv("DEEPSEEK_API_KEY", "")

    def resolved_video_api_key(self) -> str:
        return self.video_api_key or os.getenv("KIE_API_KEY", "")

    def resolved_voice_api_key(self) -> str:
        return self.voice_api_key or os.getenv("ELEVENLABS_API_KEY", "")

    def resolved_youtube_credentials(self) -> tuple[str, str, str]:
        return (
            self.youtube_client_id or os.getenv("YOUTUBE_CLIENT_ID", ""),
            self.youtube_client_secret or os.getenv("YOUTUBE_CLIENT_SECRET", ""),
            self.youtube_refresh_token or os.getenv("YOUTUBE_REFRESH_TOKEN", ""),
        )

    def missing_credentials(self) -> list[str]:
        client_id, client_secret, refresh_token = self.resolved_youtube_credentials()
        checks = {
            "DEEPSEEK_API_KEY": self.resolved_script_api_key(),
            "KIE_API_KEY": self.resolved_video_api_key(),
            "ELEVENLABS_API_KEY": self.resolved_voice_api_key(),
            "YOUTUBE_CLIENT_ID": client_id,
            "YOUTUBE_CLIENT_SECRET": client_secret,
            "YOUTUBE_REFRESH_TOKEN": refresh_token,
        }
        return [name for name, value in checks.items() if not value]

    def assert_env(self) -> None:
        """Fail fast on missing provider credentials when strict mode is on."""
        if not self.strict_env:
            return
        missing = self.missing_credentials()
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
