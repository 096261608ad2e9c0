"""Настройки конфигурации."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from sync_checker.services.analysis.config import AnalysisConfig


class Settings(BaseSettings):
    """Конфигурация приложения."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SYNC_CHECKER_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO")

    # Режим обхода модулей: синхронный или asyncio
    async_mode: bool = Field(default=False)
    max_concurrency: int = Field(default=8)

    # Удалённые модули
    follow_remote_imports: bool = Field(default=True)
    http_timeout: float = Field(default=30.0)  # секунды
    deno_executable: str = Field(default="deno")

    def analysis_config(self) -> AnalysisConfig:
        """Собрать конфигурацию анализа из настроек окружения."""
        return AnalysisConfig(
            follow_remote_imports=self.follow_remote_imports,
            max_concurrency=self.max_concurrency,
        )
