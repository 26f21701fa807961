"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "NOVA DEFENSE"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Simulation engine
    simulation_enabled: bool = True
    simulation_fps: int = 60
    simulation_autostart: bool = False  # begin a session as soon as the app is up

    # Tactical tips (Ollama)
    tips_enabled: bool = True
    tips_language: str = "en"
    tips_timeout: float = 10.0
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gemma3:4b"


settings = Settings()
