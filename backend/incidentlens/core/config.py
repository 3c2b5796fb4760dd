from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Groq / completion service (OpenAI-compatible)
    groq_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.3-70b-versatile"

    # Tavily / web search
    tavily_api_key: Optional[str] = None
    tavily_base_url: str = "https://api.tavily.com"

    # Reserved for the memory service; required but not used by the pipeline
    mem0_api_key: Optional[str] = None

    # Outbound request timeout
    request_timeout_seconds: float = 30.0

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def has_groq_key(self) -> bool:
        return _is_set(self.groq_api_key)

    @property
    def has_tavily_key(self) -> bool:
        return _is_set(self.tavily_api_key)

    @property
    def has_mem0_key(self) -> bool:
        return _is_set(self.mem0_api_key)

    @property
    def missing_keys(self) -> List[str]:
        """Names of the required credentials that are not configured."""
        missing = []
        if not self.has_groq_key:
            missing.append("GROQ_API_KEY")
        if not self.has_tavily_key:
            missing.append("TAVILY_API_KEY")
        if not self.has_mem0_key:
            missing.append("MEM0_API_KEY")
        return missing


def _is_set(value: Optional[str]) -> bool:
    return value is not None and len(value.strip()) > 0


settings = Settings()
