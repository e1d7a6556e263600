"""Application configuration settings."""
import os
from pathlib import Path
from typing import Optional, List
from pydantic import BaseModel
from pydantic_settings import BaseSettings
from functools import lru_cache

from utils.exceptions import ConfigurationError

DEFAULT_WORKSPACE_ROOT = "/tmp/workspace"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "StoryToTest API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # CORS
    cors_origins: list[str] = ["*"]

    # Generation service
    openai_api_key: Optional[str] = None
    openai_api_base: str = "https://api.openai.com/v1"

    # GitHub
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_api_url: str = "https://api.github.com"

    # Workspace that holds the checked-out codebase under test
    workspace_root: str = DEFAULT_WORKSPACE_ROOT

    class Config:
        # Look for .env in project root (parent of server_py)
        env_file = os.path.join(Path(__file__).parent.parent.parent, ".env")
        case_sensitive = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_api_base=os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1"),
            github_token=os.getenv("GITHUB_TOKEN"),
            github_owner=os.getenv("GITHUB_OWNER"),
            github_repo=os.getenv("GITHUB_REPO"),
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            workspace_root=os.getenv("WORKSPACE_ROOT") or DEFAULT_WORKSPACE_ROOT,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            port=int(os.getenv("PORT", "5000")),
        )


class WorkflowConfig(BaseModel):
    """Validated configuration for the issue-to-pull-request workflow."""

    workspace_root: str
    github_token: str
    github_owner: str
    github_repo: str
    openai_api_key: str
    github_api_url: str = "https://api.github.com"
    openai_api_base: str = "https://api.openai.com/v1"

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkflowConfig":
        """Check every required field at once and fail with all missing names."""
        required = {
            "GITHUB_TOKEN": settings.github_token,
            "GITHUB_OWNER": settings.github_owner,
            "GITHUB_REPO": settings.github_repo,
            "OPENAI_API_KEY": settings.openai_api_key,
        }
        missing: List[str] = [name for name, value in required.items() if not (value or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                details={"missing": missing},
            )

        return cls(
            workspace_root=settings.workspace_root or DEFAULT_WORKSPACE_ROOT,
            github_token=settings.github_token,
            github_owner=settings.github_owner,
            github_repo=settings.github_repo,
            openai_api_key=settings.openai_api_key,
            github_api_url=settings.github_api_url,
            openai_api_base=settings.openai_api_base,
        )


def require_generation_key(settings: Settings) -> str:
    """Return the generation-service key or raise ConfigurationError."""
    key = (settings.openai_api_key or "").strip()
    if not key:
        raise ConfigurationError(
            "Missing required environment variables: OPENAI_API_KEY",
            details={"missing": ["OPENAI_API_KEY"]},
        )
    return key


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
