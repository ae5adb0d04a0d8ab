from functools import lru_cache
from typing import Dict, List, Optional
import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .types import IdentityType, Permission

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "https://api.picaos.com"
WILDCARD = "*"


class Settings(BaseSettings):
    """Toolkit settings loaded from PICA_* environment variables."""

    # Credentials
    secret_key: str
    server_url: str = DEFAULT_SERVER_URL

    # Access scoping
    connectors: List[str] = []
    actions: Optional[List[str]] = None
    permissions: Optional[Permission] = None
    identity: Optional[str] = None
    identity_type: Optional[IdentityType] = None

    # Extra headers merged into every outbound request
    headers: Dict[str, str] = {}

    # Modes
    knowledge_agent: bool = False
    authkit: bool = False

    # Transport
    timeout_seconds: float = 30.0
    page_size: int = 100

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    class Config:
        env_prefix = "PICA_"
        env_file = ".env"
        case_sensitive = False

    @field_validator("secret_key")
    @classmethod
    def _require_secret(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError(
                "A valid Pica API key must be provided. You can obtain your API key "
                "from the Pica dashboard: https://app.picaos.com/settings/api-keys"
            )
        return value

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return (value or DEFAULT_SERVER_URL).rstrip("/")

    @property
    def all_connectors(self) -> bool:
        return WILDCARD in self.connectors

    @property
    def all_actions(self) -> bool:
        return self.actions is not None and WILDCARD in self.actions


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    logger.info(f"Settings loaded - Server URL: {settings.server_url}")
    logger.info(f"Settings loaded - Secret key: ****... (length: {len(settings.secret_key)})")
    return settings
