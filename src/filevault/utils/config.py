"""
FileVault Configuration Module

Provides configuration management with:
- Environment variable loading (FILE_VAULT_ prefix)
- APP_KEY fallback for the default key
- Type validation via Pydantic
- Development overrides via .env file

Settings objects are passed explicitly to ``Vault`` so that several vaults
with different keys and disks can be active in one process.
"""

from typing import Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import configure_logging, get_logger

BASE64_KEY_PREFIX = "base64:"


class VaultSettings(BaseSettings):
    """
    FileVault settings.

    Loads from environment variables with FILE_VAULT_ prefix.

    Usage:
        from filevault.utils.config import VaultSettings

        settings = VaultSettings()
        vault = Vault(settings)
    """
    model_config = SettingsConfigDict(
        env_prefix='FILE_VAULT_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        populate_by_name=True,
    )

    # ==========================================================================
    # GENERAL
    # ==========================================================================
    ENVIRONMENT: str = Field(default="development", description="Runtime environment: development, staging, production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # ==========================================================================
    # ENCRYPTION
    # ==========================================================================
    KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("FILE_VAULT_KEY", "APP_KEY"),
        description="Default key, raw or 'base64:' prefixed. MAKE A BACKUP, nothing decrypts without it.",
    )
    CIPHER: str = Field(default="AES-256-CBC", description="Cipher: AES-128-CBC or AES-256-CBC")

    # ==========================================================================
    # STORAGE
    # ==========================================================================
    DISK: str = Field(default="local", description="Default disk used to locate files")
    DISKS: Dict[str, str] = Field(
        default_factory=lambda: {"local": "storage/app"},
        description="JSON mapping of disk name to root directory",
    )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration for production readiness.

        Returns:
            List of configuration warnings/errors
        """
        issues = []

        if self.is_production():
            if not self.KEY:
                issues.append("CRITICAL: FILE_VAULT_KEY (or APP_KEY) not set")
            elif not self.KEY.startswith(BASE64_KEY_PREFIX):
                issues.append("WARNING: FILE_VAULT_KEY is not base64 encoded")
            if self.CIPHER.upper() == "AES-128-CBC":
                issues.append("WARNING: FILE_VAULT_CIPHER=AES-128-CBC in production")
            if self.DISK not in self.DISKS:
                issues.append(f"CRITICAL: default disk '{self.DISK}' is not configured")

        return issues


def get_settings() -> VaultSettings:
    """Load settings from the environment, configure logging and report production issues."""
    settings = VaultSettings()
    configure_logging(settings)
    if settings.is_production():
        _issues = settings.validate_production_config()
        if _issues:
            _logger = get_logger(__name__)
            for issue in _issues:
                if issue.startswith("CRITICAL"):
                    _logger.critical(issue)
                else:
                    _logger.warning(issue)
    return settings
