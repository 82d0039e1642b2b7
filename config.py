import os
import sys
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def default_data_root() -> Path:
    """Per-user application-data directory for the current platform."""
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        return Path(local_app_data)

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home)

    return Path.home() / ".local" / "share"


def default_app_dir() -> Path:
    """Directory holding the executable (frozen build) or this module."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Product Identity
    PROJECT_NAME: str = "PlanComplexity"
    PROJECT_VERSION: str = "1.0.0"
    VENDOR_FOLDER: str = "MAAS"
    EULA_URL: str = "https://varian-medicalaffairsappliedsolutions.github.io/MAAS-PlanComplexity"
    RELEASES_URL: str = "https://github.com/Varian-Innovation-Center/MAAS-PlanComplexity"

    # Access Codes
    CODE_FORMAT: Literal["short", "prefixed"] = "short"

    # Version Compatibility
    COMPATIBILITY_POLICY: Literal["major", "major_minor"] = "major_minor"
    REVERIFY_COMPATIBLE_CODES: bool = False  # False: key presence is enough

    # Storage
    DATA_DIR: Optional[Path] = None  # None: per-user application data
    STORE_FILENAME: str = "EulaConfig.json"
    LEGACY_STORE_FILENAME: str = "EulaConfig.xml"
    FALLBACK_DIR: Optional[Path] = None  # None: home directory

    # Expiration
    APP_DIR: Optional[Path] = None  # None: beside the executable
    OVERRIDE_MARKER: str = "NOEXPIRE"
    BLOCK_ON_INVALID_EXPIRATION: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="EULA_", env_file=".env", extra="ignore")

    def store_dir(self, product_folder: str) -> Path:
        """Folder holding the structured acceptance store for a product."""
        root = self.DATA_DIR if self.DATA_DIR is not None else default_data_root()
        return Path(root) / self.VENDOR_FOLDER / product_folder

    def store_path(self, product_folder: str) -> Path:
        return self.store_dir(product_folder) / self.STORE_FILENAME

    def legacy_store_path(self, product_folder: str) -> Path:
        return self.store_dir(product_folder) / self.LEGACY_STORE_FILENAME

    def fallback_path(self, product_folder: str) -> Path:
        """Flat key=code file used when the structured store cannot be written."""
        root = self.FALLBACK_DIR if self.FALLBACK_DIR is not None else Path.home()
        return Path(root) / f".{self.VENDOR_FOLDER.lower()}-{product_folder.lower()}-eula"

    def app_dir(self) -> Path:
        return Path(self.APP_DIR) if self.APP_DIR is not None else default_app_dir()


settings = Settings()
