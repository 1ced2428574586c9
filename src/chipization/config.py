"""
Configuration management for the Chipization tracker.

Builds configuration from in-code defaults, an optional JSON file and
environment overrides. The result is cached; call
``config_manager.load_config()`` after changing the environment.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Any, Optional, List

DEFAULT_DATABASE_URL = "sqlite:///./chipization.db"
MIN_PASSWORD_HASH_ITERATIONS = 1_000


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment ("1"/"true"/"yes" are truthy)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_database_url() -> str:
    """Resolve the database URL from the environment.

    Priority: CHIPIZATION_DATABASE_URL > TEST_DATABASE_URL > DATABASE_URL > default
    """
    return (
        os.getenv("CHIPIZATION_DATABASE_URL")
        or os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or DEFAULT_DATABASE_URL
    )


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_pre_ping: bool = True
    log_queries: bool = False  # Slow-query timing listener


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    auto_reload: bool = False
    workers: int = 1


@dataclass
class AppConfig:
    """Main application configuration."""

    app_name: str = "Chipization Tracker"
    version: str = "1.0.0"
    description: str = "Registry of chipped animals and the locations they visit"

    # Security
    password_hash_iterations: int = 120_000  # PBKDF2 iterations

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 1000

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"

    is_development: bool = False
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://127.0.0.1:8080", "http://localhost:8080"]
    )


@dataclass
class ChipizationConfig:
    """Complete configuration for the Chipization tracker."""

    app: AppConfig
    server: ServerConfig
    database: DatabaseConfig

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app": asdict(self.app),
            "server": asdict(self.server),
            "database": asdict(self.database),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChipizationConfig":
        """Create from dictionary."""
        return cls(
            app=AppConfig(**data.get("app", {})),
            server=ServerConfig(**data.get("server", {})),
            database=DatabaseConfig(**data.get("database", {})),
        )


class ConfigManager:
    """Manages configuration loading, saving, and environment overrides."""

    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[ChipizationConfig] = None

    def get_config_file_path(self) -> Optional[Path]:
        """Get the path of the JSON config file, if one is in use."""
        explicit = os.getenv("CHIPIZATION_CONFIG_FILE")
        if explicit:
            return Path(explicit)

        candidate = Path.cwd() / "data" / "config.json"
        return candidate if candidate.exists() else None

    def apply_environment(self, config: ChipizationConfig) -> ChipizationConfig:
        """Apply environment variable overrides on top of a loaded config."""
        if any(
            os.getenv(name)
            for name in ("CHIPIZATION_DATABASE_URL", "TEST_DATABASE_URL", "DATABASE_URL")
        ):
            config.database.url = resolve_database_url()

        if os.getenv("CHIPIZATION_DEBUG") is not None:
            debug = _env_flag("CHIPIZATION_DEBUG")
            config.server.debug = debug
            config.app.is_development = debug
            if debug:
                config.app.log_level = "DEBUG"

        if os.getenv("CHIPIZATION_LOG_LEVEL"):
            config.app.log_level = os.environ["CHIPIZATION_LOG_LEVEL"].upper()
        if os.getenv("CHIPIZATION_LOG_TO_FILE") is not None:
            config.app.log_to_file = _env_flag("CHIPIZATION_LOG_TO_FILE")
        if os.getenv("CHIPIZATION_LOG_DIR"):
            config.app.log_dir = os.environ["CHIPIZATION_LOG_DIR"]
        if os.getenv("CHIPIZATION_LOG_QUERIES") is not None:
            config.database.log_queries = _env_flag("CHIPIZATION_LOG_QUERIES")
        if os.getenv("CHIPIZATION_PASSWORD_HASH_ITERATIONS"):
            config.app.password_hash_iterations = int(
                os.environ["CHIPIZATION_PASSWORD_HASH_ITERATIONS"]
            )

        return config

    def create_default_config(self) -> ChipizationConfig:
        """Create default configuration."""
        return ChipizationConfig(
            app=AppConfig(),
            server=ServerConfig(),
            database=DatabaseConfig(),
        )

    def load_config(self) -> ChipizationConfig:
        """Load configuration from file (if any) and apply environment overrides."""
        self.config_file = self.get_config_file_path()

        if self.config_file is not None and self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = ChipizationConfig.from_dict(data)
                logging.info(f"Loaded configuration from {self.config_file}")
            except (OSError, ValueError, TypeError) as e:
                logging.warning(f"Failed to load config from {self.config_file}: {e}")
                config = self.create_default_config()
        else:
            config = self.create_default_config()

        self.config = self.apply_environment(config)
        return self.config

    def get(self) -> ChipizationConfig:
        """Return the cached configuration, loading it on first use."""
        if self.config is None:
            self.load_config()
        return self.config

    def save_config(self, config: Optional[ChipizationConfig] = None) -> bool:
        """Save configuration to the JSON file."""
        if config is None:
            config = self.config

        if config is None:
            logging.error("No configuration to save")
            return False

        target = self.config_file or Path.cwd() / "data" / "config.json"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
            self.config_file = target
            logging.info(f"Saved configuration to {target}")
            return True
        except OSError as e:
            logging.error(f"Failed to save config to {target}: {e}")
            return False

    def update_config(self, updates: Dict[str, Any]) -> bool:
        """Update configuration with new values and persist them.

        Keys are either section names mapped to dicts or dotted paths like
        ``"server.port"``.
        """
        config_dict = self.get().to_dict()

        for key, value in updates.items():
            if "." in key:
                section, field_name = key.split(".", 1)
                if section in config_dict:
                    config_dict[section][field_name] = value
            elif key in config_dict and isinstance(value, dict):
                config_dict[key].update(value)

        self.config = ChipizationConfig.from_dict(config_dict)
        return self.save_config()

    def validate_config(self) -> List[str]:
        """Validate configuration and return a list of issues."""
        config = self.get()
        issues = []

        if config.app.default_page_size <= 0:
            issues.append("default_page_size must be positive")
        if config.app.max_page_size < config.app.default_page_size:
            issues.append("max_page_size must not be smaller than default_page_size")
        if config.app.password_hash_iterations < MIN_PASSWORD_HASH_ITERATIONS:
            issues.append(
                f"password_hash_iterations below {MIN_PASSWORD_HASH_ITERATIONS}"
            )

        db_url = config.database.url
        if db_url.startswith("sqlite:///") and ":memory:" not in db_url:
            db_dir = Path(db_url.replace("sqlite:///", "")).parent
            if db_dir.exists() and not os.access(db_dir, os.W_OK):
                issues.append(f"Database directory is not writable: {db_dir}")

        return issues


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> ChipizationConfig:
    """Get the current configuration."""
    return config_manager.get()


def get_database_url() -> str:
    """Get the database URL."""
    return get_config().database.url


def save_config(config: Optional[ChipizationConfig] = None) -> bool:
    """Persist the configuration to its JSON file."""
    return config_manager.save_config(config)


def update_config(updates: Dict[str, Any]) -> bool:
    """Update and persist configuration values (``{"server.port": 9000}``)."""
    return config_manager.update_config(updates)


def validate_config() -> List[str]:
    """Return human-readable configuration issues; empty when valid."""
    return config_manager.validate_config()
