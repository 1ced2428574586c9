"""
Centralized logging configuration for the Chipization tracker.
Provides component-specific loggers with optional separate log files.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..config import get_config

DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class ComponentLogger:
    """Manages component-specific logging."""

    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _log_dir: Optional[Path] = None
    _log_to_file = False

    # Component definitions with their default log levels
    COMPONENTS = {
        "api": {"level": logging.INFO, "file": "api.log"},
        "database": {"level": logging.INFO, "file": "database.log"},
        "lifecycle": {"level": logging.INFO, "file": "lifecycle.log"},
        "visits": {"level": logging.INFO, "file": "visits.log"},
        "registry": {"level": logging.INFO, "file": "registry.log"},
        "auth": {"level": logging.INFO, "file": "auth.log"},
        "main": {"level": logging.INFO, "file": "main.log"},
        "error": {"level": logging.ERROR, "file": "errors.log"},
    }

    # Module path segment -> component
    MODULE_COMPONENTS = {
        "lifecycle_engine": "lifecycle",
        "visit_sequencer": "visits",
        "visits": "visits",
        "type_registry": "registry",
        "location_points": "registry",
        "accounts": "registry",
        "search": "registry",
        "db": "database",
        "repositories": "database",
        "auth": "auth",
        "api": "api",
        "main": "main",
    }

    @classmethod
    def initialize(
        cls,
        log_dir: Optional[str] = None,
        debug: Optional[bool] = None,
        log_to_file: Optional[bool] = None,
    ) -> None:
        """
        Initialize the logging system with component-specific loggers.

        Args:
            log_dir: Directory for log files. Defaults to config.app.log_dir
            debug: Enable debug logging for all components
            log_to_file: Write rotating per-component files in a session directory
        """
        if cls._initialized:
            return

        config = get_config()
        if debug is None:
            debug = config.server.debug or config.app.log_level == "DEBUG"
        if log_to_file is None:
            log_to_file = config.app.log_to_file
        cls._log_to_file = log_to_file

        detailed_formatter = logging.Formatter(DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        simple_formatter = logging.Formatter(SIMPLE_FORMAT, datefmt="%H:%M:%S")

        unified_handler = None
        if log_to_file:
            base_dir = Path(log_dir or config.app.log_dir)
            session_dir = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._log_dir = base_dir / session_dir
            cls._log_dir.mkdir(parents=True, exist_ok=True)

            unified_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / "unified.log",
                maxBytes=20 * 1024 * 1024,  # 20MB
                backupCount=3,
                encoding="utf-8",
            )
            unified_handler.setFormatter(detailed_formatter)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(simple_formatter)

        for component_name, component_config in cls.COMPONENTS.items():
            logger = logging.getLogger(f"chipization.{component_name}")
            logger.handlers.clear()
            # Propagation keeps records visible to pytest's caplog
            logger.propagate = True

            level = logging.DEBUG if debug else component_config["level"]
            logger.setLevel(level)

            if log_to_file:
                file_handler = logging.handlers.RotatingFileHandler(
                    cls._log_dir / component_config["file"],
                    maxBytes=10 * 1024 * 1024,  # 10MB
                    backupCount=5,
                    encoding="utf-8",
                )
                file_handler.setFormatter(detailed_formatter)
                logger.addHandler(file_handler)
                logger.addHandler(unified_handler)

            cls._loggers[component_name] = logger

        # Console output goes through the package root logger once
        root = logging.getLogger("chipization")
        root.handlers.clear()
        root.setLevel(logging.DEBUG if debug else logging.INFO)
        root.addHandler(console_handler)
        root.propagate = True

        cls._initialized = True

        main_logger = cls._loggers["main"]
        main_logger.debug(
            f"Logging initialized (debug={debug}, log_dir={cls._log_dir or 'console'})"
        )

    @classmethod
    def resolve_component(cls, name: str) -> str:
        """Map a component name or module path (``__name__``) to a component."""
        if name in cls.COMPONENTS:
            return name
        if name.startswith("chipization."):
            for part in reversed(name.split(".")[1:]):
                if part in cls.MODULE_COMPONENTS:
                    return cls.MODULE_COMPONENTS[part]
            return "main"
        return name

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (api, database, lifecycle, ...) or a
                      module path like 'chipization.core.visit_sequencer'

        Returns:
            Logger instance for the component
        """
        if not cls._initialized:
            cls.initialize()

        component = cls.resolve_component(component)
        if component not in cls._loggers:
            cls._create_component_logger(component)
        return cls._loggers[component]

    @classmethod
    def _create_component_logger(cls, component: str) -> None:
        """Create a component logger on-demand."""
        logger = logging.getLogger(f"chipization.{component}")
        logger.propagate = True

        if cls._log_to_file and cls._log_dir is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / f"{component}.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(
                logging.Formatter(DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
            logger.addHandler(file_handler)

        cls._loggers[component] = logger

    @classmethod
    def log_exception(
        cls, component: str, exc: Exception, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an exception with context to both component and error logs.

        Args:
            component: Component where the exception occurred
            exc: The exception to log
            context: Additional context information
        """
        component_logger = cls.get_logger(component)
        error_logger = cls.get_logger("error")

        context_str = ""
        if context:
            context_str = " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())

        component_logger.error(
            f"Exception in {component}: {type(exc).__name__}: {exc}{context_str}",
            exc_info=exc,
        )
        error_logger.error(
            f"[{component}] {type(exc).__name__}: {exc}{context_str}", exc_info=exc
        )

    @classmethod
    def get_log_directory(cls) -> Optional[Path]:
        """Get the current log directory path."""
        return cls._log_dir

    @classmethod
    def reset(cls) -> None:
        """Drop handlers and forget initialization (used when config changes)."""
        for logger in cls._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        cls._loggers = {}
        cls._initialized = False
        cls._log_dir = None


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component or module path."""
    return ComponentLogger.get_logger(component)


def initialize_logging(
    log_dir: Optional[str] = None,
    debug: Optional[bool] = None,
    log_to_file: Optional[bool] = None,
) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(log_dir=log_dir, debug=debug, log_to_file=log_to_file)


def log_exception(
    component: str, exc: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an exception with context."""
    ComponentLogger.log_exception(component, exc, context)


def get_log_directory() -> Optional[Path]:
    """Get the current log directory path."""
    return ComponentLogger.get_log_directory()
