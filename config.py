# config.py
"""
Configuration management for the commission ledger.
Loads from .env and validates policy keys.
"""
import os
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Configuration error exception."""
    pass


class Config:
    """
    Configuration manager with static and dynamic values.

    Usage:
        # Load from .env
        Config.initialize_from_env()

        # Get value
        url = Config.get(Config.DATABASE_URL)

        # Set dynamic value
        Config.set(Config.SPONSOR_POLICY, "lenient")
    """

    # ═══════════════════════════════════════════════════════════════════════
    # CONFIGURATION KEYS
    # ═══════════════════════════════════════════════════════════════════════

    # Database
    DATABASE_URL = "DATABASE_URL"
    STORE_KEY = "STORE_KEY"

    # MLM System
    SPONSOR_POLICY = "SPONSOR_POLICY"
    MAX_RATE_TOTAL = "MAX_RATE_TOTAL"

    # System
    LOG_LEVEL = "LOG_LEVEL"

    # ═══════════════════════════════════════════════════════════════════════
    # DEFAULTS
    # ═══════════════════════════════════════════════════════════════════════

    SPONSOR_POLICY_STRICT = "strict"
    SPONSOR_POLICY_LENIENT = "lenient"
    SPONSOR_POLICIES = (SPONSOR_POLICY_STRICT, SPONSOR_POLICY_LENIENT)

    DEFAULTS: Dict[str, Any] = {
        DATABASE_URL: "sqlite:///mlm.db",
        STORE_KEY: "mlm_db_v2",
        SPONSOR_POLICY: SPONSOR_POLICY_STRICT,
        MAX_RATE_TOTAL: Decimal("100"),
        LOG_LEVEL: "INFO",
    }

    # ═══════════════════════════════════════════════════════════════════════
    # STORAGE
    # ═══════════════════════════════════════════════════════════════════════

    _config: Dict[str, Any] = {}
    _initialized: bool = False

    # ═══════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    def initialize_from_env(cls) -> None:
        """
        Load configuration from .env file and process environment.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        load_dotenv()

        logger.info("Loading configuration from environment...")

        cls._config[cls.DATABASE_URL] = os.getenv(
            "DATABASE_URL",
            cls.DEFAULTS[cls.DATABASE_URL]
        )
        cls._config[cls.STORE_KEY] = os.getenv(
            "STORE_KEY",
            cls.DEFAULTS[cls.STORE_KEY]
        )

        cls._config[cls.SPONSOR_POLICY] = cls.parse_sponsor_policy(
            os.getenv("SPONSOR_POLICY", cls.DEFAULTS[cls.SPONSOR_POLICY])
        )

        max_total = os.getenv("MAX_RATE_TOTAL")
        if max_total is None:
            cls._config[cls.MAX_RATE_TOTAL] = cls.DEFAULTS[cls.MAX_RATE_TOTAL]
        else:
            cls._config[cls.MAX_RATE_TOTAL] = cls.parse_max_rate_total(max_total)

        cls._config[cls.LOG_LEVEL] = os.getenv(
            "LOG_LEVEL",
            cls.DEFAULTS[cls.LOG_LEVEL]
        ).upper()

        cls._initialized = True
        logger.info("Configuration loaded from environment successfully")

    @staticmethod
    def parse_sponsor_policy(value: str) -> str:
        """
        Normalize a sponsor policy name.

        Raises:
            ConfigurationError: If value is not a known policy
        """
        policy = (value or "").strip().lower()
        if policy not in Config.SPONSOR_POLICIES:
            raise ConfigurationError(
                f"SPONSOR_POLICY must be one of {', '.join(Config.SPONSOR_POLICIES)}, got '{value}'"
            )
        return policy

    @staticmethod
    def parse_max_rate_total(value: str) -> Optional[Decimal]:
        """
        Parse MAX_RATE_TOTAL. Empty string disables the cap.

        Raises:
            ConfigurationError: If value is not a non-negative number
        """
        if value.strip() == "":
            return None
        try:
            total = Decimal(value.strip())
        except InvalidOperation:
            raise ConfigurationError(f"MAX_RATE_TOTAL is not a number: '{value}'")
        if not total.is_finite() or total < 0:
            raise ConfigurationError(f"MAX_RATE_TOTAL must be a non-negative number, got '{value}'")
        return total

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Falls back to the built-in default for known keys when the
        configuration was not loaded or the key was never set.
        """
        if key in cls._config:
            return cls._config[key]
        if default is not None:
            return default
        return cls.DEFAULTS.get(key)

    @classmethod
    def set(cls, key: str, value: Any, source: str = "runtime") -> None:
        """
        Set configuration value (for dynamic updates).

        Args:
            key: Configuration key
            value: New value
            source: Source of the update (for logging)
        """
        cls._config[key] = value
        logger.debug(f"Config updated: {key} = {value} (source: {source})")

    @classmethod
    def get_all(cls) -> Dict[str, Any]:
        """Get all configuration values, defaults included."""
        merged = dict(cls.DEFAULTS)
        merged.update(cls._config)
        return merged

    @classmethod
    def reset(cls) -> None:
        """Drop loaded values, returning to built-in defaults."""
        cls._config = {}
        cls._initialized = False
