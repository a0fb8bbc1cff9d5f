# sales_ops/config.py
"""
Configuration for the Sales Operations Dashboard

Sources:
- Local runs: environment variables, loaded from a .env file when present
- Streamlit Cloud: the [DB_CONFIG] table of secrets.toml

App settings always come from the environment with typed defaults.
Missing database credentials only log a warning here; the error is
raised when an engine is first requested.
"""

import os
import logging
from pathlib import Path
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Mapping, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """True when Streamlit secrets are available."""
    try:
        import streamlit as st
        return len(st.secrets) > 0
    except Exception:
        return False


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# (parser, default) per setting; values are read from os.environ
APP_SETTINGS: Dict[str, Tuple[Callable[[str], Any], str]] = {
    "SESSION_TIMEOUT_HOURS": (int, "8"),
    "DB_POOL_SIZE": (int, "5"),
    "DB_POOL_RECYCLE": (int, "3600"),
    "CACHE_TTL_SECONDS": (int, "300"),
    "DAILY_LOOKBACK_DAYS": (int, "120"),
    "PAGE_SIZE": (int, "25"),
    "EXPORT_BATCH_SIZE": (int, "1000"),
    "ENABLE_DEBUG_MODE": (_as_bool, "false"),
}


@dataclass
class DatabaseConfig:
    """Hosted Postgres connection settings."""
    host: str
    port: int
    user: str
    password: str
    database: str = "postgres"
    driver: str = "postgresql+psycopg2"
    sslmode: str = "require"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "5432")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", "postgres"),
            driver=os.getenv("DB_DRIVER", "postgresql+psycopg2"),
            sslmode=os.getenv("DB_SSLMODE", "require"),
        )

    @classmethod
    def from_secrets(cls, secrets: Mapping[str, Any]) -> "DatabaseConfig":
        return cls(
            host=secrets.get("host", ""),
            port=int(secrets.get("port", 5432)),
            user=secrets.get("user", ""),
            password=secrets.get("password", ""),
            database=secrets.get("database", "postgres"),
            driver=secrets.get("driver", "postgresql+psycopg2"),
            sslmode=secrets.get("sslmode", "require"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class Config:
    """
    Process-wide configuration (singleton).

    Usage:
        from sales_ops.config import config

        db_config = config.get_db_config()
        page_size = config.get_app_setting("PAGE_SIZE", 25)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()

        if self.is_cloud:
            import streamlit as st
            self._db_config = DatabaseConfig.from_secrets(st.secrets.get("DB_CONFIG", {}))
            logger.info("☁️ Running in STREAMLIT CLOUD")
        else:
            self._load_dotenv()
            self._db_config = DatabaseConfig.from_env()
            logger.info("💻 Running in LOCAL environment")

        self._app_config = {
            key: parse(os.getenv(key, default))
            for key, (parse, default) in APP_SETTINGS.items()
        }

        if self._db_config.is_configured():
            logger.info(f"✅ Database: {self._db_config.host}/{self._db_config.database}")
        else:
            logger.warning("Missing database configuration (DB_HOST, DB_USER, DB_PASSWORD)")

        self._initialized = True

    @staticmethod
    def _load_dotenv():
        for env_path in (Path.cwd() / ".env", Path(__file__).parent.parent / ".env"):
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                return

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """
        Database settings as a dict (see DatabaseConfig).

        Raises:
            ValueError: If host, user or password is missing
        """
        if not self._db_config.is_configured():
            raise ValueError("Missing required database configuration. Please check .env file.")
        return self._db_config.to_dict()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        return self._app_config.get(key, default)

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',
]
