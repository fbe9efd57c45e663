# productstore/config/settings.py
# Application configuration read from the environment (and .env at the project root).

from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv
import os
import logging
import sys
from urllib.parse import quote_plus

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
load_dotenv(dotenv_path=os.path.join(PROJECT_ROOT, '.env'))

ASSOCIATION_LOAD_STRATEGIES = ('batch', 'per_entity')

def _env(name: str, default: str = ''):
    return field(default_factory=lambda: os.environ.get(name, default))

def _env_int(name: str, default: int):
    return field(default_factory=lambda: int(os.environ.get(name, default)))

def _env_flag(name: str, default: bool):
    return field(default_factory=lambda: os.environ.get(name, str(default)).strip().lower() in ('1', 'true', 'yes'))

def _warn(message: str):
    print(f"Warning: {message}", file=sys.stderr)

@dataclass
class Config:
    """
    Runtime settings. Every field can be overridden by an environment variable
    of the same name, or passed explicitly (tests build Config(...) directly).
    """
    # Flask
    SECRET_KEY: str = _env('SECRET_KEY', 'default_secret_key_change_me_in_env')
    APP_HOST: str = _env('APP_HOST', '0.0.0.0')
    APP_PORT: int = _env_int('APP_PORT', 5004)
    APP_DEBUG: bool = _env_flag('APP_DEBUG', True)
    LOG_LEVEL: str = field(default_factory=lambda: os.environ.get('LOG_LEVEL', 'DEBUG').upper())

    # Database: DATABASE_URL wins, otherwise the URI is built from DB_TYPE
    DB_TYPE: str = field(default_factory=lambda: os.environ.get('DB_TYPE', 'POSTGRES').upper())
    DB_POOL_SIZE: int = _env_int('DB_POOL_SIZE', 10)
    DB_MAX_OVERFLOW: int = _env_int('DB_MAX_OVERFLOW', 20)
    POSTGRES_HOST: str = _env('POSTGRES_HOST', 'localhost')
    POSTGRES_PORT: int = _env_int('POSTGRES_PORT', 5432)
    POSTGRES_USER: str = _env('POSTGRES_USER')
    POSTGRES_PASSWORD: str = _env('POSTGRES_PASSWORD')
    POSTGRES_DB: str = _env('POSTGRES_DB')
    SQLALCHEMY_DATABASE_URI: Optional[str] = field(default_factory=lambda: os.environ.get('DATABASE_URL') or None)

    # Listing endpoints and association loading
    DEFAULT_PAGE_SIZE: int = _env_int('DEFAULT_PAGE_SIZE', 10)
    MAX_PAGE_SIZE: int = _env_int('MAX_PAGE_SIZE', 100)
    ASSOCIATION_LOAD_STRATEGY: str = field(default_factory=lambda: os.environ.get('ASSOCIATION_LOAD_STRATEGY', 'batch').lower())

    def __post_init__(self):
        if self.LOG_LEVEL not in logging._nameToLevel:
            _warn(f"Invalid LOG_LEVEL '{self.LOG_LEVEL}'. Defaulting to DEBUG.")
            self.LOG_LEVEL = 'DEBUG'

        if not self.SQLALCHEMY_DATABASE_URI:
            self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

        if self.MAX_PAGE_SIZE < 1:
            _warn(f"MAX_PAGE_SIZE ({self.MAX_PAGE_SIZE}) is invalid. Using 100.")
            self.MAX_PAGE_SIZE = 100
        if not 1 <= self.DEFAULT_PAGE_SIZE <= self.MAX_PAGE_SIZE:
            _warn(f"DEFAULT_PAGE_SIZE ({self.DEFAULT_PAGE_SIZE}) is outside 1..{self.MAX_PAGE_SIZE}. Clamping.")
            self.DEFAULT_PAGE_SIZE = min(max(self.DEFAULT_PAGE_SIZE, 1), self.MAX_PAGE_SIZE)

        if self.ASSOCIATION_LOAD_STRATEGY not in ASSOCIATION_LOAD_STRATEGIES:
            _warn(f"Unsupported ASSOCIATION_LOAD_STRATEGY '{self.ASSOCIATION_LOAD_STRATEGY}'. Using 'batch'.")
            self.ASSOCIATION_LOAD_STRATEGY = 'batch'

    def _build_database_uri(self) -> Optional[str]:
        if self.DB_TYPE == 'POSTGRES':
            if not all([self.POSTGRES_HOST, self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
                _warn("PostgreSQL connection details are incomplete (POSTGRES_HOST/USER/PASSWORD/DB).")
                return None
            password = quote_plus(self.POSTGRES_PASSWORD)
            return f"postgresql+psycopg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        if self.DB_TYPE == 'SQLITE':
            db_path = os.environ.get('DATABASE_PATH')
            if not db_path:
                _warn("DB_TYPE is SQLITE but DATABASE_PATH is not set.")
                return None
            if not os.path.isabs(db_path):
                db_path = os.path.join(PROJECT_ROOT, db_path)
            os.makedirs(os.path.dirname(db_path), exist_ok=True)
            return f"sqlite:///{db_path}"
        _warn(f"Unsupported DB_TYPE '{self.DB_TYPE}'. No database URI configured.")
        return None

    def masked_database_uri(self) -> str:
        uri = str(self.SQLALCHEMY_DATABASE_URI)
        if self.POSTGRES_PASSWORD:
            uri = uri.replace(quote_plus(self.POSTGRES_PASSWORD), '********')
        return uri

_config_instance: Optional[Config] = None

def load_config() -> Config:
    """Loads the Config singleton on first call and prints a summary of it."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
        c = _config_instance
        print("--- Configuration Loaded ---")
        print(f"  APP: {c.APP_HOST}:{c.APP_PORT} (debug={c.APP_DEBUG}, log level {c.LOG_LEVEL})")
        print(f"  DATABASE: {c.DB_TYPE} {c.masked_database_uri()}")
        print(f"  PAGE_SIZE (default/max): {c.DEFAULT_PAGE_SIZE}/{c.MAX_PAGE_SIZE}")
        print(f"  ASSOCIATION_LOAD_STRATEGY: {c.ASSOCIATION_LOAD_STRATEGY}")
        print("----------------------------")
    return _config_instance

config = load_config()