"""
Planner Settings
================

Loads task_settings.json into frozen settings objects.

Layout:
    source.connection   host, port, username, password, database
    source.pool         size, timeout_seconds
    sync                auto-parallelize, megabytes-per-partition,
                        tables-whitelist, tables-blacklist, small-table-bytes
    task_settings.logging
"""

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

from sqlalchemy.engine import URL

from .errors import ConfigurationError
from .table_filter import normalize_table_names

PASSWORD_ENV_VAR = "SYNC_PLANNER_PASSWORD"
DEFAULT_SMALL_TABLE_BYTES = 5_000_000


def get_default_config_path() -> str:
    """Get default settings file path."""
    return str(Path(__file__).parent / "configs" / "task_settings.json")


@dataclass(frozen=True)
class ConnectionSettings:
    host: str
    username: str
    password: str
    database: str
    port: int = 3306

    def url(self) -> URL:
        """Build the SQLAlchemy URL; credentials are escaped by URL.create."""
        return URL.create(
            "mysql+pymysql",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def __repr__(self) -> str:
        return (
            f"ConnectionSettings(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, database={self.database!r})"
        )


@dataclass(frozen=True)
class PoolSettings:
    size: int = 5
    timeout_seconds: float = 3.0


@dataclass(frozen=True)
class SyncSettings:
    auto_parallelize: bool
    megabytes_per_partition: float
    whitelist: FrozenSet[str] = frozenset()
    blacklist: FrozenSet[str] = frozenset()
    small_table_bytes: int = DEFAULT_SMALL_TABLE_BYTES

    @property
    def bytes_per_partition(self) -> int:
        return int(self.megabytes_per_partition * 1024 * 1024)


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    format: str = "text"
    log_to_file: bool = False
    log_path: str = "logs/sync_planner.log"


@dataclass(frozen=True)
class PlannerSettings:
    connection: ConnectionSettings
    sync: SyncSettings
    pool: PoolSettings = field(default_factory=PoolSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def _require(section: Dict, key: str, section_name: str) -> Any:
    if key not in section or section[key] is None:
        raise ConfigurationError(f"Missing required setting '{section_name}.{key}'")
    return section[key]


def _typed(value: Any, expected, key: str) -> Any:
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and bool not in expected:
        raise ConfigurationError(f"Setting '{key}' must be {expected[0].__name__}, got bool")
    if not isinstance(value, expected):
        raise ConfigurationError(
            f"Setting '{key}' must be {expected[0].__name__}, got {type(value).__name__}"
        )
    return value


def _name_list(section: Dict, key: str) -> FrozenSet[str]:
    names = section.get(key) or []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ConfigurationError(f"Setting 'sync.{key}' must be a list of strings")
    return normalize_table_names(names)


def parse_settings(raw: Dict, environ: Optional[Dict[str, str]] = None) -> PlannerSettings:
    """
    Validate a settings dict and build PlannerSettings.

    Args:
        raw: Parsed task_settings.json content
        environ: Environment used for overrides (defaults to os.environ)

    Returns:
        PlannerSettings

    Raises:
        ConfigurationError: On missing keys or wrongly typed values
    """
    environ = os.environ if environ is None else environ
    if not isinstance(raw, dict):
        raise ConfigurationError("Settings root must be a JSON object")

    source = raw.get("source") or {}
    conn = source.get("connection") or {}
    password = environ.get(PASSWORD_ENV_VAR) or _require(conn, "password", "source.connection")

    connection = ConnectionSettings(
        host=_typed(_require(conn, "host", "source.connection"), (str,), "source.connection.host"),
        username=_typed(_require(conn, "username", "source.connection"), (str,), "source.connection.username"),
        password=_typed(password, (str,), "source.connection.password"),
        database=_typed(_require(conn, "database", "source.connection"), (str,), "source.connection.database"),
        port=_typed(conn.get("port", 3306), (int,), "source.connection.port"),
    )

    pool_raw = source.get("pool") or {}
    pool = PoolSettings(
        size=_typed(pool_raw.get("size", 5), (int,), "source.pool.size"),
        timeout_seconds=_typed(pool_raw.get("timeout_seconds", 3.0), (float, int), "source.pool.timeout_seconds"),
    )
    if pool.size < 1:
        raise ConfigurationError("Setting 'source.pool.size' must be >= 1")

    sync_raw = raw.get("sync") or {}
    megabytes = _typed(
        _require(sync_raw, "megabytes-per-partition", "sync"), (float, int), "sync.megabytes-per-partition"
    )
    if not math.isfinite(megabytes) or megabytes <= 0:
        raise ConfigurationError("Setting 'sync.megabytes-per-partition' must be a finite number > 0")
    sync = SyncSettings(
        auto_parallelize=_typed(_require(sync_raw, "auto-parallelize", "sync"), (bool,), "sync.auto-parallelize"),
        megabytes_per_partition=megabytes,
        whitelist=_name_list(sync_raw, "tables-whitelist"),
        blacklist=_name_list(sync_raw, "tables-blacklist"),
        small_table_bytes=_typed(
            sync_raw.get("small-table-bytes", DEFAULT_SMALL_TABLE_BYTES), (int,), "sync.small-table-bytes"
        ),
    )

    log_raw = (raw.get("task_settings") or {}).get("logging") or {}
    log_format = log_raw.get("format", "text")
    if log_format not in ("text", "json"):
        raise ConfigurationError("Setting 'task_settings.logging.format' must be 'text' or 'json'")
    log_settings = LoggingSettings(
        level=str(log_raw.get("level", "INFO")).upper(),
        format=log_format,
        log_to_file=bool(log_raw.get("log_to_file", False)),
        log_path=log_raw.get("log_path", "logs/sync_planner.log"),
    )

    return PlannerSettings(connection=connection, sync=sync, pool=pool, logging=log_settings)


def load_settings(config_path: str = None, environ: Optional[Dict[str, str]] = None) -> PlannerSettings:
    """Load and validate settings from a JSON file."""
    config_path = config_path or get_default_config_path()
    try:
        with open(config_path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Settings file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file is not valid JSON: {config_path}: {e}") from e
    return parse_settings(raw, environ=environ)
