from enum import Enum
import configparser
import re
from os import environ
from os.path import exists
from typing import Any, Optional
import logging

from pydantic import BaseModel, Field, ValidationError, computed_field, field_validator

logger = logging.getLogger(__name__)

_PATH = "app{suffix}.conf"
_CONFIG = None

DEFAULT_PUBLISHER_URL = "https://zocdoc-smartscheduling.netlify.app"
DEFAULT_ENRICHMENT_DIRECTORY_URL = "https://public.fhir.flex.optum.com/R4"


def _convert_conf_to_sec(value: str) -> int:
    conversion_map = {"s": 1, "m": 60, "h": 3600, "d": 86400}
    match = re.match(r"^(\d+)([smhd])$", value)
    if not match:
        raise ValueError(
            f"Incorrect input, must be digits with {list(conversion_map.keys())}"
        )

    number = int(match.group(1))
    unit = match.group(2)

    return number * conversion_map[unit]


def _to_bool(v: Any, default: bool) -> bool:
    if v in (None, "", " "):
        return default
    if isinstance(v, str):
        return v.lower() in ("yes", "true", "t", "1")
    return bool(v)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class ConfigApp(BaseModel):
    loglevel: LogLevel = Field(default=LogLevel.info)
    cors_origins: list[str] = Field(default=["*"])

    @field_validator("loglevel", mode="before")
    def validate_loglevel(cls, v: Any) -> Any:
        if v in (None, "", " "):
            return LogLevel.info
        return v

    @field_validator("cors_origins", mode="before")
    def validate_cors_origins(cls, v: Any) -> list[str]:
        if v in (None, "", " "):
            return ["*"]
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore


class Scheduler(BaseModel):
    delay_input: str = Field(default="5m")
    max_logs_entries: int = Field(default=1000, ge=0)
    # Whether the scheduler should start syncing in the background on startup
    automatic_background_update: bool = Field(default=True)
    max_concurrent_publisher_syncs: int = Field(default=1, ge=1, le=32)

    @computed_field
    def delay_input_in_sec(self) -> int:
        return _convert_conf_to_sec(self.delay_input)

    @field_validator("max_logs_entries", mode="before")
    def validate_max_log_entries(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 1000
        return int(v)

    @field_validator("automatic_background_update", mode="before")
    def validate_automatic_background_update(cls, v: Any) -> bool:
        return _to_bool(v, True)

    @field_validator("max_concurrent_publisher_syncs", mode="before")
    def validate_max_concurrent_publisher_syncs(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 1
        return int(v)


class ConfigDatabase(BaseModel):
    dsn: str = Field(default="sqlite:///:memory:")
    create_tables: bool = Field(default=False)
    pool_size: int = Field(default=5, ge=0, lt=100)
    max_overflow: int = Field(default=10, ge=0, lt=100)
    pool_pre_ping: bool = Field(default=False)
    pool_recycle: int = Field(default=3600, ge=0)

    @field_validator("create_tables", "pool_pre_ping", mode="before")
    def validate_bools(cls, v: Any) -> bool:
        return _to_bool(v, False)

    @field_validator("pool_size", mode="before")
    def validate_pool_size(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 5
        return int(v)

    @field_validator("max_overflow", mode="before")
    def validate_max_overflow(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 10
        return int(v)

    @field_validator("pool_recycle", mode="before")
    def validate_pool_recycle(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 3600
        return int(v)


class ConfigStorage(BaseModel):
    use_db_storage: bool = Field(default=False)

    @field_validator("use_db_storage", mode="before")
    def validate_use_db_storage(cls, v: Any) -> bool:
        return _to_bool(v, False)


class ConfigPublishers(BaseModel):
    urls: list[str] = Field(default=[DEFAULT_PUBLISHER_URL])
    timeout: int = Field(default=30, gt=0)
    retries: int = Field(default=3, ge=1)
    backoff: float = Field(default=0.5)

    @field_validator("urls", mode="before")
    def validate_urls(cls, v: Any) -> list[str]:
        if v in (None, "", " "):
            return [DEFAULT_PUBLISHER_URL]
        if isinstance(v, str):
            v = v.split(",")
        urls = [str(u).strip().rstrip("/") for u in v if str(u).strip()]
        return urls if urls else [DEFAULT_PUBLISHER_URL]

    @field_validator("timeout", mode="before")
    def validate_timeout(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 30
        return int(v)

    @field_validator("retries", mode="before")
    def validate_retries(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 3
        return int(v)

    @field_validator("backoff", mode="before")
    def validate_backoff(cls, v: Any) -> float:
        if v in (None, "", " "):
            return 0.5
        return float(v)


class ConfigEnrichment(BaseModel):
    enabled: bool = Field(default=True)
    directory_url: str = Field(default=DEFAULT_ENRICHMENT_DIRECTORY_URL)
    page_size: int = Field(default=200, gt=0)
    match_threshold: float = Field(default=0.6, ge=0, le=1)
    # Seeds a hard-coded sample payload when nothing matched. Only for demos without network access.
    demo_mode: bool = Field(default=False)
    timeout: int = Field(default=30, gt=0)

    @field_validator("enabled", mode="before")
    def validate_enabled(cls, v: Any) -> bool:
        return _to_bool(v, True)

    @field_validator("demo_mode", mode="before")
    def validate_demo_mode(cls, v: Any) -> bool:
        return _to_bool(v, False)

    @field_validator("directory_url", mode="before")
    def validate_directory_url(cls, v: Any) -> str:
        if v in (None, "", " "):
            return DEFAULT_ENRICHMENT_DIRECTORY_URL
        return str(v).rstrip("/")

    @field_validator("page_size", mode="before")
    def validate_page_size(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 200
        return int(v)

    @field_validator("match_threshold", mode="before")
    def validate_match_threshold(cls, v: Any) -> float:
        if v in (None, "", " "):
            return 0.6
        return float(v)

    @field_validator("timeout", mode="before")
    def validate_timeout(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 30
        return int(v)


class ConfigUvicorn(BaseModel):
    swagger_enabled: bool = Field(default=False)
    docs_url: str = Field(default="/docs")
    redoc_url: str = Field(default="/redoc")
    host: str = Field(default="127.0.0.1")
    port: Optional[int] = Field(default=8000, gt=0, lt=65535)
    reload: bool = Field(default=True)
    reload_delay: float = Field(default=1)
    reload_dirs: list[str] = Field(default=["app"])
    use_ssl: bool = Field(default=False)
    ssl_base_dir: str | None = Field(default=None)
    ssl_cert_file: str | None = Field(default=None)
    ssl_key_file: str | None = Field(default=None)

    @field_validator("host", mode="before")
    def validate_host(cls, v: Any) -> str:
        if v in (None, "", " "):
            return "127.0.0.1"
        return str(v)

    @field_validator("port", mode="before")
    def validate_port(cls, v: Any) -> int:
        if v in (None, "", " "):
            return 8000
        return int(v)

    @field_validator("reload", mode="before")
    def validate_reload(cls, v: Any) -> bool:
        return _to_bool(v, True)

    @field_validator("swagger_enabled", "use_ssl", mode="before")
    def validate_flags(cls, v: Any) -> bool:
        return _to_bool(v, False)

    @field_validator("reload_delay", mode="before")
    def validate_reload_delay(cls, v: Any) -> float:
        if v in (None, "", " "):
            return 1.0
        return float(v)

    @field_validator("reload_dirs", mode="before")
    def validate_reload_dirs(cls, v: Any) -> list[str]:
        if v in (None, "", " "):
            return ["app"]
        if isinstance(v, str):
            return [d.strip() for d in v.split(",")]
        return v  # type: ignore


class ConfigStats(BaseModel):
    enabled: bool = Field(default=False)
    host: str | None = Field(default=None)
    port: int | None = Field(default=None)
    module_name: str | None = Field(default=None)

    @field_validator("enabled", mode="before")
    def validate_enabled(cls, v: Any) -> bool:
        return _to_bool(v, False)

    @field_validator("port", mode="before")
    def validate_port(cls, v: Any) -> int | None:
        if v in (None, "", " "):
            return None
        return int(v)


class Config(BaseModel):
    app: ConfigApp
    database: ConfigDatabase
    uvicorn: ConfigUvicorn
    publishers: ConfigPublishers
    storage: ConfigStorage
    enrichment: ConfigEnrichment
    stats: ConfigStats
    scheduler: Scheduler


def read_ini_file(path: str) -> Any:
    ini_data = configparser.ConfigParser()
    ini_data.read(path)

    ret = {}
    for section in ini_data.sections():
        ret[section] = dict(ini_data[section])

    return ret


def apply_env_overrides(ini_data: dict[str, Any]) -> dict[str, Any]:
    """
    Deployment environment variables take precedence over the INI file.
    """
    sources = environ.get("BULK_PUBLISH_SOURCES")
    if sources:
        ini_data.setdefault("publishers", {})["urls"] = sources

    use_db = environ.get("USE_DB_STORAGE")
    if use_db:
        ini_data.setdefault("storage", {})["use_db_storage"] = use_db

    port = environ.get("PORT")
    if port:
        ini_data.setdefault("uvicorn", {})["port"] = port

    for section in ("app", "database", "uvicorn", "publishers", "storage", "enrichment", "stats", "scheduler"):
        ini_data.setdefault(section, {})

    return ini_data


def reset_config() -> None:
    global _CONFIG
    _CONFIG = None


def set_config(config: Config) -> None:
    global _CONFIG
    _CONFIG = config


def get_config(path: str | None = None) -> Config:
    global _CONFIG
    global _PATH

    if _CONFIG is not None:
        return _CONFIG

    if path is None:
        suffix = environ.get("APP_ENV", "")
        if suffix:
            suffix = f".{suffix}"
        path = _PATH.replace("{suffix}", suffix)
        logger.info(f"Reading configuration using file: {path}")

    if not exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    # To be inline with other python code, we use INI-type files for configuration. Since this isn't
    # a standard format for pydantic, we need to do some manual parsing first.
    ini_data = apply_env_overrides(read_ini_file(path))

    try:
        _CONFIG = Config(**ini_data)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e}")
        raise e

    return _CONFIG
