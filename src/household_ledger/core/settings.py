import os
import re

from dotenv import find_dotenv, load_dotenv

from household_ledger.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_TABLE",
    "SUPABASE_TIMEOUT",
    "DEFAULT_USER",
    "HOST",
    "PORT",
)


_VALUE_PATTERN = re.compile(
    r"""^(?:"(?P<double>(?:[^"\\]|\\.)*)"|'(?P<single>(?:[^'\\]|\\.)*)'|(?P<bare>[^#]*?))\s*(?:\#.*)?$"""
)


def _config_dir_file(name: str) -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if not config_dir:
        return None
    return os.path.join(config_dir, name)


def _find_config_file() -> str:
    explicit = _config_dir_file(CONFIG_FILENAME)
    if explicit:
        return explicit
    for candidate in (os.path.join("config", CONFIG_FILENAME), CONFIG_FILENAME):
        path = os.path.join(os.getcwd(), candidate)
        if os.path.exists(path):
            return path
    return os.path.join(os.getcwd(), CONFIG_FILENAME)


def parse_config_value(raw_value: str) -> str:
    """Drop a trailing ``# comment`` and surrounding quotes from a config value."""
    match = _VALUE_PATTERN.match(raw_value.strip())
    if match is None:
        return raw_value.strip()
    if match.group("double") is not None:
        return match.group("double").replace('\\"', '"').replace("\\\\", "\\")
    if match.group("single") is not None:
        return match.group("single").replace("\\'", "'").replace("\\\\", "\\")
    return match.group("bare")


def read_config_file(path: str | None) -> dict[str, str]:
    """Parse a flat ``KEY: value`` file. Nested YAML is not supported."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            key, sep, raw_value = line.strip().partition(":")
            key = key.strip()
            if not sep or not key or key.startswith("#"):
                continue
            value = parse_config_value(raw_value)
            if value:
                values[key] = value
    return values


def load_environment() -> None:
    """Layer ``.env`` and ``config.yaml`` under whatever the process already has set."""
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _config_dir_file(".env")
    if not dotenv_path or not os.path.exists(dotenv_path):
        dotenv_path = find_dotenv(usecwd=True) or None
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _find_config_file()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def ensure_dirs(*paths: str | None) -> None:
    for path in paths:
        if path and path not in {".", "./"}:
            os.makedirs(path, exist_ok=True)


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_optional_float(name: str, default: float | None = None) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if value <= 0:
        logger.warning("[ENV] %s='%s' must be positive, using default %s.", name, raw, default)
        return default
    return value


def get_env_str(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


_SENSITIVE_ENV_KEYS = (
    "KEY",
    "TOKEN",
    "SECRET",
    "PASSWORD",
    "PASS",
    "AUTH",
    "BEARER",
    "PRIVATE",
)

_ENV_KEYS_TO_LOG = (
    "LOG_LEVEL",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_TABLE",
    "SUPABASE_TIMEOUT",
    "DEFAULT_USER",
)


def _should_mask_env_value(name: str, value: str) -> bool:
    upper_name = name.upper()
    if any(marker in upper_name for marker in _SENSITIVE_ENV_KEYS):
        return True
    if value.startswith("Bearer ") or value.startswith("bearer "):
        return True
    # Supabase keys are JWTs.
    if value.startswith("eyJ") and value.count(".") == 2:
        return True
    return False


def mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    if not _should_mask_env_value(name, sanitized):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    if _CONFIG_FILE_VALUES:
        logger.info("[ENV] Loaded %d value(s) from %s.", len(_CONFIG_FILE_VALUES), _CONFIG_FILE_PATH)
    for key in _ENV_KEYS_TO_LOG:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


DEFAULT_TABLE = "transactions"
DEFAULT_USER_ID = "ray"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


load_environment()

LOG_DIR = os.getenv("LOG_DIR")
CONFIG_DIR = os.getenv("CONFIG_DIR")

ensure_dirs(LOG_DIR, CONFIG_DIR)

SUPABASE_TABLE = get_env_str("SUPABASE_TABLE", DEFAULT_TABLE)
DEFAULT_USER = get_env_str("DEFAULT_USER", DEFAULT_USER_ID)
