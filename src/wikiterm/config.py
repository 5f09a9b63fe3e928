"""Environment variable configuration.

Settings are loaded in priority order:
  1. Shell environment variables (highest priority)
  2. .env file in current directory
  3. ~/.wikiterm/.env (persistent config, set via `wikiterm env set`)

Run `wikiterm env` to see which settings are configured.

Known settings:
    WIKI_LANGUAGE   ->  Wikipedia language edition (default: en)
    WIKI_API_URL    ->  MediaWiki api.php endpoint, overrides WIKI_LANGUAGE
    WIKI_TIMEOUT    ->  HTTP timeout in seconds (default: 15)
    WIKI_LOG_FILE   ->  write logs to this file
    WIKI_LOG_LEVEL  ->  log level for the log file (default: INFO)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

CONFIG_DIR = Path.home() / ".wikiterm"
PERSISTENT_ENV = CONFIG_DIR / ".env"

DEFAULT_LANGUAGE = "en"
DEFAULT_TIMEOUT = 15

# Load in reverse priority order (later loads don't overwrite existing)
if PERSISTENT_ENV.exists():
    load_dotenv(PERSISTENT_ENV)
load_dotenv()


# --- Persistent config ---

def save_key(name: str, value: str) -> Path:
    """Save a setting to ~/.wikiterm/.env for persistent use."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    replaced = False
    if PERSISTENT_ENV.exists():
        for line in PERSISTENT_ENV.read_text().splitlines():
            if line.startswith(f"{name}="):
                lines.append(f"{name}={value}")
                replaced = True
            else:
                lines.append(line)

    if not replaced:
        lines.append(f"{name}={value}")

    PERSISTENT_ENV.write_text("\n".join(lines) + "\n")
    os.environ[name] = value
    return PERSISTENT_ENV


# --- Accessors ---

def get_language() -> str:
    return os.getenv("WIKI_LANGUAGE") or DEFAULT_LANGUAGE


def get_api_url() -> str:
    url = os.getenv("WIKI_API_URL")
    if url:
        return url
    return f"https://{get_language()}.wikipedia.org/w/api.php"


def get_timeout() -> float:
    raw = os.getenv("WIKI_TIMEOUT", "")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"WIKI_TIMEOUT must be a number of seconds, got {raw!r}") from None


def get_log_file() -> Path | None:
    raw = os.getenv("WIKI_LOG_FILE")
    return Path(raw).expanduser() if raw else None


def get_log_level() -> int:
    name = (os.getenv("WIKI_LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown WIKI_LOG_LEVEL: {name!r}")
    return level


# --- Logging ---

def configure_logging(verbose: bool = False, interactive: bool = False) -> None:
    """Route the package's log records.

    The full-screen reader must never write log lines over the screen, so in
    interactive mode only the optional log file receives records.
    """
    pkg_logger = logging.getLogger("wikiterm")
    pkg_logger.handlers.clear()
    pkg_logger.setLevel(logging.DEBUG)

    log_file = get_log_file()
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(get_log_level())
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        pkg_logger.addHandler(handler)

    if verbose and not interactive:
        stderr_handler = RichHandler(console=Console(stderr=True), show_path=False)
        stderr_handler.setLevel(logging.DEBUG)
        pkg_logger.addHandler(stderr_handler)

    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())


# --- Status check ---

ENV_VARS = {
    "WIKI_LANGUAGE": "Wikipedia language edition (default: en)",
    "WIKI_API_URL": "MediaWiki api.php endpoint (overrides WIKI_LANGUAGE)",
    "WIKI_TIMEOUT": "HTTP timeout in seconds (default: 15)",
    "WIKI_LOG_FILE": "Write logs to this file",
    "WIKI_LOG_LEVEL": "Log level for the log file (default: INFO)",
}

VALID_KEYS = set(ENV_VARS)


def check_env() -> list[tuple[str, bool, str]]:
    """Return list of (var_name, is_set, description) for all known settings."""
    return [(var, bool(os.getenv(var)), desc) for var, desc in ENV_VARS.items()]
