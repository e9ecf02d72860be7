import os
from dataclasses import dataclass
from typing import Dict, Optional

from .logging import get_logger

log = get_logger("config")

DEFAULT_APP_ID = "default-app-id"
DEFAULT_BASE_URL = "http://127.0.0.1:8001"
DEFAULT_TOAST_SECONDS = 3.0


@dataclass(frozen=True)
class InventorySettings:
    app_id: str
    user_id: Optional[str]
    db_path: Optional[str]
    base_url: str
    toast_seconds: float


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    Running the CLI from a subdirectory still finds the project `.env`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Minimal .env reader (no external dependencies).

    - Reads key=value pairs, ignores comments (#/;) and blank lines.
    - Trims single/double quotes around the value.
    - Returns mapping; does not mutate environment.
    """
    env: Dict[str, str] = {}
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return env
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("#") or line.startswith(";"):
                    continue
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip()
                if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
                    v = v[1:-1]
                env[k] = v.strip()
        log.debug(f"Loaded {len(env)} key(s) from .env at {path}")
    except OSError as e:
        log.warning(f"Failed reading .env: {e}")
    return env


def _lookup(key: str, env: Dict[str, str]) -> Optional[str]:
    v = os.environ.get(key)
    if v is None:
        v = env.get(key)
    if v is None:
        return None
    v = v.strip()
    return v or None


def load_app_id(dotenv_dir: str) -> str:
    return _lookup("INVENTORY_APP_ID", _read_dotenv(dotenv_dir)) or DEFAULT_APP_ID


def load_user_id(dotenv_dir: str) -> Optional[str]:
    """Return a fixed identity, or None to sign in anonymously."""
    v = _lookup("INVENTORY_USER_ID", _read_dotenv(dotenv_dir))
    if v:
        log.info("Using INVENTORY_USER_ID from environment/.env")
    return v


def load_db_path(dotenv_dir: str) -> Optional[str]:
    return _lookup("INVENTORY_DB_PATH", _read_dotenv(dotenv_dir))


def load_base_url(dotenv_dir: str, fallback: str = DEFAULT_BASE_URL) -> str:
    return (_lookup("INVENTORY_BASE_URL", _read_dotenv(dotenv_dir)) or fallback).rstrip("/")


def load_toast_seconds(dotenv_dir: str) -> float:
    raw = _lookup("INVENTORY_TOAST_SECONDS", _read_dotenv(dotenv_dir))
    if raw is None:
        return DEFAULT_TOAST_SECONDS
    try:
        value = float(raw)
    except ValueError:
        log.warning(f"Ignoring invalid INVENTORY_TOAST_SECONDS={raw!r}")
        return DEFAULT_TOAST_SECONDS
    return value if value > 0 else DEFAULT_TOAST_SECONDS


def load_settings(dotenv_dir: str) -> InventorySettings:
    """Resolve every setting from the environment first, then `.env`."""
    return InventorySettings(
        app_id=load_app_id(dotenv_dir),
        user_id=load_user_id(dotenv_dir),
        db_path=load_db_path(dotenv_dir),
        base_url=load_base_url(dotenv_dir),
        toast_seconds=load_toast_seconds(dotenv_dir),
    )
