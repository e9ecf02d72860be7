import logging
import os

ROOT_LOGGER = "landscape_inventory"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_env() -> int:
    raw = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    if raw == "WARN":
        raw = "WARNING"
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


def _configure_root() -> logging.Logger:
    """Attach handlers to the package parent logger, once per process.

    LOG_LEVEL picks the level and LOG_FILE adds an appending file handler.
    Records stop at this logger instead of reaching the root logger.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    level = _level_from_env()
    root.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    file_error = None
    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as exc:
            file_error = exc

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False
    if file_error is not None:
        root.warning(f"LOG_FILE {log_file!r} not writable ({file_error}); logging to the console only")
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger `landscape_inventory.<name>` sharing the package handlers."""
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
