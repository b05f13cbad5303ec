import logging
import os
import sys
from logging.handlers import RotatingFileHandler


def is_debug_env() -> bool:
    """True when VOICEFLOW_DEBUG or DEBUG is set to a truthy value."""
    for key in ("VOICEFLOW_DEBUG", "DEBUG"):
        if os.environ.get(key, "").strip().lower() in ("1", "true", "yes", "on"):
            return True
    return False


def get_data_dir() -> str:
    return os.environ.get("VOICEFLOW_HOME") or os.path.join(os.path.expanduser("~"), ".voiceflow")


def setup_logger(name="voiceflow", log_file="voiceflow.log", level=logging.DEBUG):
    """
    Sets up the application logger with console and file handlers.

    The console only shows warnings unless the debug flag is on; the
    rotating file always receives full detail.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent adding handlers multiple times
    if logger.hasHandlers():
        return logger

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Console Handler (stderr keeps stdout clean for command output)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if is_debug_env() else logging.WARNING)
    console_handler.set_name("console")
    logger.addHandler(console_handler)

    # File Handler (Rotating)
    try:
        log_dir = os.path.join(get_data_dir(), "logs")
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_file), maxBytes=5*1024*1024, backupCount=3
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
    except Exception as e:
        print(f"Failed to setup file logging: {e}", file=sys.stderr)

    logger.propagate = False
    return logger


def set_debug(enabled: bool) -> None:
    """Switch console verbosity at runtime (used by the --debug flag)."""
    for handler in log.handlers:
        if handler.get_name() == "console":
            handler.setLevel(logging.DEBUG if enabled else logging.WARNING)


def is_debug() -> bool:
    for handler in log.handlers:
        if handler.get_name() == "console":
            return handler.level <= logging.DEBUG
    return False


log = setup_logger()
