import logging
from typing import Optional

# ANSI colors per level
LEVEL_COLORS = {
    'DEBUG': '\033[36m',      # Cyan
    'INFO': '\033[32m',       # Green
    'WARNING': '\033[33m',    # Yellow
    'ERROR': '\033[31m',      # Red
    'CRITICAL': '\033[35m',   # Magenta
    'RESET': '\033[0m'
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Builder loggers are named RWRMH.<COMPONENT>
PACKAGE_LOGGER_NAME = "RWRMH"

MODE_TO_LEVEL = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'warn': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
    'fatal': logging.CRITICAL
}


def get_colored_logger(
    name: str,
    level: Optional[int] = None,
    mode: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Create a logger with colored console output and optional file output.

    Args:
        name: Name of the logger (prefixed in every message)
        level: Logging level as integer (e.g., logging.INFO, logging.DEBUG)
        mode: Logging level as a string ('debug', 'info', 'warning', 'error', 'critical').
              Takes precedence over level if both are provided
        log_file: Optional file path to also write uncolored logs to

    Returns:
        Configured logger instance that does not propagate to parent loggers

    Examples:
        >>> logger = get_colored_logger("MULTIPLEX", level=logging.INFO)
        >>> logger = get_colored_logger("BIPARTITE", mode="debug", log_file="build.log")
    """
    logger = logging.getLogger(name)
    logger.propagate = False

    # Calling twice must not duplicate the output
    if logger.hasHandlers():
        logger.handlers.clear()

    log_level = _determine_log_level(level, mode)
    logger.setLevel(log_level)
    logger.addHandler(_create_console_handler(log_level))

    if log_file:
        logger.addHandler(_create_file_handler(log_file, log_level))

    return logger


def _determine_log_level(level: Optional[int], mode: Optional[str]) -> int:
    if mode is not None:
        try:
            return MODE_TO_LEVEL[mode.lower()]
        except KeyError:
            raise ValueError(f"Unknown logging mode: '{mode}'. Available modes: {list(MODE_TO_LEVEL.keys())}")
    if level is not None:
        return level
    return logging.INFO


def _create_console_handler(log_level: int) -> logging.StreamHandler:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ColoredFormatter())
    return console_handler


def _create_file_handler(log_file: str, log_level: int) -> logging.FileHandler:
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return file_handler


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps each message in the color of its level."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, '')
        reset = LEVEL_COLORS['RESET']
        formatter = logging.Formatter(f"{color}{LOG_FORMAT}{reset}", datefmt=DATE_FORMAT)
        return formatter.format(record)


def get_main_logger(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Logger for scripts driving the builders: DEBUG when verbose, INFO otherwise."""
    level = logging.DEBUG if verbose else logging.INFO
    return get_colored_logger("MAIN", level=level, log_file=log_file)


def get_module_logger(module_name: str, debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Logger of a package component, e.g. get_module_logger("multiplex") is named RWRMH.MULTIPLEX."""
    level = logging.DEBUG if debug else logging.INFO
    return get_colored_logger(f"{PACKAGE_LOGGER_NAME}.{module_name.upper()}", level=level, log_file=log_file)


def describe_sparse(label: str, tensor) -> str:
    """One-line summary of a sparse matrix for the build logs: shape, stored entries and density."""
    rows, cols = tuple(tensor.shape)
    nnz = tensor._nnz()
    density = nnz / (rows * cols) if rows and cols else 0.0
    return f"{label} shape: {(rows, cols)}, non-zero elements: {nnz} (density {density:.4f})"


def resolve_logger(logger: Optional[logging.Logger], verbose: bool, module_name: str) -> Optional[logging.Logger]:
    """
    Pick the logger a builder should report to.

    An explicit logger always wins; otherwise a module logger is created only
    when verbose mode is requested, and None (silent) is returned.
    """
    if logger is not None:
        if not isinstance(logger, logging.Logger):
            raise TypeError(f"logger must be a logging.Logger, but got {type(logger).__name__}")
        return logger
    if verbose:
        return get_module_logger(module_name)
    return None
