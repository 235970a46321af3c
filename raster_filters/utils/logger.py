import logging
import sys
from raster_filters.config import settings # Use absolute import

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

# Get the desired level from settings, default to INFO if invalid or not found
log_level_str = getattr(settings, 'LOGGING_LEVEL', 'INFO').upper()
log_level = LOG_LEVEL_MAP.get(log_level_str, logging.INFO)

# Dispatch names its threads "<step>-worker-<index>"
WORKER_MARKER = '-worker-'


class WorkerContextFilter(logging.Filter):
    """Tags each record with the dispatch worker that emitted it.

    ``record.worker`` is the worker thread's name (``gaussian_blur-worker-2``)
    for lines logged from inside a filter's row operation, and ``main`` for
    everything logged by the calling thread.
    """

    def filter(self, record):
        thread_name = record.threadName or ''
        record.worker = thread_name if WORKER_MARKER in thread_name else 'main'
        return True


log_formatter = logging.Formatter('%(asctime)s - %(name)s - [%(worker)s] - %(levelname)s - %(message)s')

# Console Handler
console_handler = logging.StreamHandler(sys.stdout) # Use stdout for console output
console_handler.setFormatter(log_formatter)
console_handler.addFilter(WorkerContextFilter())

# Names handed out by get_logger, so set_log_level can reach all of them
_engine_logger_names = set()


def get_logger(name):
    """
    Gets a logger instance configured with the engine's settings.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Prevent adding handlers multiple times if get_logger is called repeatedly for the same name
    if not logger.handlers:
        logger.addHandler(console_handler)

    # Prevent messages from propagating to the root logger if handlers are added
    logger.propagate = False

    _engine_logger_names.add(name)
    return logger


def set_log_level(level):
    """
    Change the level of every engine logger at runtime.

    Useful for turning on DEBUG to see how rows were partitioned without
    editing settings. Accepts a level name ('DEBUG', 'info', ...) or a
    logging constant and returns the numeric level now in effect.
    """
    global log_level
    if isinstance(level, str):
        if level.upper() not in LOG_LEVEL_MAP:
            raise ValueError(f"Unknown log level '{level}'. Expected one of {sorted(LOG_LEVEL_MAP)}")
        level = LOG_LEVEL_MAP[level.upper()]

    log_level = level
    for name in _engine_logger_names:
        logging.getLogger(name).setLevel(level)
    return level
