import logging
import uuid
import gzip
import shutil
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from time import perf_counter
from typing import Optional


LOG_DIR = Path("logs")
LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | run_id=%(run_id)s | "
    "%(filename)s:%(lineno)d | %(message)s"
)


# ----------------------------------------------------------------------
# Custom Filters
# ----------------------------------------------------------------------
class CorrelationFilter(logging.Filter):
    """Attach correlation/run ID to every log record."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = self.run_id
        return True


# ----------------------------------------------------------------------
# Log rotation with gzip compression
# ----------------------------------------------------------------------
def _rotator(source, dest):
    with open(source, "rb") as sf, gzip.open(dest + ".gz", "wb") as df:
        shutil.copyfileobj(sf, df)
    Path(source).unlink()


def _namer(name):
    return name


# ----------------------------------------------------------------------
# Logger Setup
# ----------------------------------------------------------------------
def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = "netinput.log",
    run_id: str = None,
    retention_days: int = 30,
) -> logging.Logger:
    """
    Create or retrieve a logger:
    - Console + rotating file (daily, compress, retain N days)
    - Correlation ID (run_id); one per validator instance
    - Pass log_file=None for console only

    Handlers are attached once per logger name; later calls only adjust the level.
    """

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    if logger.handlers:
        return logger

    run_id = run_id or str(uuid.uuid4())
    corr_filter = CorrelationFilter(run_id)
    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG)
    ch.setFormatter(fmt)
    ch.addFilter(corr_filter)
    logger.addHandler(ch)

    if log_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = TimedRotatingFileHandler(
            LOG_DIR / log_file, when="midnight", backupCount=retention_days, encoding="utf-8"
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        fh.rotator = _rotator
        fh.namer = _namer
        fh.addFilter(corr_filter)
        logger.addHandler(fh)

    return logger


class RunLoggerAdapter(logging.LoggerAdapter):
    """
    Per-instance view of a shared logger: stamps the correlation id and
    applies its own threshold on top of the shared logger's level.
    """

    def __init__(self, logger: logging.Logger, run_id: str, level: int = logging.NOTSET):
        super().__init__(logger, {"run_id": run_id})
        self.run_level = level

    def isEnabledFor(self, level: int) -> bool:
        if level < self.run_level:
            return False
        return self.logger.isEnabledFor(level)


def bind_run_id(logger: logging.Logger, run_id: str, log_level: Optional[str] = None) -> RunLoggerAdapter:
    """
    Wrap a shared logger so every record carries the given correlation id.

    log_level only filters this wrapper; the shared logger must be at least
    as verbose for the instance threshold to matter.
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO) if log_level else logging.NOTSET
    return RunLoggerAdapter(logger, run_id, level)


# ----------------------------------------------------------------------
# Metrics Logging Helper
# ----------------------------------------------------------------------
def log_metric(logger: logging.Logger, name: str, value: int, **labels):
    """Log a structured metric in a consistent format."""
    label_str = " ".join(f"{k}={v}" for k, v in labels.items())
    logger.info("METRIC | %s=%s %s", name, value, label_str)


# ----------------------------------------------------------------------
# Stage Timing Context Manager
# ----------------------------------------------------------------------
class log_stage:
    """Context manager for timing a stage (batch run, lookup)."""

    def __init__(self, logger: logging.Logger, stage: str):
        self.logger = logger
        self.stage = stage

    def __enter__(self):
        self.start = perf_counter()
        self.logger.debug("Stage '%s' started", self.stage)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = perf_counter() - self.start
        if exc_type is None:
            self.logger.info("Stage '%s' completed in %.2fs", self.stage, self.duration)
        else:
            self.logger.warning("Stage '%s' aborted after %.2fs (%s)", self.stage, self.duration, exc_type.__name__)
