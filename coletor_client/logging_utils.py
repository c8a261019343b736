from __future__ import annotations

import logging
from pathlib import Path
import sys

APP_LOGGER_PREFIX = "coletor_client"


class _ConsoleNoiseFilter(logging.Filter):
    """Let the app's own records through; third-party loggers only at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == APP_LOGGER_PREFIX or record.name.startswith(APP_LOGGER_PREFIX + "."):
            return True
        return record.levelno >= logging.WARNING


def configure_logging(
    log_dir: str | Path | None = None,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path | None:
    """Install console and (optionally) file handlers on the root logger.

    Call once at startup. Returns the log file path, or None when no
    directory was given or it could not be created.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_file: Path | None = None
    if log_dir is not None:
        try:
            directory = Path(log_dir)
            directory.mkdir(parents=True, exist_ok=True)
            log_file = directory / "coletor.log"
            file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        except OSError as exc:
            logging.getLogger(__name__).warning("File logging disabled: %s", exc)
            log_file = None
        else:
            file_handler.setLevel(file_level)
            file_handler.setFormatter(fmt)
            root.addHandler(file_handler)

    logging.captureWarnings(True)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)
    return log_file
