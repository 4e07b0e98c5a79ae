from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union


class _AppFilter(logging.Filter):
    """
    Keep the console readable:
    - taskboard logs pass at the configured level
    - uvicorn access/error logs pass at INFO+
    - other third-party logs only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("taskboard"):
            return True
        if name.startswith("uvicorn"):
            return record.levelno >= logging.INFO
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure root logging with a filtered stderr handler and, when log_file
    is given, a file handler that receives everything.

    Calling it again replaces the handlers it installed earlier.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(min(level, logging.DEBUG) if log_file else level)

    for h in list(root.handlers):
        if getattr(h, "_taskboard", False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_AppFilter())
    ch._taskboard = True  # type: ignore[attr-defined]
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        fh._taskboard = True  # type: ignore[attr-defined]
        root.addHandler(fh)

    logging.captureWarnings(True)
